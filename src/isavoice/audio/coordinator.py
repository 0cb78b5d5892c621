"""Single-flight playback coordinator.

Only one audio clip or speech utterance is audible at a time. Every call
site (greetings, chat replies, manual replays) goes through one
PlaybackCoordinator, which stops whatever is active before starting the
next resource. There is no queue: the newest request wins.

Requests whose playback starts after an async gap (a network fetch) take a
generation token from begin_request(). Any later request or stop_all()
bumps the generation, and a stale token is refused at play time, so a
late-resolving fetch can never revive superseded audio.
"""

import asyncio
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, Protocol

from ..tts.errors import PlaybackError

if TYPE_CHECKING:
    from .synthesis import SpeechOptions, SystemSpeechSynthesizer

logger = logging.getLogger(__name__)


class Playable(Protocol):
    """A resource that can be played once and stopped at any time."""

    async def play(self) -> None:
        """Play to the end. Returns early without error when stopped."""
        ...

    def stop(self) -> None:
        """Stop output synchronously. Must be idempotent."""
        ...


@dataclass(eq=False)
class ActiveAudioHandle:
    """The single in-flight playback unit tracked by the coordinator."""

    resource: Playable
    kind: Literal["audio", "speech"]
    generation: int
    cleanup: Callable[[], None] | None = None
    on_ended: Callable[[], None] | None = None
    on_error: Callable[[BaseException], None] | None = None
    _released: bool = field(default=False, repr=False)

    def release(self) -> None:
        """Run the cleanup callback exactly once."""
        if self._released:
            return
        self._released = True
        if self.cleanup is not None:
            try:
                self.cleanup()
            except Exception as e:
                logger.warning(f"Audio cleanup failed: {e}")


class PlaybackCoordinator:
    """Arbiter of what is audible right now.

    Example:
        coordinator = PlaybackCoordinator(synthesizer=SystemSpeechSynthesizer())

        generation = coordinator.begin_request()
        audio = await provider.synthesize(text)          # may be slow
        await coordinator.play_exclusively(clip, generation=generation)
        # returns False without playing if another request came in meanwhile
    """

    def __init__(self, synthesizer: "SystemSpeechSynthesizer | None" = None) -> None:
        self.synthesizer = synthesizer
        self._active: ActiveAudioHandle | None = None
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()
        self._ids = itertools.count(1)

    @property
    def current_handle(self) -> ActiveAudioHandle | None:
        return self._active

    @property
    def generation(self) -> int:
        return self._generation

    def begin_request(self) -> int:
        """Supersede everything in flight and return a fresh generation token."""
        self._stop_active()
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def is_playing(self) -> bool:
        """True if an audio clip or a speech utterance is active."""
        return self._active is not None

    def stop_all(self) -> None:
        """Stop the active handle, if any, and cancel pending playback.

        Safe to call at any time, including with nothing active.
        """
        self._stop_active()
        self._generation += 1

    async def play_exclusively(
        self,
        resource: Playable,
        on_ended: Callable[[], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        *,
        cleanup: Callable[[], None] | None = None,
        generation: int | None = None,
    ) -> bool:
        """Stop the active handle and play resource to completion.

        Args:
            resource: Audio resource to play
            on_ended: Called after natural completion
            on_error: Called with the exception when playback fails
            cleanup: Called once when the handle is discarded for any reason
            generation: Token from begin_request(); stale tokens are refused

        Returns:
            True if playback completed naturally, False if the request was
            stale or superseded while playing

        Raises:
            PlaybackRejectedError: If the platform refused audio output
            PlaybackError: If playback failed for any other reason
        """
        handle = self._register(resource, "audio", generation, cleanup, on_ended, on_error)
        if handle is None:
            return False
        return await self._run(handle)

    def speak_exclusively(
        self,
        text: str,
        options: "SpeechOptions | None" = None,
        *,
        generation: int | None = None,
    ) -> asyncio.Task | None:
        """Speak text with native synthesis, stopping any other output first.

        The previous handle is stopped before this method returns; the
        utterance itself runs in a background task.

        Returns:
            The task driving the utterance, or None when native synthesis is
            unsupported or the generation token is stale
        """
        if self.synthesizer is None or not self.synthesizer.is_supported():
            logger.warning("Native speech synthesis not supported on this platform")
            return None

        utterance = self.synthesizer.utterance(text, options)
        handle = self._register(
            utterance,
            "speech",
            generation,
            None,
            options.on_end if options else None,
            options.on_error if options else None,
        )
        if handle is None:
            return None

        logger.debug(f"Speaking text exclusively: '{text[:50]}'")
        task = asyncio.get_running_loop().create_task(
            self._run_detached(handle), name=f"utterance-{next(self._ids)}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _register(
        self,
        resource: Playable,
        kind: Literal["audio", "speech"],
        generation: int | None,
        cleanup: Callable[[], None] | None,
        on_ended: Callable[[], None] | None,
        on_error: Callable[[BaseException], None] | None,
    ) -> ActiveAudioHandle | None:
        if generation is not None and not self.is_current(generation):
            logger.debug(f"Discarding stale {kind} request (generation {generation})")
            if cleanup is not None:
                ActiveAudioHandle(resource, kind, generation, cleanup).release()
            return None

        self._stop_active()
        if generation is None:
            self._generation += 1
            generation = self._generation

        handle = ActiveAudioHandle(
            resource=resource,
            kind=kind,
            generation=generation,
            cleanup=cleanup,
            on_ended=on_ended,
            on_error=on_error,
        )
        self._active = handle
        return handle

    def _stop_active(self) -> None:
        handle = self._active
        if handle is None:
            return
        self._active = None
        try:
            handle.resource.stop()
        except Exception as e:
            logger.warning(f"Failed to stop active {handle.kind}: {e}")
        handle.release()
        logger.debug(f"Stopped active {handle.kind} (generation {handle.generation})")

    async def _run(self, handle: ActiveAudioHandle) -> bool:
        try:
            await handle.resource.play()
        except asyncio.CancelledError:
            if self._active is handle:
                self._stop_active()
            raise
        except Exception as e:
            error = e if isinstance(e, PlaybackError) else PlaybackError(
                f"Playback failed: {e}", e
            )
            superseded = self._active is not handle
            if not superseded:
                self._active = None
            handle.release()
            if superseded:
                # stop() on a superseded resource may surface as an error
                logger.debug(f"Superseded {handle.kind} ended with: {e}")
                return False
            if handle.on_error is not None:
                handle.on_error(error)
            if error is e:
                raise
            raise error from e

        if self._active is not handle:
            return False

        self._active = None
        handle.release()
        if handle.on_ended is not None:
            handle.on_ended()
        return True

    async def _run_detached(self, handle: ActiveAudioHandle) -> bool:
        try:
            return await self._run(handle)
        except PlaybackError as e:
            logger.error(f"Native speech failed: {e}")
            return False
