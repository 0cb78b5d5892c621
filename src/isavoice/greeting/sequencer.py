"""Per-page greeting state machine.

Each page moves NOT_GREETED -> GREETING -> GREETED at most once per
session. The first dashboard visit of the day is preceded by a separate
welcome greeting, tracked per calendar day rather than per session.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from .messages import compose_greeting, first_access_greeting
from .snapshot import PageType, SnapshotBuilder, UserProfile

if TYPE_CHECKING:
    from ..state import GreetingState, VoicePreferences
    from ..tts.pipeline import TTSPipeline

logger = logging.getLogger(__name__)


class GreetingPhase(str, Enum):
    NOT_GREETED = "not_greeted"
    GREETING = "greeting"
    GREETED = "greeted"


class GreetingSequencer:
    """Decides when a page greets the user and hands the text to the pipeline.

    Triggering greet() repeatedly for the same page (re-renders, rapid
    navigation) yields at most one greeting per session: an in-flight latch
    blocks concurrent attempts, the session flag blocks later ones.

    Example:
        sequencer = GreetingSequencer(pipeline, state, preferences, builder, profile)
        await sequencer.greet(PageType.DASHBOARD)
    """

    def __init__(
        self,
        pipeline: "TTSPipeline",
        state: "GreetingState",
        preferences: "VoicePreferences",
        builder: SnapshotBuilder,
        profile: UserProfile,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.pipeline = pipeline
        self.state = state
        self.preferences = preferences
        self.builder = builder
        self.profile = profile
        self.clock = clock
        self._in_flight: set[PageType] = set()
        self._greeted: set[PageType] = set()

    def phase(self, page: PageType | str) -> GreetingPhase:
        page = PageType.parse(page)
        if page in self._in_flight:
            return GreetingPhase.GREETING
        if page in self._greeted or self.state.was_page_greeted(page.value):
            return GreetingPhase.GREETED
        return GreetingPhase.NOT_GREETED

    async def greet(self, page: PageType | str) -> bool:
        """Run the greeting for a page if it is due.

        Args:
            page: Page type or tag being visited

        Returns:
            True if a greeting was handed to the pipeline
        """
        page = PageType.parse(page)

        if not self.preferences.is_voice_enabled():
            logger.info("Voice is globally disabled")
            return False
        if page is PageType.OTHER:
            return False
        if page in self._greeted or page in self._in_flight:
            return False
        if self.state.was_page_greeted(page.value):
            self._greeted.add(page)
            return False

        self._in_flight.add(page)
        greeted = False
        try:
            if page is PageType.DASHBOARD and self.state.is_first_access_today():
                await self.pipeline.speak(
                    first_access_greeting(self.profile.name, self.clock())
                )
                self.state.mark_greeted_today()
                self._mark_greeted(page)
                greeted = True

            greeted = await self._greet_page(page) or greeted
        except Exception as e:
            # Host data providers may raise anything
            logger.error(f"ISA greeting error on {page.value}: {e}")
        finally:
            self._in_flight.discard(page)
        return greeted

    async def _greet_page(self, page: PageType) -> bool:
        snapshot = await self.builder.build(page, self.profile)
        message = compose_greeting(page, snapshot, self.clock())
        if not message:
            return False

        result = await self.pipeline.speak(message)
        logger.debug(f"Greeting for {page.value}: {result}")
        self._mark_greeted(page)
        return True

    def _mark_greeted(self, page: PageType) -> None:
        self._greeted.add(page)
        self.state.mark_page_greeted(page.value)

    async def speak_custom(self, message: str) -> dict[str, Any]:
        """Speak an arbitrary message through the same pipeline."""
        return await self.pipeline.speak(message)
