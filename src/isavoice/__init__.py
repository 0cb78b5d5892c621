"""isavoice - single-flight speech playback for the ISA banking assistant."""

__version__ = "0.1.0"
__all__ = ["GreetingSequencer", "PlaybackCoordinator", "TTSPipeline"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "TTSPipeline":
        from .tts.pipeline import TTSPipeline

        return TTSPipeline
    if name == "PlaybackCoordinator":
        from .audio.coordinator import PlaybackCoordinator

        return PlaybackCoordinator
    if name == "GreetingSequencer":
        from .greeting.sequencer import GreetingSequencer

        return GreetingSequencer
    raise AttributeError(f"module 'isavoice' has no attribute {name!r}")
