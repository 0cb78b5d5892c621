"""Remote speech-generation providers.

This module provides a registry pattern for managing remote speech
providers, allowing runtime selection from configuration.
"""

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from .base import RemoteSpeechProvider

from .edge import EdgeFunctionProvider
from .elevenlabs import ElevenLabsProvider

__all__ = ["EdgeFunctionProvider", "ElevenLabsProvider", "ProviderRegistry"]


class ProviderRegistry:
    """Registry for managing remote speech providers.

    This class maintains a registry of available providers,
    allowing registration and retrieval by name.
    """

    _providers: ClassVar[dict[str, type["RemoteSpeechProvider"]]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type["RemoteSpeechProvider"]) -> None:
        """Register a speech provider.

        Args:
            name: Name to register the provider under
            provider_class: Provider class that implements RemoteSpeechProvider
        """
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type["RemoteSpeechProvider"]:
        """Get a provider class by name.

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._providers:
            available = ", ".join(cls._providers.keys()) if cls._providers else "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            )
        return cls._providers[name]

    @classmethod
    def create(cls, name: str, **kwargs: Any) -> "RemoteSpeechProvider":
        """Instantiate a provider by name with constructor arguments.

        Raises:
            KeyError: If provider name not found
            TTSError: If the provider cannot be configured
        """
        return cls.get(name)(**kwargs)

    @classmethod
    def names(cls) -> list[str]:
        return list(cls._providers)


# Register providers
ProviderRegistry.register("edge", EdgeFunctionProvider)
ProviderRegistry.register("elevenlabs", ElevenLabsProvider)
