"""Custom TTS and playback exceptions."""


class TTSError(Exception):
    """Base exception for TTS-related errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class TTSAuthError(TTSError):
    """Exception raised for authentication failures.

    This typically occurs when:
    - API key is missing or invalid
    - Account has insufficient credits
    - API key permissions are insufficient
    """

    pass


class TTSAPIError(TTSError):
    """Exception raised when the speech service answers with an error payload.

    Distinct from TTSTransportError: the remote side was reached and
    explicitly refused or failed the request.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code


class TTSRateLimitError(TTSAPIError):
    """Exception raised when the speech service signals rate limiting."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message, 429, original_error)


class TTSTransportError(TTSError):
    """Exception raised when the speech service cannot be reached.

    This typically occurs when:
    - Network is unreachable or the connection drops
    - The request times out
    - The server answers non-2xx without an error payload
    """

    pass


class PlaybackError(TTSError):
    """Exception raised when audio or speech output fails."""

    pass


class PlaybackRejectedError(PlaybackError):
    """Exception raised when the platform refuses audio output.

    Raised when no output device can be opened. Callers treat it like a
    transport failure and fall back to native speech synthesis.
    """

    pass


class SynthesisUnsupportedError(PlaybackError):
    """Exception raised when no native speech synthesis is available."""

    pass
