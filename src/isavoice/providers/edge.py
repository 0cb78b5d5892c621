"""Speech provider backed by the hosted text-to-speech edge function."""

import base64
import binascii
import logging
import os

import httpx

from ..tts.errors import (
    TTSAPIError,
    TTSAuthError,
    TTSError,
    TTSRateLimitError,
    TTSTransportError,
)
from ..tts.models import AudioPayload
from .base import RemoteSpeechProvider

logger = logging.getLogger(__name__)


class EdgeFunctionProvider(RemoteSpeechProvider):
    """Remote speech provider calling the backend's text-to-speech function.

    The function answers with one of:
        {"audio": "<base64>", "contentType": "audio/mpeg"}
        {"audioUrl": "https://..."}
        raw audio/* body
        {"error": "...", "loading": true}   (rate limited)
        {"error": "..."}                    (remote failure)
    """

    name = "edge"

    def __init__(
        self,
        endpoint: str | None = None,
        api_key: str | None = None,
        timeout: float | None = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize edge function provider.

        Args:
            endpoint: Function URL. If not provided, reads from
                     ISAVOICE_SPEECH_ENDPOINT environment variable.
            api_key: Publishable backend key sent as bearer token and apikey
                    header. If not provided, reads from ISAVOICE_API_KEY.
            timeout: Request timeout in seconds (None waits indefinitely)
            transport: Optional httpx transport (tests use httpx.MockTransport)

        Raises:
            TTSError: If no endpoint is configured
        """
        self.endpoint = endpoint or os.getenv("ISAVOICE_SPEECH_ENDPOINT")
        if not self.endpoint:
            raise TTSError(
                "Speech endpoint not configured. Set ISAVOICE_SPEECH_ENDPOINT "
                "or provide endpoint parameter."
            )
        self._api_key = api_key or os.getenv("ISAVOICE_API_KEY")
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["apikey"] = self._api_key
        return headers

    async def synthesize(self, text: str) -> AudioPayload:
        """Request speech for text from the edge function.

        Raises:
            TTSAPIError: If the function returned an error payload
            TTSRateLimitError: If the function signalled rate limiting
            TTSAuthError: If the key was refused
            TTSTransportError: On network failure, timeout or bare non-2xx
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        logger.debug(f"Requesting speech for: '{text[:50]}'")
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.endpoint, json={"text": text.strip()}, headers=self._headers()
                )
                result = self._parse_response(response)

                if isinstance(result, str):
                    logger.debug(f"Downloading audio from {result}")
                    download = await client.get(result)
                    download.raise_for_status()
                    if not download.content:
                        raise TTSAPIError("Audio URL returned no data", download.status_code)
                    content_type = download.headers.get("content-type", "audio/mpeg")
                    return AudioPayload(
                        download.content, content_type.split(";")[0], self.name
                    )
                return result

        except httpx.TimeoutException as e:
            raise TTSTransportError(f"Speech request timed out: {e}", e) from e
        except httpx.HTTPError as e:
            raise TTSTransportError(f"Speech request failed: {e}", e) from e

    def _parse_response(self, response: httpx.Response) -> AudioPayload | str:
        status = response.status_code
        content_type = response.headers.get("content-type", "").split(";")[0].strip()

        if content_type.startswith("audio/"):
            if response.is_success and response.content:
                return AudioPayload(response.content, content_type, self.name)
            raise TTSTransportError(f"Speech service returned HTTP {status}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict):
            error = data.get("error")
            if status == 429 or data.get("loading"):
                raise TTSRateLimitError(f"Rate limit exceeded: {error or 'try later'}")
            if error:
                if status in (401, 403):
                    raise TTSAuthError(f"Authentication failed: {error}")
                raise TTSAPIError(f"Speech service error: {error}", status)
            if not response.is_success:
                raise TTSTransportError(f"Speech service returned HTTP {status}")

            if data.get("audio"):
                try:
                    audio = base64.b64decode(data["audio"], validate=True)
                except (binascii.Error, TypeError) as e:
                    raise TTSAPIError("Invalid base64 audio in response", status, e) from e
                content_type = data.get("contentType")
                if not isinstance(content_type, str) or not content_type:
                    content_type = "audio/mpeg"
                return AudioPayload(audio, content_type, self.name)

            url = data.get("audioUrl") or data.get("url")
            if url:
                if not isinstance(url, str):
                    raise TTSAPIError(f"Invalid audio URL in response: {url!r}", status)
                return url

            raise TTSAPIError("No audio data received", status)

        if status == 429:
            raise TTSRateLimitError("Rate limit exceeded")
        if status in (401, 403):
            raise TTSAuthError(f"Authentication failed: HTTP {status}")
        raise TTSTransportError(f"Speech service returned HTTP {status}")
