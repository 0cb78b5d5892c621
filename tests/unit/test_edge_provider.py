"""Unit tests for EdgeFunctionProvider using httpx.MockTransport."""

import base64
import json
import os
import sys
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from isavoice.providers.edge import EdgeFunctionProvider
from isavoice.tts.errors import (
    TTSAPIError,
    TTSAuthError,
    TTSError,
    TTSRateLimitError,
    TTSTransportError,
)

ENDPOINT = "https://backend.example/functions/v1/text-to-speech"


def make_provider(handler, api_key: str | None = "anon-key") -> EdgeFunctionProvider:
    return EdgeFunctionProvider(
        endpoint=ENDPOINT, api_key=api_key, transport=httpx.MockTransport(handler)
    )


class TestEdgeFunctionProviderInitialization:
    """Test endpoint and key resolution."""

    def test_missing_endpoint_raises(self) -> None:
        with pytest.raises(TTSError, match="Speech endpoint not configured"):
            EdgeFunctionProvider()

    def test_endpoint_and_key_from_environment(self) -> None:
        with patch.dict(
            os.environ,
            {"ISAVOICE_SPEECH_ENDPOINT": ENDPOINT, "ISAVOICE_API_KEY": "env-key"},
        ):
            provider = EdgeFunctionProvider()

        assert provider.endpoint == ENDPOINT
        assert provider._headers()["Authorization"] == "Bearer env-key"
        assert provider._headers()["apikey"] == "env-key"

    def test_no_key_sends_no_auth_headers(self) -> None:
        provider = make_provider(lambda request: httpx.Response(200), api_key=None)
        assert "Authorization" not in provider._headers()


class TestEdgeFunctionProviderResponses:
    """Test the accepted response shapes."""

    @pytest.mark.asyncio
    async def test_base64_json_response(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "audio": base64.b64encode(b"mp3 bytes").decode(),
                    "contentType": "audio/mpeg",
                },
            )

        payload = await make_provider(handler).synthesize("  Olá, Ana!  ")

        assert payload.audio == b"mp3 bytes"
        assert payload.content_type == "audio/mpeg"
        assert payload.source == "edge"
        assert json.loads(requests[0].content) == {"text": "Olá, Ana!"}
        assert requests[0].headers["authorization"] == "Bearer anon-key"
        assert requests[0].headers["apikey"] == "anon-key"

    @pytest.mark.asyncio
    async def test_raw_audio_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, content=b"wav bytes", headers={"content-type": "audio/wav"}
            )

        payload = await make_provider(handler).synthesize("Oi")

        assert payload.audio == b"wav bytes"
        assert payload.content_type == "audio/wav"

    @pytest.mark.asyncio
    async def test_audio_url_is_downloaded(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(200, json={"audioUrl": "https://cdn.example/a.mp3"})
            assert str(request.url) == "https://cdn.example/a.mp3"
            return httpx.Response(
                200, content=b"downloaded", headers={"content-type": "audio/mpeg"}
            )

        payload = await make_provider(handler).synthesize("Oi")

        assert payload.audio == b"downloaded"

    @pytest.mark.asyncio
    async def test_missing_audio_raises_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": True})

        with pytest.raises(TTSAPIError, match="No audio data received"):
            await make_provider(handler).synthesize("Oi")

    @pytest.mark.asyncio
    async def test_empty_text_raises_value_error(self) -> None:
        provider = make_provider(lambda request: httpx.Response(200))
        with pytest.raises(ValueError, match="Text cannot be empty"):
            await provider.synthesize("   ")


class TestEdgeFunctionProviderErrors:
    """Test error classification."""

    @pytest.mark.asyncio
    async def test_error_payload_raises_api_error_with_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "quota exceeded"})

        with pytest.raises(TTSAPIError, match="quota exceeded") as exc_info:
            await make_provider(handler).synthesize("Oi")

        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, TTSRateLimitError)

    @pytest.mark.asyncio
    async def test_loading_flag_raises_rate_limit(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": "busy", "loading": True})

        with pytest.raises(TTSRateLimitError) as exc_info:
            await make_provider(handler).synthesize("Oi")

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_http_429_raises_rate_limit(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, text="Too Many Requests")

        with pytest.raises(TTSRateLimitError):
            await make_provider(handler).synthesize("Oi")

    @pytest.mark.asyncio
    async def test_refused_key_raises_auth_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "Invalid JWT"})

        with pytest.raises(TTSAuthError, match="Invalid JWT"):
            await make_provider(handler).synthesize("Oi")

    @pytest.mark.asyncio
    async def test_bare_non_success_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(TTSTransportError, match="HTTP 502"):
            await make_provider(handler).synthesize("Oi")

    @pytest.mark.asyncio
    async def test_network_failure_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TTSTransportError, match="Speech request failed"):
            await make_provider(handler).synthesize("Oi")

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TTSTransportError, match="timed out"):
            await make_provider(handler).synthesize("Oi")

    @pytest.mark.asyncio
    async def test_invalid_base64_raises_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"audio": "***not base64***"})

        with pytest.raises(TTSAPIError, match="Invalid base64"):
            await make_provider(handler).synthesize("Oi")

    @pytest.mark.asyncio
    async def test_non_string_audio_url_raises_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"audioUrl": 123})

        with pytest.raises(TTSAPIError, match="Invalid audio URL"):
            await make_provider(handler).synthesize("Oi")

    @pytest.mark.asyncio
    async def test_non_string_content_type_falls_back_to_mpeg(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"audio": base64.b64encode(b"mp3").decode(), "contentType": 7},
            )

        payload = await make_provider(handler).synthesize("Oi")

        assert payload.content_type == "audio/mpeg"
