"""Vapi live-call control client using aiohttp — implements VoicePort."""

from typing import Optional

import aiohttp

from homevoice.config import VoiceConfig
from homevoice.ports.outbound import SpeakResult


class VapiClient:
    """Speaks text on the active call through the Vapi control URL."""

    def __init__(self, config: Optional[VoiceConfig] = None):
        self._config = config or VoiceConfig()

    @property
    def is_configured(self) -> bool:
        return bool(self._config.vapi_control_url)

    @property
    def control_url(self) -> str:
        return self._config.vapi_control_url

    def set_control_url(self, url: str):
        """Each call gets its own control URL; the webhook hands it over."""
        self._config.vapi_control_url = url.strip()

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self._config.vapi_api_key:
            headers["Authorization"] = f"Bearer {self._config.vapi_api_key}"
        return headers

    async def speak(self, text: str) -> SpeakResult:
        text = text.strip()
        if not text:
            return SpeakResult(success=False, error="empty text")
        if not self.is_configured:
            return SpeakResult(success=False, text=text, error="Vapi control URL not configured")

        payload = {"type": "say", "content": text}
        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self._config.vapi_control_url, json=payload, headers=self._headers(),
                ) as resp:
                    if resp.status >= 400:
                        body = await resp.text()
                        raise RuntimeError(f"HTTP {resp.status}: {body[:200]}")
            return SpeakResult(success=True, text=text)
        except Exception as e:
            return SpeakResult(success=False, text=text, error=str(e))
