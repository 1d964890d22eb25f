import logging
from typing import Optional

import httpx

from config import Settings
from errors import CompletionFailed

logger = logging.getLogger(__name__)


class CompletionClient:
    """Client for an OpenAI-compatible chat completion endpoint."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.completion_base_url.rstrip('/')
        self.api_key = settings.openai_api_key
        self.model = settings.completion_model
        self.temperature = settings.completion_temperature
        self.timeout = settings.completion_timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
            transport=self.transport,
        )

    async def complete(self, messages: list[dict[str, str]]) -> str:
        url = f"{self.base_url}/v1/chat/completions"
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }

        logger.info(f"Sending request to completion service: {url}")
        logger.info(f"Prompt length: {sum(len(m.get('content', '')) for m in messages)} characters")

        try:
            async with self._client() as client:
                resp = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Error calling LLM: {type(e).__name__}: {e}")
            raise CompletionFailed(str(e)) from e

        logger.info(f"Response status code: {resp.status_code}")
        if resp.status_code >= 400:
            logger.error(f"Completion service error: {resp.text}")
            raise CompletionFailed(resp.text, status=resp.status_code)

        try:
            result = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected completion response: {resp.text[:200]}")
            raise CompletionFailed(f"unexpected response shape: {e}", status=resp.status_code) from e

        if result is None:
            result = ""
        if not isinstance(result, str):
            logger.error(f"Completion content is not text: {resp.text[:200]}")
            raise CompletionFailed(
                f"unexpected response shape: content is {type(result).__name__}", status=resp.status_code
            )
        logger.info(f"Response length: {len(result)} characters")
        logger.debug(f"Full response: {result}")
        return result

    async def check_connectivity(self) -> bool:
        url = f"{self.base_url}/v1/models"
        try:
            async with self._client() as client:
                resp = await client.get(url, timeout=5)
            return resp.status_code == 200
        except httpx.HTTPError:
            return False
