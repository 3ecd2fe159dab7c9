"""Async wrapper around the AITunnel API endpoints."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import httpx
from openai import AsyncOpenAI

from chicpick.config.settings import ClosetSettings


class AITunnelRequestError(RuntimeError):
    """Raised when AITunnel cannot be reached or responds with an error status code."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


logger = logging.getLogger(__name__)


class AITunnelClient:
    """Provides chat completion and health calls against the OpenAI-compatible proxy."""

    def __init__(self, settings: ClosetSettings) -> None:
        base_url = settings.aitunnel_base_url.rstrip("/")
        self._settings = settings
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=settings.request_timeout,
            headers={
                "Authorization": f"Bearer {settings.aitunnel_api_key}",
            },
        )
        self._openai = AsyncOpenAI(
            api_key=settings.aitunnel_api_key or "missing-key",
            base_url=base_url,
            timeout=settings.request_timeout,
            max_retries=0,
        )

    @property
    def configured(self) -> bool:
        """Return ``True`` when an API key is available."""

        return bool(self._settings.aitunnel_api_key)

    async def close(self) -> None:
        """Close the underlying HTTP clients."""

        await self._client.aclose()
        await self._openai.close()

    async def _request_json(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, endpoint, json=json_body)
            response.raise_for_status()
            if not response.content:
                return {}
            return response.json()
        except httpx.TimeoutException as exc:
            raise AITunnelRequestError("Timed out waiting for AITunnel.") from exc
        except httpx.HTTPStatusError as exc:
            raise AITunnelRequestError(
                f"AITunnel returned {exc.response.status_code}: {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise AITunnelRequestError(f"AITunnel request failed: {exc}") from exc
        except ValueError as exc:
            raise AITunnelRequestError("AITunnel returned a non-JSON body.") from exc

    async def chat_completion(
        self,
        messages: Sequence[Mapping[str, Any]],
        *,
        model: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Call the OpenAI-compatible chat completions endpoint."""

        payload = {
            "model": model or self._settings.vision_model,
            "messages": list(messages),
        }
        payload.update(kwargs)
        logger.debug("Sending chat completion to model %s", payload["model"])
        return await self._request_json("POST", "/chat/completions", json_body=payload)

    async def ping(self) -> bool:
        """Return ``True`` if the upstream service responds to a model listing call."""

        models = await self._openai.models.list()
        return bool(models.data)

    @staticmethod
    def first_choice_content(response: Mapping[str, Any]) -> str | None:
        """Return the text of the first choice, or ``None`` if the response has none."""

        choices = response.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], Mapping):
            return None
        message = choices[0].get("message")
        if not isinstance(message, Mapping):
            return None
        content = message.get("content")
        if isinstance(content, list):
            content = "".join(
                part.get("text", "")
                for part in content
                if isinstance(part, Mapping) and part.get("type") == "text"
            )
        return content if isinstance(content, str) else None
