from typing import Any

import httpx
import openai

from app.extraction.client_base import BaseExtractionClient
from app.extraction.exceptions import ExtractionError, ExtractionNetworkError


class OpenAIClientAdapter(BaseExtractionClient):
    """Extraction AI client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
        provider: str = "openai",
    ) -> None:
        self.provider = provider
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def create_vision_completion(
        self,
        *,
        model: str,
        temperature: float,
        seed: int,
        max_tokens: int,
        prompt: str,
        image_url: str,
        json_mode: bool = False,
    ) -> str:
        extra: dict[str, Any] = {}
        if json_mode:
            extra["response_format"] = {"type": "json_object"}
        return self._complete(
            model=model,
            temperature=temperature,
            seed=seed,
            max_tokens=max_tokens,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": image_url}},
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
            **extra,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        messages: list[dict[str, str]],
    ) -> str:
        return self._complete(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            messages=messages,
        )

    def _complete(self, **kwargs: Any) -> str:
        try:
            response = self._client.chat.completions.create(**kwargs)
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionNetworkError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise ExtractionNetworkError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise ExtractionError("AI returned no choices")
        return response.choices[0].message.content or ""
