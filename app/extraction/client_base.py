from abc import ABC, abstractmethod


class BaseExtractionClient(ABC):
    """Contract for provider-specific vision/chat AI clients."""

    provider: str = "unknown"

    @abstractmethod
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
        """Send one image plus a text prompt; return the response text ('' if empty)."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        messages: list[dict[str, str]],
    ) -> str:
        """Send a text-only conversation; return the response text ('' if empty)."""
