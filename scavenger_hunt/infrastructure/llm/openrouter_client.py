import logging
from typing import Optional

from langchain_openai import ChatOpenAI

from .llm_client import LLMClient
from .messages import build_messages

logger = logging.getLogger(__name__)


class OpenRouterChatClient(LLMClient):
    """
    Chat completions through OpenRouter's OpenAI-compatible endpoint.
    Supports multimodal (image_url) user messages.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str = "https://openrouter.ai/api/v1",
        temperature: float = 0.0,
        max_tokens: int = 150,
        timeout: float = 20.0,
    ):
        # Retries are left to the caller; a failed call surfaces immediately
        self._chat = ChatOpenAI(
            model=model,
            api_key=api_key,
            base_url=base_url,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            max_retries=0,
        )

    def generate(self, *, system_prompt: Optional[str], user_prompt: str, image_url: Optional[str] = None) -> str:
        logger.debug(f"Generating via OpenRouter (image={'yes' if image_url else 'no'})")
        result = self._chat.invoke(build_messages(system_prompt, user_prompt, image_url))
        return str(result.content)
