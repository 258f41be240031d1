import logging
from typing import Optional

from scavenger_hunt.core.config import Settings
from .llm_client import LLMClient

logger = logging.getLogger(__name__)


def build_llm_client(settings: Settings, *, temperature: float) -> Optional[LLMClient]:
    """
    Build the configured chat client, or None when no credentials are set.
    """
    if settings.LLM_PROVIDER == "huggingface":
        if not settings.HF_TOKEN:
            logger.warning("HF_TOKEN is not set; scoring oracle disabled")
            return None
        from .huggingface_client import HuggingFaceChatClient

        return HuggingFaceChatClient(
            repo_id=settings.HF_REPO_ID,
            max_new_tokens=settings.ORACLE_MAX_TOKENS,
            do_sample=temperature > 0,
            temperature=temperature,
            timeout=int(settings.ORACLE_TIMEOUT_SECONDS),
            huggingfacehub_api_token=settings.HF_TOKEN,
        )

    if not settings.OPENROUTER_API_KEY:
        logger.warning("OPENROUTER_API_KEY is not set; scoring oracle disabled")
        return None
    from .openrouter_client import OpenRouterChatClient

    return OpenRouterChatClient(
        api_key=settings.OPENROUTER_API_KEY,
        model=settings.OPENROUTER_MODEL,
        base_url=settings.OPENROUTER_BASE_URL,
        temperature=temperature,
        max_tokens=settings.ORACLE_MAX_TOKENS,
        timeout=settings.ORACLE_TIMEOUT_SECONDS,
    )
