import logging
from typing import Optional, Dict

from langchain_huggingface import HuggingFaceEndpoint, ChatHuggingFace

from .llm_client import LLMClient
from .messages import build_messages

logger = logging.getLogger(__name__)

class HuggingFaceChatClient(LLMClient):
    def __init__(
        self,
        *,
        repo_id: str,
        task: str = "text-generation",
        max_new_tokens: int = 150,
        do_sample: bool = False,
        temperature: Optional[float] = None,
        repetition_penalty: float = 1.03,
        timeout: int = 30,
        huggingfacehub_api_token: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        endpoint_kwargs: Dict = {
            "repo_id": repo_id,
            "task": task,
            "max_new_tokens": max_new_tokens,
            "do_sample": do_sample,
            "repetition_penalty": repetition_penalty,
            "timeout": timeout,
        }

        if do_sample and temperature:
            endpoint_kwargs["temperature"] = temperature
        if huggingfacehub_api_token:
            endpoint_kwargs["huggingfacehub_api_token"] = huggingfacehub_api_token
        if base_url:
            endpoint_kwargs["base_url"] = base_url

        llm = HuggingFaceEndpoint(**endpoint_kwargs)
        self._chat = ChatHuggingFace(llm=llm)

    def generate(self, *, system_prompt: Optional[str], user_prompt: str, image_url: Optional[str] = None) -> str:
        if image_url:
            # Text-generation endpoints have no image input
            raise ValueError("HuggingFace text-generation client cannot score images")

        logger.debug("Generating via HuggingFace LLM")
        result = self._chat.invoke(build_messages(system_prompt, user_prompt))
        return str(result.content)
