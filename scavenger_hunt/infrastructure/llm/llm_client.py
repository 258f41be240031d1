from typing import Optional, Protocol


class LLMClient(Protocol):
    def generate(
        self,
        *,
        system_prompt: Optional[str],
        user_prompt: str,
        image_url: Optional[str] = None,
    ) -> str:
        """
        Generates a completion for the prompts. When image_url is given it is
        sent alongside the user prompt as an image part.
        """
        ...
