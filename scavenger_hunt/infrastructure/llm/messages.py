from typing import List, Optional

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage


def build_messages(system_prompt: Optional[str], user_prompt: str, image_url: Optional[str] = None) -> List[BaseMessage]:
    messages: List[BaseMessage] = []
    if system_prompt:
        messages.append(SystemMessage(content=system_prompt))

    if image_url:
        messages.append(
            HumanMessage(
                content=[
                    {"type": "text", "text": user_prompt},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ]
            )
        )
    else:
        messages.append(HumanMessage(content=user_prompt))
    return messages
