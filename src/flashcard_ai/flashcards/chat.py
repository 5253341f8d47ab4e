"""flashcards.chat

Free-form chat with the study assistant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from flashcard_ai.core.exceptions import ParsingError
from flashcard_ai.core.types import ChatMessage, CompletionRequest, Role

if TYPE_CHECKING:
    from flashcard_ai.core.abc import AbstractCompletionClient

DEFAULT_CHAT_MODEL = 'openai/gpt-4o'


class ChatRequest(BaseModel):
    user_message: str = Field(..., min_length=1)
    context: str | None = None
    model: str = DEFAULT_CHAT_MODEL
    temperature: float = 0.7
    max_tokens: int = Field(1000, ge=1)


class ChatReply(BaseModel):
    reply: str
    model: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


def build_chat_request(chat: ChatRequest) -> CompletionRequest:
    system_content = 'You are a helpful assistant.'
    if chat.context:
        system_content = f'{system_content} Context: {chat.context}'

    return CompletionRequest(
        model=chat.model,
        messages=[
            ChatMessage(role=Role.system, content=system_content),
            ChatMessage(role=Role.user, content=chat.user_message),
        ],
        temperature=chat.temperature,
        max_tokens=chat.max_tokens,
    )


async def chat_reply(client: AbstractCompletionClient, chat: ChatRequest) -> ChatReply:
    response = await client.get_chat_completion(build_chat_request(chat))
    if not response.content:
        raise ParsingError('No response generated')

    usage = response.usage
    return ChatReply(
        reply=response.content,
        model=response.model or chat.model,
        prompt_tokens=(usage.prompt_tokens or 0) if usage else 0,
        completion_tokens=(usage.completion_tokens or 0) if usage else 0,
        total_tokens=(usage.total_tokens or 0) if usage else 0,
    )
