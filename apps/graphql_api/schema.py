"""GraphQL schema and resolvers.

The HTTP layer treats the schema and root value as opaque: they are handed to
:meth:`strawberry.Schema.execute` unchanged.  Resolvers reach shared
collaborators through ``info.root_value``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import strawberry
from strawberry.types import Info

from lib.clients.deepseek import DeepSeekClient


@dataclass
class RootValue:
    deepseek: DeepSeekClient
    models: List[str] = field(default_factory=list)


@strawberry.type
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@strawberry.type
class ChatReply:
    content: str
    model: str
    finish_reason: Optional[str] = None
    usage: Optional[TokenUsage] = None


@strawberry.type
class Query:
    @strawberry.field(description="Greeting used to check the endpoint end to end.")
    def hello(self, name: str = "World") -> str:
        return f"Hello, {name}!"

    @strawberry.field(description="Model names accepted by `chat`.")
    def models(self, info: Info) -> List[str]:
        return list(info.root_value.models)

    @strawberry.field(description="Ask the DeepSeek chat model a single question.")
    async def chat(
        self,
        info: Info,
        message: str,
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> ChatReply:
        root: RootValue = info.root_value
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": message})

        completion = await root.deepseek.chat(
            messages, model=model, temperature=temperature
        )
        usage = completion.usage
        return ChatReply(
            content=completion.content,
            model=completion.model,
            finish_reason=completion.finish_reason,
            usage=(
                TokenUsage(
                    prompt_tokens=usage.prompt_tokens,
                    completion_tokens=usage.completion_tokens,
                    total_tokens=usage.total_tokens,
                )
                if usage
                else None
            ),
        )


def build_schema() -> strawberry.Schema:
    return strawberry.Schema(query=Query)


__all__ = ["RootValue", "ChatReply", "TokenUsage", "Query", "build_schema"]
