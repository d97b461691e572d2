from dataclasses import dataclass
from typing import Literal, Protocol


Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


@dataclass(frozen=True)
class CompletionOptions:
    temperature: float = 0.2
    max_tokens: int = 1500


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str
    options: CompletionOptions = CompletionOptions()

    def messages(self) -> list[ChatMessage]:
        return [ChatMessage(role="system", content=self.system), ChatMessage(role="user", content=self.user)]


class ModelClient(Protocol):
    model: str

    async def complete(self, prompt: PromptPair, *, timeout_s: float) -> str: ...
