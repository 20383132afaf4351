"""Port interface for the LLM completion provider."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol


@dataclass(frozen=True)
class CompletionConfig:
    """Fixed sampling configuration sent with every completion request."""

    model: str
    max_tokens: int = 2000
    temperature: float = 0.7
    top_p: float = 0.9
    frequency_penalty: float = 0.1
    presence_penalty: float = 0.1

    def to_request_kwargs(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
            "stream": False,
        }


@dataclass(frozen=True)
class CompletionResult:
    text: str
    total_tokens: int
    model: Optional[str] = None


class CompletionGateway(Protocol):
    """Completion provider protocol.

    Raises GatewayError (classified) on any provider failure.
    """

    def complete(
        self, messages: List[Dict[str, str]], config: CompletionConfig
    ) -> CompletionResult:
        ...
