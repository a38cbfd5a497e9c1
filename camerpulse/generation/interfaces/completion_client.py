from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CompletionRequest:
    model: str
    system_message: str
    user_message: str
    temperature: float
    max_tokens: int


@dataclass(frozen=True)
class CompletionResponse:
    content: str
    provider: str
    model: str
    metadata: Dict[str, Any] = field(default_factory=dict)


class CompletionClient(ABC):
    """
    Implementations raise UpstreamFailure for transport or status errors and
    MalformedResponse when the envelope has no message content.
    """

    @abstractmethod
    def complete(self, request: CompletionRequest, trace_id: Optional[str] = None) -> CompletionResponse:
        pass
