import json
from typing import List, Optional

from camerpulse.generation.interfaces.completion_client import (
    CompletionClient,
    CompletionRequest,
    CompletionResponse,
)


class MockCompletionClient(CompletionClient):
    """
    Offline client for local runs: answers every prompt with a fixed poll
    document, or with `content` verbatim when given.
    """

    def __init__(self, content: Optional[str] = None, name: str = "mock"):
        self.content = content
        self.name = name
        self.requests: List[CompletionRequest] = []

    def complete(self, request: CompletionRequest, trace_id: Optional[str] = None) -> CompletionResponse:
        self.requests.append(request)
        content = self.content
        if content is None:
            topic = _topic_from_prompt(request.user_message)
            content = json.dumps(
                {
                    "question": f"How should authorities respond to: {topic}?",
                    "description": f"Citizens are discussing {topic}.",
                    "options": [
                        "Act immediately",
                        "Open a public consultation",
                        "Wait for more information",
                        "No action needed",
                    ],
                    "reasoning": "Stub reasoning from the offline completion client.",
                }
            )
        return CompletionResponse(
            content=content,
            provider=self.name,
            model=request.model,
            metadata={"trace_id": trace_id, "temperature": request.temperature},
        )


def _topic_from_prompt(prompt: str) -> str:
    for line in prompt.splitlines():
        if line.startswith("Topic:"):
            return line.split(":", 1)[1].strip() or "this issue"
    return "this issue"
