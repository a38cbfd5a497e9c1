import os
from typing import Optional

import anthropic

from camerpulse.generation.errors import MalformedResponse, UpstreamFailure
from camerpulse.generation.interfaces.completion_client import (
    CompletionClient,
    CompletionRequest,
    CompletionResponse,
)


class AnthropicCompletionClient(CompletionClient):
    def __init__(self, api_key: Optional[str] = None, timeout: float = 30.0, max_retries: int = 0):
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY", "")
        self.timeout = timeout
        self.max_retries = max_retries
        self._client: Optional[anthropic.Anthropic] = None

    def _get_client(self) -> anthropic.Anthropic:
        if not self.api_key:
            raise UpstreamFailure(None, "ANTHROPIC_API_KEY is not configured")
        if self._client is None:
            self._client = anthropic.Anthropic(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
        return self._client

    def complete(self, request: CompletionRequest, trace_id: Optional[str] = None) -> CompletionResponse:
        client = self._get_client()
        try:
            response = client.messages.create(
                model=request.model,
                system=request.system_message,
                max_tokens=request.max_tokens,
                temperature=request.temperature,
                messages=[{"role": "user", "content": request.user_message}],
            )
        except anthropic.APIStatusError as exc:
            raise UpstreamFailure(exc.status_code, str(exc)) from exc
        except anthropic.APIError as exc:
            raise UpstreamFailure(None, str(exc)) from exc

        parts = []
        for chunk in getattr(response, "content", None) or []:
            if getattr(chunk, "text", None):
                parts.append(chunk.text)
        if not parts:
            raise MalformedResponse("Completion API response has no text content")
        return CompletionResponse(
            content="\n".join(parts).strip(),
            provider="anthropic",
            model=getattr(response, "model", None) or request.model,
            metadata={"trace_id": trace_id},
        )
