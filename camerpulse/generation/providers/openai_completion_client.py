import os
from typing import Optional

import openai
from openai import OpenAI

from camerpulse.generation.errors import MalformedResponse, UpstreamFailure
from camerpulse.generation.interfaces.completion_client import (
    CompletionClient,
    CompletionRequest,
    CompletionResponse,
)


class OpenAICompletionClient(CompletionClient):
    def __init__(self, api_key: Optional[str] = None, timeout: float = 30.0, max_retries: int = 0):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY", "")
        self.timeout = timeout
        self.max_retries = max_retries
        self._client: Optional[OpenAI] = None

    def _get_client(self) -> OpenAI:
        if not self.api_key:
            raise UpstreamFailure(None, "OPENAI_API_KEY is not configured")
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=self.max_retries)
        return self._client

    def complete(self, request: CompletionRequest, trace_id: Optional[str] = None) -> CompletionResponse:
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=request.model,
                messages=[
                    {"role": "system", "content": request.system_message},
                    {"role": "user", "content": request.user_message},
                ],
                max_tokens=request.max_tokens,
                temperature=request.temperature,
            )
        except openai.APIStatusError as exc:
            raise UpstreamFailure(exc.status_code, str(exc)) from exc
        except openai.APIError as exc:
            raise UpstreamFailure(None, str(exc)) from exc

        if not response.choices or response.choices[0].message is None:
            raise MalformedResponse("Completion API response has no choices")
        text = response.choices[0].message.content
        if not isinstance(text, str):
            raise MalformedResponse("Completion message content is not a string")
        return CompletionResponse(
            content=text.strip(),
            provider="openai",
            model=response.model or request.model,
            metadata={"trace_id": trace_id},
        )
