import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from camerpulse.generation.errors import MalformedResponse, UpstreamFailure
from camerpulse.generation.interfaces.completion_client import (
    CompletionClient,
    CompletionRequest,
    CompletionResponse,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionRetryPolicy:
    max_retries: int = 0
    backoff_factor: float = 1.0
    status_forcelist: List[int] = field(default_factory=lambda: [502, 503, 504])


class HttpCompletionClient(CompletionClient):
    """
    Chat-completions client over plain HTTP.
    Retries only as far as the policy allows (none by default).
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        timeout: float = 30.0,
        retry_policy: Optional[CompletionRetryPolicy] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.retry_policy = retry_policy or CompletionRetryPolicy()
        self.session = session or self._create_session(self.retry_policy)

    def _create_session(self, policy: CompletionRetryPolicy) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=max(0, policy.max_retries),
            backoff_factor=policy.backoff_factor,
            status_forcelist=list(policy.status_forcelist),
            allowed_methods=["POST"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def complete(self, request: CompletionRequest, trace_id: Optional[str] = None) -> CompletionResponse:
        payload = {
            "model": request.model,
            "messages": [
                {"role": "system", "content": request.system_message},
                {"role": "user", "content": request.user_message},
            ],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = self.session.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Completion API network error: {e}")
            raise UpstreamFailure(None, str(e)) from e

        if not 200 <= response.status_code < 300:
            body = (response.text or "")[:500]
            logger.warning(f"Completion API error {response.status_code}: {body}")
            raise UpstreamFailure(response.status_code, body)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse("Completion API response body is not JSON") from e

        return CompletionResponse(
            content=self._extract_content(data),
            provider="http",
            model=str(data.get("model") or request.model) if isinstance(data, dict) else request.model,
            metadata={"trace_id": trace_id, "usage": data.get("usage") if isinstance(data, dict) else None},
        )

    def _extract_content(self, data: Any) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponse("Completion API response has no message content") from e
        if not isinstance(content, str):
            raise MalformedResponse("Completion message content is not a string")
        return content.strip()
