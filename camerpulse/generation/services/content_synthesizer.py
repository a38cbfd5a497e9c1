import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from camerpulse.core.logging.structured_event_logger import StructuredEventLogger
from camerpulse.generation.domain.poll import SynthesizedPoll
from camerpulse.generation.domain.runtime_config import RuntimeConfig
from camerpulse.generation.domain.signal import SOURCE_PRIORITY, CollectedSignals, Signal, SignalSource
from camerpulse.generation.errors import MalformedResponse, UpstreamFailure
from camerpulse.generation.interfaces.completion_client import CompletionClient, CompletionRequest
from camerpulse.generation.services.confidence import compute_confidence
from camerpulse.generation.services.prompt_template_registry import (
    POLL_SYSTEM_TEMPLATE_ID,
    POLL_USER_TEMPLATE_ID,
    PromptTemplateRegistry,
)

SOURCE_LABELS = {
    SignalSource.COMPLAINT: "citizen complaint",
    SignalSource.SENTIMENT_TREND: "public sentiment trend",
}

MIN_OPTIONS = 2


@dataclass(frozen=True)
class PollPayload:
    question: str
    options: List[str]
    reasoning: str
    description: str = ""


def select_signal(collected: CollectedSignals) -> Optional[Signal]:
    """
    Strongest signal wins; on equal strength complaints beat sentiment
    trends, and collector order decides within one source.
    """
    best: Optional[Signal] = None
    for signal in collected.all():
        if best is None:
            best = signal
            continue
        if signal.strength > best.strength:
            best = signal
        elif signal.strength == best.strength and SOURCE_PRIORITY[signal.source] < SOURCE_PRIORITY[best.source]:
            best = signal
    return best


def parse_poll_payload(content: str) -> PollPayload:
    try:
        data = json.loads(content)
    except (TypeError, ValueError) as exc:
        raise MalformedResponse(f"Completion content is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedResponse("Completion content must be a JSON object")

    missing = [key for key in ("question", "options", "reasoning") if key not in data]
    if missing:
        raise MalformedResponse(f"Completion JSON is missing keys: {', '.join(missing)}")

    question = data["question"]
    if not isinstance(question, str) or not question.strip():
        raise MalformedResponse("'question' must be a non-empty string")

    options = _parse_options(data["options"])

    reasoning = data["reasoning"]
    if reasoning is None:
        reasoning = ""
    if not isinstance(reasoning, str):
        raise MalformedResponse("'reasoning' must be a string")

    description = data.get("description") or ""
    if not isinstance(description, str):
        description = ""

    return PollPayload(
        question=question.strip(),
        options=options,
        reasoning=reasoning.strip(),
        description=description.strip(),
    )


def _parse_options(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        raise MalformedResponse("'options' must be a list")
    options = []
    for item in raw:
        if not isinstance(item, str) or not item.strip():
            raise MalformedResponse("'options' must contain non-empty strings")
        options.append(item.strip())
    if len(options) < MIN_OPTIONS:
        raise MalformedResponse(f"'options' needs at least {MIN_OPTIONS} entries")
    return options


class ContentSynthesizer:
    def __init__(
        self,
        client: CompletionClient,
        templates: Optional[PromptTemplateRegistry] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 500,
        logger: Optional[StructuredEventLogger] = None,
    ):
        self.client = client
        self.templates = templates or PromptTemplateRegistry()
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.logger = logger or StructuredEventLogger()

    def build_prompt(self, signal: Signal) -> Tuple[str, str]:
        system_message = self.templates.render(POLL_SYSTEM_TEMPLATE_ID, {})
        user_message = self.templates.render(
            POLL_USER_TEMPLATE_ID,
            {
                "source_label": SOURCE_LABELS[signal.source],
                "topic": signal.topic,
                "category": signal.category or "general",
                "region": signal.region or "National",
                "strength": f"{signal.strength:.2f}",
            },
        )
        return system_message, user_message

    def synthesize(
        self,
        signal: Signal,
        config: RuntimeConfig,
        trace_id: Optional[str] = None,
    ) -> SynthesizedPoll:
        system_message, user_message = self.build_prompt(signal)
        request = CompletionRequest(
            model=self.model,
            system_message=system_message,
            user_message=user_message,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        try:
            response = self.client.complete(request, trace_id=trace_id)
        except UpstreamFailure as exc:
            self.logger.emit(
                "COMPLETION_FAILED",
                level=logging.ERROR,
                trace_id=trace_id,
                status_code=exc.status_code,
                error=str(exc),
            )
            raise

        try:
            payload = parse_poll_payload(response.content)
        except MalformedResponse as exc:
            self.logger.emit(
                "COMPLETION_MALFORMED",
                level=logging.ERROR,
                trace_id=trace_id,
                error=str(exc),
                content_preview=response.content[:200],
            )
            raise

        return SynthesizedPoll(
            signal=signal,
            question=payload.question,
            description=payload.description or f"Based on trending {signal.source.value.replace('_', ' ')}: {signal.topic}",
            options=payload.options,
            reasoning=payload.reasoning,
            style=config.style_mapping.resolve(signal.category),
            confidence_score=compute_confidence(signal.strength, len(payload.options), payload.reasoning),
            prompt=user_message,
            model=response.model or self.model,
        )
