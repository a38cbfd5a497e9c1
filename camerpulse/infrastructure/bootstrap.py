from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from camerpulse.admin.security.jwt_hmac import AdminTokenVerifier
from camerpulse.config.settings import Settings
from camerpulse.core.logging.structured_event_logger import StructuredEventLogger
from camerpulse.core.time.clock import Clock, SystemClock
from camerpulse.generation.domain.styles import PollStyle
from camerpulse.generation.interfaces.completion_client import CompletionClient
from camerpulse.generation.interfaces.poll_store import PollStore
from camerpulse.generation.interfaces.runtime_config_store import RuntimeConfigStore
from camerpulse.generation.interfaces.signal_store import SignalStore
from camerpulse.generation.providers.anthropic_completion_client import AnthropicCompletionClient
from camerpulse.generation.providers.http_completion_client import CompletionRetryPolicy, HttpCompletionClient
from camerpulse.generation.providers.mock_completion_client import MockCompletionClient
from camerpulse.generation.providers.openai_completion_client import OpenAICompletionClient
from camerpulse.generation.services.content_synthesizer import ContentSynthesizer
from camerpulse.generation.services.generation_pipeline import GenerationPipeline
from camerpulse.generation.services.poll_writer import PollWriter, WriteMode
from camerpulse.generation.services.quota_guard import QuotaGuard
from camerpulse.generation.services.runtime_config_loader import RuntimeConfigLoader
from camerpulse.generation.services.signal_collector import SignalCollector
from camerpulse.generation.store.postgres_poll_store import PostgresPollStore
from camerpulse.generation.store.postgres_runtime_config_store import PostgresRuntimeConfigStore
from camerpulse.generation.store.postgres_signal_store import PostgresSignalStore
from camerpulse.review.services.poll_review_service import PollReviewService


@dataclass(frozen=True)
class Stores:
    signals: SignalStore
    config: RuntimeConfigStore
    polls: PollStore


def build_completion_client(settings: Settings) -> CompletionClient:
    backend = settings.COMPLETION_BACKEND.strip().lower()
    if backend == "http":
        return HttpCompletionClient(
            api_url=settings.COMPLETION_API_URL,
            api_key=settings.COMPLETION_API_KEY,
            timeout=settings.COMPLETION_TIMEOUT_SECONDS,
            retry_policy=CompletionRetryPolicy(
                max_retries=settings.COMPLETION_MAX_RETRIES,
                backoff_factor=settings.COMPLETION_BACKOFF_FACTOR,
                status_forcelist=list(settings.COMPLETION_RETRY_STATUSES),
            ),
        )
    if backend == "openai":
        return OpenAICompletionClient(
            api_key=settings.COMPLETION_API_KEY or None,
            timeout=settings.COMPLETION_TIMEOUT_SECONDS,
            max_retries=settings.COMPLETION_MAX_RETRIES,
        )
    if backend == "anthropic":
        return AnthropicCompletionClient(
            api_key=settings.COMPLETION_API_KEY or None,
            timeout=settings.COMPLETION_TIMEOUT_SECONDS,
            max_retries=settings.COMPLETION_MAX_RETRIES,
        )
    if backend == "mock":
        return MockCompletionClient()
    raise ValueError(f"Unknown COMPLETION_BACKEND: {settings.COMPLETION_BACKEND}")


def build_sql_stores(engine: Engine) -> Stores:
    return Stores(
        signals=PostgresSignalStore(engine),
        config=PostgresRuntimeConfigStore(engine),
        polls=PostgresPollStore(engine),
    )


def build_pipeline(
    settings: Settings,
    stores: Stores,
    client: Optional[CompletionClient] = None,
    clock: Optional[Clock] = None,
    logger: Optional[StructuredEventLogger] = None,
) -> GenerationPipeline:
    logger = logger or StructuredEventLogger()
    clock = clock or SystemClock()
    default_style = PollStyle.parse(settings.DEFAULT_POLL_STYLE) or PollStyle.CARD
    return GenerationPipeline(
        config_loader=RuntimeConfigLoader(stores.config, default_style=default_style, logger=logger),
        quota_guard=QuotaGuard(stores.polls, window_days=settings.QUOTA_WINDOW_DAYS),
        collector=SignalCollector(
            stores.signals,
            lookback_days=settings.SIGNAL_LOOKBACK_DAYS,
            complaint_limit=settings.COMPLAINT_SIGNAL_LIMIT,
            sentiment_limit=settings.SENTIMENT_SIGNAL_LIMIT,
        ),
        synthesizer=ContentSynthesizer(
            client or build_completion_client(settings),
            model=settings.COMPLETION_MODEL,
            temperature=settings.COMPLETION_TEMPERATURE,
            max_tokens=settings.COMPLETION_MAX_TOKENS,
            logger=logger,
        ),
        writer=PollWriter(
            stores.polls,
            mode=WriteMode(settings.GENERATION_WRITE_MODE.strip().lower()),
            poll_duration_days=settings.POLL_DURATION_DAYS,
            logger=logger,
        ),
        clock=clock,
        logger=logger,
    )


def build_review_service(
    stores: Stores,
    clock: Optional[Clock] = None,
    logger: Optional[StructuredEventLogger] = None,
) -> PollReviewService:
    return PollReviewService(stores.polls, stores.config, clock=clock, logger=logger)


def build_verifier(settings: Settings) -> AdminTokenVerifier:
    return AdminTokenVerifier(secret=settings.ADMIN_JWT_SECRET, issuer=settings.ADMIN_JWT_ISSUER)
