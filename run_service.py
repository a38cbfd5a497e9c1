import json
import sys

from camerpulse.config.settings import settings
from camerpulse.core.logging.structured_event_logger import StructuredEventLogger, configure_logging
from camerpulse.generation.errors import PipelineError
from camerpulse.infrastructure.bootstrap import (
    build_pipeline,
    build_review_service,
    build_sql_stores,
    build_verifier,
)
from camerpulse.infrastructure.inbound.http_server import build_app, run_server
from camerpulse.infrastructure.persistence.database import create_db_engine, init_schema

USAGE = "usage: run_service.py [serve|once]"


def main(argv) -> int:
    mode = argv[1] if len(argv) > 1 else "serve"
    if mode not in ("serve", "once"):
        print(USAGE, file=sys.stderr)
        return 2

    configure_logging(settings.LOG_LEVEL)
    logger = StructuredEventLogger()

    engine = create_db_engine(settings.DATABASE_URL)
    init_schema(engine)
    stores = build_sql_stores(engine)
    pipeline = build_pipeline(settings, stores, logger=logger)

    if mode == "once":
        # Scheduler entry point: one run, JSON body on stdout.
        try:
            result = pipeline.run(trigger="schedule")
        except PipelineError as exc:
            print(json.dumps({"error": exc.public_message, "details": str(exc)}))
            return 1
        print(json.dumps(result.to_response(), default=str))
        return 0

    app = build_app(
        pipeline,
        review_service=build_review_service(stores, logger=logger),
        verifier=build_verifier(settings),
        logger=logger,
    )
    run_server(app, host=settings.HOST, port=settings.PORT)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
