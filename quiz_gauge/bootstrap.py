import logging
import os

from opentelemetry import trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import start_http_server

from quiz_gauge.config import QuizConfig
from quiz_gauge.quiz.adapters.db_manager import DatabaseManager
from quiz_gauge.quiz.adapters.question_source import BundledQuestionSource
from quiz_gauge.quiz.adapters.quiz_storage import KeyValueQuizStorage
from quiz_gauge.quiz.adapters.sqlite_store import SQLiteKeyValueStore
from quiz_gauge.quiz.application.service import QuizService
from quiz_gauge.quiz.domain.question_bank import QuestionBank

logger = logging.getLogger(__name__)


def configure_observability(metrics_port: int = QuizConfig.METRICS_PORT) -> bool:
    """
    Sends traces and logs over OTLP and exposes Prometheus metrics.
    Returns False (console logging only) when the OTEL env vars are missing.
    """
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    headers = os.getenv("OTEL_EXPORTER_OTLP_HEADERS")

    if not endpoint or not headers:
        logger.warning(
            "⚠️ Observability: OTEL env vars not set. Telemetry will not be exported."
        )
        return False

    resource = Resource.create({"service.name": QuizConfig.SERVICE_NAME})

    # --- A. TRACING ---
    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, headers=headers))
    )
    trace.set_tracer_provider(trace_provider)

    # --- B. LOGGING ---
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(OTLPLogExporter(endpoint=endpoint, headers=headers))
    )
    set_logger_provider(logger_provider)
    logging.getLogger().addHandler(
        LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
    )

    # --- C. METRICS ---
    try:
        start_http_server(metrics_port)
        logger.info(f"✅ Prometheus metrics server started on port {metrics_port}")
    except OSError:
        logger.warning(f"⚠️ Prometheus port {metrics_port} already in use. Skipping.")

    return True


def build_service(
    db_path: str = QuizConfig.DB_PATH,
    questions_path: str = QuizConfig.BUNDLED_QUESTIONS_PATH,
) -> QuizService:
    """Composition root: wires storage, the bundled bank and the controller."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    # Infrastructure
    storage = KeyValueQuizStorage(SQLiteKeyValueStore(DatabaseManager(db_path)))
    bank = QuestionBank(BundledQuestionSource(questions_path).fetch())

    # Application
    service = QuizService(bank, storage)
    service.restore()
    return service
