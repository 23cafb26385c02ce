"""
OpenTelemetry tracing configuration.

Use cases open their own spans through `trace.get_tracer(__name__)`; this
module installs the provider/exporters and instruments the Kvrocks client and
the SQLAlchemy engine, so cache, lease and store calls become child spans of
the reserve/confirm/release/cancel spans.
"""

import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON

from src.platform.config.core_setting import settings
from src.platform.database.orm_db_setting import get_engine
from src.platform.logging.loguru_io import Logger


class TracingConfig:
    """
    Usage:
        tracing = TracingConfig(service_name='expiration-reaper')
        tracing.setup()
        await init_infra(tracing=tracing)
        ...
        tracing.shutdown()
    """

    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: str | None = None,
        enable_console: bool = False,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
        self.enable_console = (
            enable_console or os.getenv('OTEL_CONSOLE_EXPORT', 'false').lower() == 'true'
        )

        self.provider: TracerProvider | None = None

    def setup(self) -> None:
        """Install the global tracer provider; call once at startup"""
        resource = Resource(
            attributes={SERVICE_NAME: self.service_name, SERVICE_VERSION: settings.VERSION}
        )

        # Tail sampling belongs in the collector
        self.provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)

        if self.otlp_endpoint:
            self.provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=self.otlp_endpoint))
            )
            Logger.base.info(f'🔭 [TRACING] Exporting spans to {self.otlp_endpoint}')

        if self.enable_console:
            self.provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(self.provider)

    def instrument_redis(self) -> None:
        RedisInstrumentor().instrument(tracer_provider=self.provider)

    def instrument_database(self) -> None:
        # Instrument the sync core under the loop-bound AsyncEngine
        SQLAlchemyInstrumentor().instrument(
            engine=get_engine().sync_engine, tracer_provider=self.provider
        )

    def shutdown(self) -> None:
        if self.provider:
            self.provider.shutdown()
