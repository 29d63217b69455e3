from __future__ import annotations

import os
from contextlib import asynccontextmanager

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

otel_url = os.getenv("UCP_OTEL_TRACE_URL")
if otel_url:
    resource = Resource.create({"service.name": "ucp-client"})
    provider = TracerProvider(resource=resource)
    processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=otel_url, timeout=5))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)

tracer = trace.get_tracer(__name__)


@asynccontextmanager
async def async_span(name: str, tracer_obj=tracer, **attrs):
    """Async context manager wrapping ``tracer.start_as_current_span``.

    Keyword arguments become span attributes.
    """
    with tracer_obj.start_as_current_span(name) as span:
        for key, value in attrs.items():
            if value is not None:
                span.set_attribute(key, value)
        yield span
