"""Pytest configuration for platform_common tests.

Key Principles:
- No database required: the executor is tested against recording doubles
- Spans are captured with the OpenTelemetry in-memory exporter
"""

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from platform_common.db.pg.pg import PG
from platform_common.tests.fixtures.doubles import FakePool, FakeTx


# =============================================================================
# TRACING
# =============================================================================

@pytest.fixture
def span_exporter():
    """Collects finished spans in memory."""
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter):
    """Tracer exporting synchronously to span_exporter."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider.get_tracer("platform_common.tests")


# =============================================================================
# DATABASE DOUBLES
# =============================================================================

@pytest.fixture
def fake_tx():
    return FakeTx()


@pytest.fixture
def fake_pool(fake_tx):
    return FakePool(tx=fake_tx)


@pytest.fixture
def pg(fake_pool, mock_logger, tracer):
    """Executor wired to the recording pool."""
    return PG(fake_pool, logger=mock_logger, tracer=tracer)


# =============================================================================
# PYTEST MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (may use mocks)"
    )
