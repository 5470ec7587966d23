"""Service startup: logging, tracing and the Postgres client from Settings.

Usage:
    from platform_common.bootstrap import create_pg_client, shutdown

    client = await create_pg_client(Context.background())
    ...
    await shutdown(client)
"""

from typing import Optional

from opentelemetry import trace

from platform_common.context import Context
from platform_common.db.pg.client import PGClient, new_client_from_settings
from platform_common.logging import configure_logging, create_logger
from platform_common.observability import get_tracer, init_tracing, shutdown_tracing
from platform_common.protocols import LoggerProtocol
from platform_common.settings import Settings, get_settings


def setup_observability(settings: Optional[Settings] = None) -> trace.Tracer:
    """Configure logging, and OTLP tracing when enabled.

    Returns the tracer for settings.service_name. With tracing disabled it
    is the global provider's tracer, a no-op unless the host installed one.
    """
    settings = settings or get_settings()

    configure_logging(
        settings.log_level,
        json_output=settings.log_json,
        component_levels=settings.log_component_levels,
    )

    if not settings.tracing_enabled:
        return get_tracer(settings.service_name)

    provider = init_tracing(settings.service_name, settings.otlp_endpoint)
    create_logger("bootstrap").info(
        "tracing_initialized",
        service_name=settings.service_name,
        otlp_endpoint=settings.otlp_endpoint,
    )
    return provider.get_tracer(settings.service_name)


async def create_pg_client(
    ctx: Context,
    settings: Optional[Settings] = None,
    logger: Optional[LoggerProtocol] = None,
) -> PGClient:
    """Set up observability, then connect the Postgres client.

    Raises:
        ConnectError: The pool could not be created or pinged
    """
    settings = settings or get_settings()
    tracer = setup_observability(settings)
    return await new_client_from_settings(ctx, settings, logger=logger, tracer=tracer)


async def shutdown(client: PGClient) -> None:
    """Close the client, then flush pending spans."""
    try:
        await client.close()
    finally:
        shutdown_tracing()


__all__ = [
    "create_pg_client",
    "setup_observability",
    "shutdown",
]
