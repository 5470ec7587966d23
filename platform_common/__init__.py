"""Platform Common - shared plumbing for backend services.

Sub-packages:
- db/             - Query descriptors, formatter, row decoding, errors
- db/pg/          - asyncpg-backed executor, transaction carrier, client
- kafka/          - Message consumer contract
- logging/        - structlog configuration and logger injection
- observability/  - OpenTelemetry setup and span helpers

Top-level modules:
- bootstrap       - Logging, tracing and the Postgres client from Settings
- context         - Immutable request-scoped Context (values + deadline)
- protocols       - LoggerProtocol
- settings        - pydantic-settings configuration

Usage:
    from platform_common.context import Context
    from platform_common.db import Query
    from platform_common.db.pg import new_client, make_context_tx

    client = await new_client(Context.background(), dsn)
    db = client.db()
    user = await db.scan_one(ctx, User, Query("user_get", "SELECT ... $1"), 42)
"""

__version__ = "1.0.0"
