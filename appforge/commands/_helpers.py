"""CLI helpers for building the application context."""

from __future__ import annotations

from pymongo.errors import ConnectionFailure

from appforge.context import AppContext


async def get_context() -> AppContext:
    """Create and initialize an AppContext. Exits if MongoDB is unreachable."""
    ctx = AppContext()
    try:
        await ctx.initialize()
    except (ConnectionFailure, OSError) as e:
        await ctx.close()
        raise SystemExit(f"Cannot connect to MongoDB at {ctx.config.mongodb.uri}: {e}") from e
    return ctx
