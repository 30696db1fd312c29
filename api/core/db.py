"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Every driver failure leaves this module as a `StoreError`, so callers only
need to know about one exception type.
"""

from __future__ import annotations

import asyncio
import logging
import os
import ssl
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None


class StoreError(RuntimeError):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def is_production() -> bool:
    env = os.environ.get("APP_ENV", "").strip() or os.environ.get("NODE_ENV", "").strip()
    return env.lower() == "production"


def ssl_option() -> ssl.SSLContext | bool:
    """
    Hosted Postgres in production needs TLS, but presents a certificate we
    do not verify. Local development talks plain TCP.
    """
    if not is_production():
        return False
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


class _PoolConnection(asyncpg.Connection):
    """
    Remembers whether the close came from our side (pool shutdown, idle
    expiry, recycling) so the termination listener can tell it apart from
    a lost connection.
    """

    closed_locally = False

    async def close(self, *, timeout: float | None = None) -> None:
        self.closed_locally = True
        await super().close(timeout=timeout)

    def terminate(self) -> None:
        self.closed_locally = True
        super().terminate()


def _on_connection_terminated(conn: asyncpg.Connection) -> None:
    if getattr(conn, "closed_locally", False):
        logger.debug("db_connection_closed pid=%s", conn.get_server_pid())
        return
    # The pool replaces dead connections on next acquire.
    logger.error("db_connection_lost pid=%s", conn.get_server_pid())


async def _init_connection(conn: asyncpg.Connection) -> None:
    conn.add_termination_listener(_on_connection_terminated)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=_env_int("DB_POOL_MIN_SIZE", 1),
        max_size=_env_int("DB_POOL_MAX_SIZE", 5),
        command_timeout=_env_float("DB_COMMAND_TIMEOUT_S", 30.0),
        ssl=ssl_option(),
        init=_init_connection,
        connection_class=_PoolConnection,
    )
    logger.info("db_pool_ready production=%s", is_production())


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def _store_error(exc: BaseException) -> StoreError:
    return StoreError(str(exc).strip() or exc.__class__.__name__)


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    try:
        row = await pool().fetchrow(sql, *args)
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as exc:
        raise _store_error(exc) from exc
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    try:
        rows = await pool().fetch(sql, *args)
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as exc:
        raise _store_error(exc) from exc
    return [_record_to_dict(r) for r in rows]


async def execute(sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the status tag, e.g. "DELETE 1".
    """
    try:
        return await pool().execute(sql, *args)
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as exc:
        raise _store_error(exc) from exc
