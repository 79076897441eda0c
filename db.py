# db.py
from __future__ import annotations

from contextlib import contextmanager

from psycopg2.pool import ThreadedConnectionPool

from settings import Settings, settings

_pool: ThreadedConnectionPool | None = None


def init_pool(s: Settings | None = None) -> ThreadedConnectionPool:
    """
    Initialize the PostgreSQL connection pool.
    Called once at startup by the outcome recorder; raises if the
    database is unreachable.
    """
    global _pool
    s = s or settings
    if _pool is None:
        _pool = ThreadedConnectionPool(
            minconn=1,
            maxconn=s.DB_POOL_MAX,
            host=s.DB_HOST,
            port=s.DB_PORT,
            user=s.DB_USER,
            password=s.DB_PASSWORD,
            dbname=s.DB_NAME,
            connect_timeout=5,
            application_name="autopayout",
        )
    return _pool


def close_pool() -> None:
    """
    Gracefully close all pooled connections.
    """
    global _pool
    if _pool:
        _pool.closeall()
        _pool = None


def pool_open() -> bool:
    return _pool is not None


@contextmanager
def get_conn():
    """
    Provides a transactional DB connection.
    Auto-commits on success, rolls back on error.
    """
    if _pool is None:
        raise RuntimeError("DB pool is not initialized")

    pool = _pool
    conn = pool.getconn()

    try:
        with conn.cursor() as cur:
            cur.execute("SET statement_timeout = '5000ms';")

        yield conn
        conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        pool.putconn(conn)
