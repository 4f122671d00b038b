import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection, CursorResult
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

import config
from utils.errors import DatabaseConnectionError, QueryError, RowScanError, SchemaError

logger = logging.getLogger(__name__)


def split_host(db_host: str) -> Tuple[str, Optional[int]]:
    """
    Split "host", "host:port", "[v6]", "[v6]:port" or a bare IPv6 address,
    like a MySQL tcp(host:port) DSN. Raises ValueError on a malformed port.
    """
    if db_host.startswith("["):
        host, sep, rest = db_host[1:].partition("]")
        if not sep or (rest and not rest.startswith(":")):
            raise ValueError(f"malformed host {db_host!r}")
        port = rest[1:]
    elif db_host.count(":") > 1:
        # bare IPv6 address, no port
        host, port = db_host, ""
    else:
        host, _, port = db_host.partition(":")
    return host, int(port) if port else None


def build_url(payload) -> URL:
    """Build the connection URL from the request credentials."""
    host, port = split_host(payload.db_host)
    return URL.create(
        config.DRIVERNAME,
        username=payload.db_user,
        password=payload.db_password,
        host=host or None,
        port=port,
        database=payload.db_name,
    )


@contextmanager
def open_connection(payload) -> Iterator[Connection]:
    """One unpooled connection per request, closed on every exit path."""
    engine = None
    try:
        url = build_url(payload)
        connect_args = {}
        if url.get_backend_name() == "mysql":
            connect_args["connect_timeout"] = config.CONNECT_TIMEOUT
        engine = create_engine(url, poolclass=NullPool, connect_args=connect_args)
        conn = engine.connect()
    except (SQLAlchemyError, ValueError, ImportError) as e:
        logger.error(f"Failed to connect to database {payload.db_name!r} on {payload.db_host!r}: {e}")
        if engine is not None:
            engine.dispose()
        raise DatabaseConnectionError() from e

    try:
        yield conn
    finally:
        conn.close()
        engine.dispose()


@contextmanager
def execute(conn: Connection, query: str) -> Iterator[CursorResult]:
    # no_parameters: the driver gets the text as-is, no bind or "%" processing
    try:
        result = conn.exec_driver_sql(query, execution_options={"no_parameters": True})
    except SQLAlchemyError as e:
        logger.error(f"Failed to execute the query: {e}")
        raise QueryError() from e

    try:
        yield result
    finally:
        result.close()


def column_names(result: CursorResult) -> List[str]:
    if not result.returns_rows:
        logger.error("Statement returned no result set")
        raise SchemaError()
    try:
        return [str(name) for name in result.keys()]
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch column names: {e}")
        raise SchemaError() from e


def iter_rows(result: CursorResult, width: int) -> Iterator[Tuple]:
    """Forward-only pass over the result; every row must be `width` values wide."""
    rows = iter(result)
    while True:
        try:
            row = next(rows)
        except StopIteration:
            return
        except SQLAlchemyError as e:
            logger.error(f"Failed to scan row values: {e}")
            raise RowScanError() from e

        values = tuple(row)
        if len(values) != width:
            logger.error(f"Row has {len(values)} values, expected {width}")
            raise RowScanError()
        yield values
