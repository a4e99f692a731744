"""
Connection provider for the Oracle catalog using oracledb.

Each catalog operation asks the provider for a connection and releases it
when done; pooling and retries are left to the driver.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, Protocol, Tuple

from schema_explorer.errors import require_identifier

logger = logging.getLogger(__name__)


class ConnectionProvider(Protocol):
    """Anything that yields an open DB-API connection and disposes it afterward."""

    def connection(self) -> ContextManager[Any]:
        ...


def parse_connection_string(connection_string: str) -> Tuple[str, str, str]:
    """
    Split ``user/pwd@host:port/service`` into (user, password, dsn).

    A part after ``@`` without a port is passed through unchanged, so TNS
    aliases keep working.
    """
    connection_string = require_identifier(connection_string, "connection_string")

    user_pwd, _, host_service = connection_string.partition("@")
    user, _, password = user_pwd.partition("/")

    if ":" in host_service:
        host_port, _, service = host_service.partition("/")
        host, _, port = host_port.partition(":")
        dsn = f"{host}:{port or 1521}/{service}"
    else:
        dsn = host_service

    return user, password, dsn


class OracleConnectionProvider:
    """Opens one oracledb connection per catalog operation."""

    def __init__(self, connection_string: str):
        """
        Initialize provider.

        Args:
            connection_string: Oracle connection string (user/pwd@host:port/service)
        """
        self.user, self.password, self.dsn = parse_connection_string(connection_string)

    def connect(self) -> Any:
        """Establish a new database connection."""
        import oracledb

        conn = oracledb.connect(user=self.user, password=self.password, dsn=self.dsn)
        logger.debug(f"Connected to Oracle database as {self.user}")
        return conn

    @contextmanager
    def connection(self) -> Iterator[Any]:
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()
