"""Neo4j database connection and operations for the Football Recorder store."""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional

from neo4j import GraphDatabase, Driver, Session
from neo4j.exceptions import ClientError

from .config import Settings

logger = logging.getLogger(__name__)


class Neo4jDatabase:
    """Neo4j database connection manager."""

    def __init__(
        self,
        uri: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or Settings.from_env()
        self.uri = uri or settings.neo4j_uri
        self.user = user or settings.neo4j_user
        self.password = password or settings.neo4j_password
        self._driver: Optional[Driver] = None

    def connect(self) -> None:
        """Establish connection to Neo4j database."""
        if self._driver is None:
            logger.info("Connecting to Neo4j at %s", self.uri)
            self._driver = GraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password),
            )

    def close(self) -> None:
        """Close database connection."""
        if self._driver:
            self._driver.close()
            self._driver = None

    @property
    def driver(self) -> Driver:
        """Get the database driver, connecting if necessary."""
        if self._driver is None:
            self.connect()
        return self._driver  # type: ignore

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Create a database session context manager."""
        session = self.driver.session()
        try:
            yield session
        finally:
            session.close()

    def __enter__(self) -> "Neo4jDatabase":
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def execute_query(
        self, query: str, parameters: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Run a read query in a managed transaction and return plain dict rows."""

        def _read(tx) -> list[dict[str, Any]]:
            return [record.data() for record in tx.run(query, parameters or {})]

        with self.session() as session:
            return session.execute_read(_read)

    def execute_write(
        self, query: str, parameters: Optional[dict[str, Any]] = None
    ) -> None:
        """Run a write query in a managed (retried) transaction."""

        def _write(tx) -> None:
            tx.run(query, parameters or {}).consume()

        with self.session() as session:
            session.execute_write(_write)

    def execute_schema(self, statement: str) -> None:
        """Run a schema statement; these cannot share a transaction with data writes."""
        with self.session() as session:
            session.run(statement).consume()

    def clear_database(self) -> None:
        """Remove every player and match."""
        self.execute_write("MATCH (n) WHERE n:Player OR n:Match DETACH DELETE n")

    def create_constraints(self) -> None:
        """Create uniqueness constraints for player and match ids."""
        constraints = [
            "CREATE CONSTRAINT player_id IF NOT EXISTS FOR (p:Player) REQUIRE p.player_id IS UNIQUE",
            "CREATE CONSTRAINT match_id IF NOT EXISTS FOR (m:Match) REQUIRE m.match_id IS UNIQUE",
        ]
        for constraint in constraints:
            try:
                self.execute_schema(constraint)
            except ClientError:
                logger.debug("Constraint not created: %s", constraint, exc_info=True)

    def create_indexes(self) -> None:
        """Create indexes for commonly queried properties."""
        indexes = [
            "CREATE INDEX player_name IF NOT EXISTS FOR (p:Player) ON (p.name)",
            "CREATE INDEX match_date IF NOT EXISTS FOR (m:Match) ON (m.date)",
        ]
        for index in indexes:
            try:
                self.execute_schema(index)
            except ClientError:
                logger.debug("Index not created: %s", index, exc_info=True)
