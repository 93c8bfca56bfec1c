"""Pytest configuration and fixtures for Football Recorder tests."""

import os
import pytest

# Set up test environment
os.environ.setdefault("NEO4J_URI", "bolt://localhost:7687")
os.environ.setdefault("NEO4J_USER", "neo4j")
os.environ.setdefault("NEO4J_PASSWORD", "password")

from football_recorder_mcp.data_loader import get_sample_data, load_sample_data


class MockNeo4jDatabase:
    """Mock Neo4j database keeping Player and Match nodes in memory."""

    def __init__(self):
        self.players: dict[str, dict] = {}
        self.matches: dict[str, dict] = {}
        self._connected = False

    def connect(self):
        self._connected = True

    def close(self):
        self._connected = False

    def _player_row(self, node: dict) -> dict:
        return {
            "player_id": node["player_id"],
            "name": node["name"],
            "position": node.get("position"),
            "created_at": node.get("created_at"),
            "archived": node.get("archived"),
            "is_guest": node.get("is_guest"),
        }

    def _match_row(self, node: dict) -> dict:
        return {key: value for key, value in node.items() if key != "appearances"}

    def execute_query(self, query: str, parameters: dict = None) -> list:
        """Execute a mock read query against in-memory nodes."""
        params = parameters or {}

        # Appearance count used before deleting a player
        if "count(r) as appearances" in query:
            player_id = params.get("player_id")
            if player_id not in self.players:
                return []
            count = sum(
                1
                for match in self.matches.values()
                for app in match["appearances"]
                if app["player_id"] == player_id
            )
            return [{"appearances": count}]

        # Single player
        if "MATCH (p:Player {player_id: $player_id}) RETURN" in query:
            node = self.players.get(params.get("player_id"))
            return [self._player_row(node)] if node else []

        # All players
        if "MATCH (p:Player) RETURN" in query:
            nodes = sorted(
                self.players.values(),
                key=lambda n: (n.get("created_at") or "", n["player_id"]),
            )
            return [self._player_row(n) for n in nodes]

        # Single match
        if "MATCH (m:Match {match_id: $match_id}) RETURN" in query:
            node = self.matches.get(params.get("match_id"))
            return [self._match_row(node)] if node else []

        # All matches, newest first
        if "MATCH (m:Match) RETURN" in query:
            nodes = sorted(
                self.matches.values(),
                key=lambda n: (n["date"], n.get("created_at") or ""),
                reverse=True,
            )
            return [self._match_row(n) for n in nodes]

        # Default empty result
        return []

    def execute_write(self, query: str, parameters: dict = None) -> None:
        """Apply a mock write to the in-memory nodes."""
        params = parameters or {}

        if "MERGE (p:Player" in query:
            node = self.players.setdefault(params["player_id"], {})
            created_at = node.get("created_at") or params.get("created_at")
            node.update(params)
            node["created_at"] = created_at
            return

        if "MERGE (m:Match" in query:
            node = self.matches.setdefault(params["match_id"], {})
            created_at = node.get("created_at") or params.get("created_at")
            node.update(params)
            node["created_at"] = created_at
            node["appearances"] = [
                app for app in params["appearances"] if app["player_id"] in self.players
            ]
            return

        if "DETACH DELETE m" in query:
            self.matches.pop(params.get("match_id"), None)
            return

        if "SET p.archived = $archived" in query:
            node = self.players.get(params.get("player_id"))
            if node is not None:
                node["archived"] = params["archived"]
            return

        if "DETACH DELETE p" in query:
            self.players.pop(params.get("player_id"), None)
            for match in self.matches.values():
                match["appearances"] = [
                    app for app in match["appearances"] if app["player_id"] != params.get("player_id")
                ]
            return

    def clear_database(self) -> None:
        self.players.clear()
        self.matches.clear()

    def create_constraints(self) -> None:
        pass

    def create_indexes(self) -> None:
        pass


@pytest.fixture
def mock_db():
    """Provide a mock database for testing."""
    return MockNeo4jDatabase()


@pytest.fixture
def db_with_sample_data(mock_db):
    """Provide a mock database pre-populated with sample data."""
    mock_db.connect()
    load_sample_data(mock_db)
    return mock_db


@pytest.fixture
def sample_data():
    """The demo league as in-memory models."""
    return get_sample_data()
