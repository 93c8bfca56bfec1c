"""Runtime configuration read from environment variables."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    """Connection and presentation settings for the MCP server."""

    neo4j_uri: str
    neo4j_user: str
    neo4j_password: str
    leaderboard_limit: int = 10
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment, falling back to local defaults."""
        try:
            limit = int(os.getenv("LEADERBOARD_LIMIT", "10"))
        except ValueError:
            limit = 10
        return cls(
            neo4j_uri=os.getenv("NEO4J_URI", "bolt://localhost:7687"),
            neo4j_user=os.getenv("NEO4J_USER", "neo4j"),
            neo4j_password=os.getenv("NEO4J_PASSWORD", "password"),
            leaderboard_limit=limit,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
