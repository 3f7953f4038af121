"""AgentLab database layer."""

from agentlab.db.connection import Database, path_from_url
from agentlab.db.migrations import MIGRATIONS, run_migrations
from agentlab.db.schema import initialize
from agentlab.db.vectors import deserialize_vector, serialize_vector

__all__ = [
    "Database",
    "path_from_url",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
    "serialize_vector",
    "deserialize_vector",
]
