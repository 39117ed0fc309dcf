"""
Vector memory configuration.
Environment driven; the driver and record store factories live here.
"""

import os
from pathlib import Path

# Record store configuration
DB_PATH = os.getenv("DB_PATH", "./data/vector_memory.db")
DATABASE_URL = os.getenv("DATABASE_URL")  # PostgreSQL DSN, enables PostgresRecordStore
VECTOR_TABLE = "agent_vector_memories"

# Debug flag
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

# Vector driver configuration
VECTOR_DRIVER = os.getenv("VECTOR_DRIVER", "inmemory")  # inmemory|pgvector
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "hash")  # hash|sentence_transformers
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "all-MiniLM-L6-v2")
EMBED_DIM = int(os.getenv("EMBED_DIM", "384"))

# Search defaults
SEARCH_DEFAULT_LIMIT = int(os.getenv("SEARCH_DEFAULT_LIMIT", "5"))
SEARCH_DEFAULT_THRESHOLD = float(os.getenv("SEARCH_DEFAULT_THRESHOLD", "0.7"))

KNOWN_DRIVERS = ["inmemory", "pgvector"]
KNOWN_EMBED_PROVIDERS = ["hash", "sentence_transformers"]


def get_record_store():
    """Get configured record store. PostgreSQL when DATABASE_URL is set, SQLite otherwise."""
    database_url = os.getenv("DATABASE_URL", DATABASE_URL or "")
    if database_url:
        from .pg_store import PostgresRecordStore
        return PostgresRecordStore(database_url)

    from .record_store import SQLiteRecordStore
    return SQLiteRecordStore(os.getenv("DB_PATH", DB_PATH))


def get_vector_driver(name: str = None, store=None):
    """Get configured vector driver implementation bound to a record store."""
    from ..vector.index import InMemoryVectorDriver
    from ..vector.pgvector_store import PgVectorDriver
    from ..util.logging import logger

    driver_name = (name or os.getenv("VECTOR_DRIVER", VECTOR_DRIVER)).lower()
    if store is None:
        store = get_record_store()

    if driver_name == "pgvector":
        return PgVectorDriver(store)
    elif driver_name == "inmemory":
        return InMemoryVectorDriver(store)
    else:
        # Default to scan driver for unknown names
        logger.warning(f"Unknown VECTOR_DRIVER '{driver_name}', falling back to inmemory")
        return InMemoryVectorDriver(store)


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER).lower()

    if provider == "sentence_transformers":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(os.getenv("EMBED_MODEL_NAME", EMBED_MODEL_NAME))
    else:
        from ..vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding(dimension=int(os.getenv("EMBED_DIM", str(EMBED_DIM))))


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "true").lower() == "true"


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or DB_PATH).parent.mkdir(parents=True, exist_ok=True)


def validate_vector_config():
    """Validate vector configuration and return any issues."""
    issues = []

    driver_name = os.getenv("VECTOR_DRIVER", VECTOR_DRIVER).lower()
    if driver_name not in KNOWN_DRIVERS:
        issues.append(f"Invalid VECTOR_DRIVER: {driver_name}")

    if driver_name == "pgvector" and not os.getenv("DATABASE_URL", DATABASE_URL or ""):
        issues.append("VECTOR_DRIVER=pgvector requires DATABASE_URL")

    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER).lower()
    if provider not in KNOWN_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {provider}")

    if EMBED_DIM < 1:
        issues.append("EMBED_DIM must be >= 1")

    if SEARCH_DEFAULT_LIMIT < 0:
        issues.append("SEARCH_DEFAULT_LIMIT must be >= 0")

    return issues
