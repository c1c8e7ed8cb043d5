"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Runtime environment ("development" or "production"); controls cookie security
APP_ENV: str = os.getenv("APP_ENV", "development").strip().lower() or "development"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# Relational DB for users, chats and messages (SQLite locally, Postgres in production)
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./chat.db").strip()

# Milvus Cloud (from env)
MILVUS_URI: str = os.getenv("MILVUS_URI", "").strip()
MILVUS_TOKEN: str = os.getenv("MILVUS_TOKEN", "").strip()

# OpenAI (agent LLM and embeddings)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = os.getenv("OPENAI_LLM_MODEL", "gpt-4o").strip() or "gpt-4o"
OPENAI_TITLE_MODEL: str = (
    os.getenv("OPENAI_TITLE_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)
OPENAI_EMBED_MODEL: str = (
    os.getenv("OPENAI_EMBED_MODEL", "text-embedding-3-small").strip()
    or "text-embedding-3-small"
)

# text-embedding-3-small = 1536 dims
VECTOR_DIM: int = 1536
EMBED_BATCH_SIZE: int = 100

# Vector collections
ZONES_COLLECTION: str = "waste_collection_zones"
CALENDAR_COLLECTION: str = "waste_collection_info"

# Zone lookup
ZONE_SEARCH_TOP_K: int = 3
ZONE_MIN_SCORE: float = 0.75
ETRA_API_URL: str = (
    os.getenv(
        "ETRA_API_URL",
        "https://www.etraspa.it/ajax/action/get-modalita-conferimento-per-zone-rifiuti-per-via",
    ).strip()
)
ETRA_USER_TYPE: str = "UTZ-D-1"

# Calendar search
CALENDAR_SEARCH_TOP_K: int = 5

# API timeouts (seconds)
EMBED_API_TIMEOUT: float = 10.0
ETRA_API_TIMEOUT: float = 10.0
LLM_API_TIMEOUT: float = 60.0

# Chunking for the calendar knowledge file
CHUNK_SIZE: int = 512
CHUNK_OVERLAP: int = 50

# Knowledge files for ingestion (relative to project root)
KNOWLEDGE_DIR_NAME: str = "data/knowledge"
CALENDAR_FILE_NAME: str = "data.txt"
ZONES_FILE_NAME: str = "etra_zones.txt"

# Agent graph
MAX_AGENTIC_ROUNDS: int = 8
AGENT_MAX_TOKENS: int = 1024
LOCAL_TIMEZONE: str = "Europe/Rome"

# Chat request limits
MAX_MESSAGES_PER_REQUEST: int = 50
MAX_CONTENT_LENGTH: int = 10_000
DEFAULT_CHAT_TITLE: str = "New Chat"

# Rate limiting: RATE_LIMIT_REQUESTS per RATE_LIMIT_WINDOW seconds per client IP
RATE_LIMIT_REQUESTS: int = 10
RATE_LIMIT_WINDOW: float = 600.0

# Anonymous user cookie
ANONYMOUS_COOKIE_NAME: str = "anonymous-user-id"
ANONYMOUS_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 365
