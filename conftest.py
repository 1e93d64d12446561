"""Global pytest configuration."""

import os

# Set DATABASE_URL for tests before any imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./docqa-test.db")
# Tests always run against the deterministic offline provider
os.environ.pop("OPENAI_API_KEY", None)
