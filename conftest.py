"""Global pytest configuration."""

import os

# Tests run against the in-memory repository unless a fixture binds SQLite
os.environ["DATABASE_URL"] = ""
os.environ.setdefault("OPENROUTER_API_KEY", "test-key")
