"""Root conftest - shared test configuration."""

import os

# Never point tests at the docker-compose Postgres
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("EXPIRY_SWEEP_INTERVAL_SECONDS", "0")
