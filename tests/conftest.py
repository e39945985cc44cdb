"""Root conftest — shared test configuration."""

import os

# Tests never report to a real telemetry endpoint or touch a real database
os.environ.pop("RUNTIME_ERROR_ENDPOINT_URL", None)
os.environ.pop("BOARD_ID", None)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
