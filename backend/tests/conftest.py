"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database or reuse a real signing secret
os.environ.pop("DATABASE_URL", None)
os.environ.setdefault("JWT_SECRET", "test-session-secret")
os.environ.setdefault("DEPLOYMENT_MODE", "test")
os.environ.setdefault("LOG_FORMAT", "text")
