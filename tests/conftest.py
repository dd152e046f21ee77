"""Root conftest — shared test configuration."""

import os

# Settings are cached on first import; pin them before anything imports vending.config
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("PURCHASE_MODE", "atomic")
os.environ.setdefault("STOCK_GUARD_ENABLED", "true")
