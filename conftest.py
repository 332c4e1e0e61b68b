import os
import tempfile

# Settings are read at import time; point them at a throwaway SQLite file.
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite:///{os.path.join(tempfile.gettempdir(), f'fleet_api_test_{os.getpid()}.db')}",
)
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("APP_ENV", "test")
