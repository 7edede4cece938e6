import os

# Must be set before fitlead.core.settings is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_fitlead.db")
os.environ.setdefault("SESSION_BACKEND", "database")
