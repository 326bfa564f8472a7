# api/index.py
"""
ASGI entry point.

Serverless runtimes (and `uvicorn api.index:app`) look for a variable named
`app`, so we just re-export the FastAPI instance.
"""
import sys
import os

# Ensure project root is on the Python path so `dbexplorer.*` imports resolve.
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Force env vars for serverless context
os.environ.setdefault("PROMETHEUS_ENABLED", "false")

# Use /tmp for SQLite on read-only hosts (only /tmp is writable)
if not os.environ.get("DATABASE_URL"):
    os.environ["DATABASE_URL"] = "sqlite:////tmp/dbexplorer.db"

# Load .env if present (hosts inject env vars natively, but this helps local testing)
from dotenv import load_dotenv
load_dotenv(os.path.join(ROOT, ".env"), override=True)

from dbexplorer.app import app  # noqa: F401, E402
