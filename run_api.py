"""
Helper script to run the catalog API with uvicorn.
Usage:
  python run_api.py
"""
import os

from uvicorn import run

ROOT = os.path.dirname(os.path.abspath(__file__))
BACKEND_APP_DIR = os.path.join(ROOT, "backend", "app")

if __name__ == "__main__":
  log_level = os.environ.get("APP_LOG_LEVEL", "info").lower()
  run(
    "backend.app.main:app",
    host=os.environ.get("API_HOST", "0.0.0.0"),
    port=int(os.environ.get("API_PORT", "8000")),
    reload=os.environ.get("API_RELOAD", "1") in {"1", "true", "TRUE", "True"},
    reload_dirs=[BACKEND_APP_DIR],
    log_level=log_level,
    access_log=True,
  )
