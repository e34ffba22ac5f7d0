"""Runtime settings for the clinic portal, read from the environment.
A local .env file is honoured through python-dotenv.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

API_BASE_URL = os.getenv("CLINIC_API_URL", "http://localhost:5000").rstrip("/")
HTTP_TIMEOUT = float(os.getenv("CLINIC_HTTP_TIMEOUT", "15"))
STORAGE_PATH = Path(
    os.getenv("CLINIC_STORAGE_PATH", str(Path.home() / ".clinic_portal" / "storage.json"))
).expanduser()
LOG_LEVEL = os.getenv("CLINIC_LOG_LEVEL", "INFO").upper()

CLINIC_NAME = "Clínica Vida y Salud"


def configure_logging(level: str | None = None) -> None:
    """Set up root logging once for the portal process."""
    logging.basicConfig(
        level=level or LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
