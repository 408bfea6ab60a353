from __future__ import annotations

import os
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = REPO_ROOT / "data"

DEFAULT_SERVICE_HOST = "127.0.0.1"
DEFAULT_SERVICE_PORT = 8080
DEFAULT_QUERY_COUNT = 500
MAX_QUERY_COUNT = 100_000


def get_db_path() -> Path:
    return Path(os.getenv("DNSIDS_DB_PATH", DATA_DIR / "dnsids.sqlite"))


def get_export_path() -> Path:
    return Path(os.getenv("DNSIDS_EXPORT_PATH", DATA_DIR / "dns_dataset.csv"))


def get_log_level() -> str:
    return os.getenv("DNSIDS_LOG_LEVEL", "INFO").upper()
