# supplier_ledger/config.py
import os
from pathlib import Path

from .constants import DATA_DIR, DB_FILE_NAME, DEFAULT_BACKEND


def _get_env(name: str) -> str | None:
    value = os.getenv(name)
    return value.strip() if value else None


BASE_DIR = Path(_get_env("LEDGER_HOME") or Path.cwd()).resolve()
DATA_PATH = BASE_DIR / DATA_DIR
DB_PATH = Path(_get_env("LEDGER_DB_PATH") or DATA_PATH / DB_FILE_NAME)

BACKEND = (_get_env("LEDGER_BACKEND") or DEFAULT_BACKEND).lower()

# None selects the Firestore "(default)" database
FIRESTORE_DATABASE = _get_env("FIRESTORE_DATABASE")

LOG_LEVEL = (_get_env("LEDGER_LOG_LEVEL") or "INFO").upper()
