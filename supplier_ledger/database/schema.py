# supplier_ledger/database/schema.py
from pathlib import Path
import sqlite3

SCHEMA_VERSION = "1"

SQL = r"""
/* One row per stored document; body is the JSON-serialized record. */
CREATE TABLE IF NOT EXISTS documents (
    collection  TEXT NOT NULL,
    id          TEXT NOT NULL,
    body        TEXT NOT NULL,
    updated_at  TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (collection, id)
);

CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents(collection);

CREATE TABLE IF NOT EXISTS schema_version (
    id      INTEGER PRIMARY KEY CHECK (id=1),
    version TEXT NOT NULL
);
"""


def init_schema(db_path: Path | str) -> None:
    """Create the document tables if missing. Safe to call repeatedly."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.executescript(SQL)
        conn.execute(
            "INSERT OR IGNORE INTO schema_version(id, version) VALUES (1, ?);",
            (SCHEMA_VERSION,),
        )
        conn.commit()
    finally:
        conn.close()
