"""SQLite storage for saved mind maps and application settings."""

import json
import os
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional


def get_data_dir() -> Path:
    """Get the application data directory."""
    override = os.environ.get("BRANCHMAP_DATA_DIR")
    data_dir = Path(override) if override else Path.home() / ".local" / "share" / "branchmap"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_db_path() -> Path:
    """Get the database file path."""
    return get_data_dir() / "branchmap.db"


class Database:
    """Database manager for BranchMap."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or get_db_path()
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
        return self._conn

    def _init_db(self):
        """Initialize the database schema."""
        cursor = self.conn.cursor()

        cursor.executescript("""
            -- Maps table
            CREATE TABLE IF NOT EXISTS maps (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                saved_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );

            -- Nodes table (labels only; layout is recomputed on load)
            CREATE TABLE IF NOT EXISTS nodes (
                map_id INTEGER NOT NULL,
                node_id TEXT NOT NULL,
                label TEXT NOT NULL,
                sort_order INTEGER DEFAULT 0,
                PRIMARY KEY (map_id, node_id),
                FOREIGN KEY (map_id) REFERENCES maps(id) ON DELETE CASCADE
            );

            -- Edges table
            CREATE TABLE IF NOT EXISTS edges (
                map_id INTEGER NOT NULL,
                source TEXT NOT NULL,
                target TEXT NOT NULL,
                sort_order INTEGER DEFAULT 0,
                PRIMARY KEY (map_id, target),
                FOREIGN KEY (map_id) REFERENCES maps(id) ON DELETE CASCADE
            );

            -- App settings table
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value JSON
            );

            CREATE INDEX IF NOT EXISTS idx_edges_source ON edges(map_id, source);
        """)

        self.conn.commit()

    def close(self):
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    # ==================== Map Operations ====================

    def save_map_payload(self, name: str, payload: dict) -> int:
        """Replace the stored contents of a map with a save payload."""
        cursor = self.conn.cursor()
        now = datetime.now().isoformat()

        try:
            cursor.execute("SELECT id FROM maps WHERE name = ?", (name,))
            row = cursor.fetchone()
            if row:
                map_id = row["id"]
                cursor.execute("UPDATE maps SET saved_at = ? WHERE id = ?", (now, map_id))
                cursor.execute("DELETE FROM nodes WHERE map_id = ?", (map_id,))
                cursor.execute("DELETE FROM edges WHERE map_id = ?", (map_id,))
            else:
                cursor.execute(
                    "INSERT INTO maps (name, created_at, saved_at) VALUES (?, ?, ?)",
                    (name, now, now)
                )
                map_id = cursor.lastrowid

            cursor.executemany(
                "INSERT INTO nodes (map_id, node_id, label, sort_order) VALUES (?, ?, ?, ?)",
                [(map_id, n["id"], n["label"], i) for i, n in enumerate(payload.get("nodes", []))]
            )
            cursor.executemany(
                "INSERT INTO edges (map_id, source, target, sort_order) VALUES (?, ?, ?, ?)",
                [(map_id, e["source"], e["target"], i) for i, e in enumerate(payload.get("edges", []))]
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

        return map_id

    def load_map_payload(self, name: str) -> Optional[dict]:
        """Return the stored payload of a map, or None if it was never saved."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT id FROM maps WHERE name = ?", (name,))
        row = cursor.fetchone()
        if not row:
            return None

        map_id = row["id"]
        cursor.execute(
            "SELECT node_id, label FROM nodes WHERE map_id = ? ORDER BY sort_order",
            (map_id,)
        )
        nodes = [{"id": r["node_id"], "label": r["label"]} for r in cursor.fetchall()]

        cursor.execute(
            "SELECT source, target FROM edges WHERE map_id = ? ORDER BY sort_order",
            (map_id,)
        )
        edges = [{"source": r["source"], "target": r["target"]} for r in cursor.fetchall()]

        return {"nodes": nodes, "edges": edges}

    # ==================== Settings Operations ====================

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get an application setting."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
        row = cursor.fetchone()

        if not row:
            return default

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            return default

    def set_setting(self, key: str, value: Any):
        """Set an application setting."""
        cursor = self.conn.cursor()
        cursor.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
            (key, json.dumps(value))
        )
        self.conn.commit()
