"""Save backends: the external collaborator a commit hands its payload to."""

import sqlite3
from typing import Callable, Optional

from loguru import logger

from branchmap.database import Database


SaveCallback = Callable[[Optional[Exception]], None]
Scheduler = Callable[[int, Callable[[], None]], None]


class SaveError(Exception):
    """A save backend rejected or failed to store the payload."""


class SimulatedSaveBackend:
    """Pretends to talk to a server: completes after a fixed delay.

    The delay is realised by the injected scheduler (the GUI passes a
    GLib timeout); without one the save completes immediately.
    """

    def __init__(self, delay_ms: int = 500, scheduler: Optional[Scheduler] = None,
                 fail: bool = False):
        self.delay_ms = delay_ms
        self.scheduler = scheduler
        self.fail = fail
        self.last_payload: Optional[dict] = None

    def save(self, payload: dict, done: SaveCallback):
        self.last_payload = payload
        logger.debug(f"Simulated save of {len(payload.get('nodes', []))} nodes")

        def finish():
            done(SaveError("Simulated save rejected") if self.fail else None)

        if self.scheduler is None:
            finish()
        else:
            self.scheduler(self.delay_ms, finish)


class DatabaseSaveBackend:
    """Stores the payload in the local SQLite database."""

    def __init__(self, db: Database, map_name: str = "default"):
        self.db = db
        self.map_name = map_name

    def save(self, payload: dict, done: SaveCallback):
        try:
            self.db.save_map_payload(self.map_name, payload)
        except sqlite3.Error as exc:
            done(SaveError(f"Could not write map {self.map_name!r}: {exc}"))
            return
        done(None)
