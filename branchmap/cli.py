"""Command-line options and session construction shared by the launcher and the window."""

import argparse
from typing import List, Optional

from loguru import logger

from branchmap import __version__
from branchmap.config import Settings, load_settings
from branchmap.database import Database
from branchmap.models import LayoutDirection
from branchmap.persistence import DatabaseSaveBackend, Scheduler, SimulatedSaveBackend
from branchmap.seed import DEFAULT_SEED, load_seed_file
from branchmap.session import MindMapSession


DEFAULT_MAP_NAME = "default"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="branchmap",
        description="Collapsible mind map viewer and editor.",
    )
    parser.add_argument("--seed", metavar="FILE",
                        help="JSON file with the initial tree ({id, label, children})")
    parser.add_argument("--direction", type=LayoutDirection.parse, metavar="LR|TB",
                        help="layout direction (default: from settings)")
    parser.add_argument("--backend", choices=("simulated", "sqlite"), default="simulated",
                        help="where Save sends the map (default: simulated)")
    parser.add_argument("--map-name", default=DEFAULT_MAP_NAME,
                        help="name of the map in the sqlite backend")
    parser.add_argument("--fail-saves", action="store_true",
                        help="make the simulated backend reject every save")
    parser.add_argument("--log-level", default=None,
                        help="DEBUG, INFO, WARNING or ERROR (default: INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_args(argv: Optional[List[str]] = None):
    """Parse our options and leave the rest (GTK's own) untouched."""
    return build_parser().parse_known_args(argv)


def create_session(options, db: Optional[Database] = None,
                   scheduler: Optional[Scheduler] = None) -> MindMapSession:
    """Build a laid-out session from parsed options.

    With the sqlite backend the last saved version of the map is loaded
    when there is one; otherwise the seed is used.
    """
    settings = load_settings(db) if db is not None else Settings()
    if options.direction is not None:
        settings.layout_direction = options.direction.value

    if options.backend == "sqlite":
        if db is None:
            raise ValueError("The sqlite backend needs a database")
        backend = DatabaseSaveBackend(db, options.map_name)
        payload = db.load_map_payload(options.map_name)
        if payload is not None:
            logger.info(f"Loaded saved map {options.map_name!r}")
            return MindMapSession.from_payload(payload, settings=settings, backend=backend)
    else:
        backend = SimulatedSaveBackend(
            delay_ms=settings.save_delay_ms, scheduler=scheduler, fail=options.fail_saves
        )

    seed = load_seed_file(options.seed) if options.seed else DEFAULT_SEED
    return MindMapSession.from_seed(seed, settings=settings, backend=backend)
