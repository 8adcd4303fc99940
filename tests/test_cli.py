"""Tests for command-line parsing, session construction and logging setup."""

import json

import pytest
from loguru import logger

from branchmap.cli import create_session, parse_args
from branchmap.config import Settings, load_settings, save_settings
from branchmap.log import configure_logging
from branchmap.models import LayoutDirection, LinkSide, Mode
from branchmap.persistence import DatabaseSaveBackend, SimulatedSaveBackend


class TestParseArgs:

    def test_defaults(self):
        options, rest = parse_args([])
        assert options.seed is None
        assert options.direction is None
        assert options.backend == "simulated"
        assert options.fail_saves is False
        assert rest == []

    def test_unknown_args_passed_through(self):
        options, rest = parse_args(["--direction", "TB", "--gapplication-service"])
        assert options.direction is LayoutDirection.TOP_BOTTOM
        assert rest == ["--gapplication-service"]

    def test_bad_direction(self):
        with pytest.raises(SystemExit):
            parse_args(["--direction", "diagonal"])


class TestCreateSession:

    def test_default_seed(self):
        options, _ = parse_args([])
        session = create_session(options)
        assert len(session.store.nodes) == 17
        assert isinstance(session.backend, SimulatedSaveBackend)

    def test_seed_file_and_direction(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps({"id": "root", "label": "Plan",
                                    "children": [{"id": "x", "label": "X"}]}))
        options, _ = parse_args(["--seed", str(path), "--direction", "TB"])

        session = create_session(options)

        assert [n.id for n in session.store.nodes] == ["root", "x"]
        assert session.direction is LayoutDirection.TOP_BOTTOM
        assert session.store.get_node("x").parent_link_side is LinkSide.TOP

    def test_fail_saves(self):
        options, _ = parse_args(["--fail-saves"])
        session = create_session(options)
        session.enter_edit()
        session.save()
        assert session.mode is Mode.EDIT

    def test_sqlite_backend_reloads_saved_map(self, db):
        options, _ = parse_args(["--backend", "sqlite"])
        session = create_session(options, db=db)
        assert isinstance(session.backend, DatabaseSaveBackend)

        session.enter_edit()
        session.on_label_change("root", "Renamed")
        session.save()

        reloaded = create_session(options, db=db)
        assert reloaded.store.get_node("root").label == "Renamed"
        assert len(reloaded.store.nodes) == 17

    def test_stored_settings_are_used(self, db):
        save_settings(db, Settings(layout_direction="TB", show_grid=False))
        options, _ = parse_args([])

        session = create_session(options, db=db)

        assert session.direction is LayoutDirection.TOP_BOTTOM
        assert session.settings.show_grid is False

    def test_direction_change_survives_restart(self, db):
        options, _ = parse_args([])
        session = create_session(options, db=db)
        session.set_direction("TB")
        save_settings(db, session.settings)

        assert load_settings(db).direction is LayoutDirection.TOP_BOTTOM
        assert create_session(options, db=db).direction is LayoutDirection.TOP_BOTTOM

    def test_sqlite_backend_needs_db(self):
        options, _ = parse_args(["--backend", "sqlite"])
        with pytest.raises(ValueError):
            create_session(options)


class TestLogging:

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv("BRANCHMAP_LOG_LEVEL", "warning")
        try:
            assert configure_logging() == "WARNING"
        finally:
            logger.remove()

    def test_file_sink(self, tmp_path):
        log_file = tmp_path / "branchmap.log"
        try:
            configure_logging("INFO", log_file=log_file)
            logger.debug("written to file only")
        finally:
            logger.remove()
        assert "written to file only" in log_file.read_text(encoding="utf-8")
