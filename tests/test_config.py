"""Tests for settings."""

import pytest

from branchmap.config import Settings, load_settings, save_settings
from branchmap.models import LayoutDirection


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.direction is LayoutDirection.LEFT_RIGHT
        assert (settings.node_width, settings.node_height) == (172, 36)
        assert (settings.node_sep, settings.rank_sep) == (50, 100)
        assert (settings.child_x_offset, settings.child_y_spacing) == (200, 75)
        assert settings.save_delay_ms == 500

    def test_unknown_keys_ignored(self):
        settings = Settings.from_dict({"node_width": 220, "theme": "neon"})
        assert settings.node_width == 220
        assert not hasattr(settings, "theme")

    def test_json_round_trip(self):
        settings = Settings(layout_direction="TB", show_minimap=False)
        assert Settings.from_json(settings.to_json()) == settings

    @pytest.mark.parametrize("raw", [None, "", "not json", "[1, 2]"])
    def test_bad_json_gives_defaults(self, raw):
        assert Settings.from_json(raw) == Settings()

    def test_invalid_direction(self):
        with pytest.raises(ValueError):
            Settings(layout_direction="diagonal").direction

    def test_database_round_trip(self, db):
        assert load_settings(db) == Settings()

        save_settings(db, Settings(layout_direction="TB", rank_sep=120))
        loaded = load_settings(db)

        assert loaded.direction is LayoutDirection.TOP_BOTTOM
        assert loaded.rank_sep == 120


class TestLayoutDirection:

    @pytest.mark.parametrize("raw, expected", [
        ("LR", LayoutDirection.LEFT_RIGHT),
        ("lr", LayoutDirection.LEFT_RIGHT),
        ("horizontal", LayoutDirection.LEFT_RIGHT),
        ("TB", LayoutDirection.TOP_BOTTOM),
        ("top-bottom", LayoutDirection.TOP_BOTTOM),
        (LayoutDirection.TOP_BOTTOM, LayoutDirection.TOP_BOTTOM),
    ])
    def test_parse(self, raw, expected):
        assert LayoutDirection.parse(raw) is expected
