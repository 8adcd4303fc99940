"""Application settings."""

import json
from dataclasses import dataclass, asdict, fields
from typing import Optional

from branchmap.models import LayoutDirection, PLACEHOLDER_LABEL


SETTINGS_KEY = "engine"


@dataclass
class Settings:
    """Tunable behaviour of the engine and the canvas."""
    layout_direction: str = "LR"
    node_width: float = 172
    node_height: float = 36
    node_sep: float = 50
    rank_sep: float = 100
    child_x_offset: float = 200
    child_y_spacing: float = 75
    placeholder_label: str = PLACEHOLDER_LABEL
    save_delay_ms: int = 500
    show_grid: bool = True
    show_minimap: bool = True

    @property
    def direction(self) -> LayoutDirection:
        return LayoutDirection.parse(self.layout_direction)

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Settings":
        if not isinstance(data, dict):
            return cls()
        # Filter to only known fields to handle schema evolution
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_json(cls, data: Optional[str]) -> "Settings":
        if not data:
            return cls()
        try:
            return cls.from_dict(json.loads(data))
        except (json.JSONDecodeError, TypeError):
            return cls()


def load_settings(db) -> Settings:
    """Read settings stored in the database, falling back to defaults."""
    stored = db.get_setting(SETTINGS_KEY, None)
    try:
        return Settings.from_dict(stored)
    except TypeError:
        return Settings()


def save_settings(db, settings: Settings):
    db.set_setting(SETTINGS_KEY, settings.to_dict())
