"""Configuration settings for Brainstormer."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

# Environment overrides
CONFIG_ENV_VAR = "BRAINSTORMER_CONFIG"
DATA_BASE_ENV_VAR = "BRAINSTORMER_DATA_BASE"


@dataclass
class Settings:
    """Application settings.

    Distances are in pixels along the scroll axis, durations in seconds.
    """

    # Loader
    fetch_timeout: float = 4.0
    allow_empty_catalogs: bool = False
    fallback_policy: str = "default"  # "default" or "raise"
    data_base: str = ""  # Extra base URL/path tried before the mirrors

    # Wheel and touch
    wheel_step: float = 120.0
    touch_scale: float = 1.0
    touch_min_travel: float = 12.0

    # Drag and fling
    velocity_smoothing: float = 0.8
    min_fling_velocity: float = 50.0
    max_fling_velocity: float = 3000.0
    fling_duration: float = 0.6
    release_idle_cutoff: float = 0.1

    # Snap
    snap_duration: float = 0.18

    # Auto-spin
    spin_cadence: float = 0.1  # Seconds per step at speed 1.0
    speed_presets: dict[str, float] = field(
        default_factory=lambda: {
            "slow": 0.9,
            "spin": 1.4,
            "fast": 2.2,
        }
    )

    # Rendering
    window_size: int = 3
    item_extent: float = 40.0
    frame_interval: float = 1 / 60

    def speed(self, preset: str) -> float:
        """Resolve a named speed preset."""
        try:
            return self.speed_presets[preset]
        except KeyError:
            raise ValueError(
                f"Unknown speed preset '{preset}'. "
                f"Must be one of: {sorted(self.speed_presets)}"
            ) from None

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Create Settings from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {unknown}")
        return cls(**data)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "Settings":
        """Load settings from YAML.

        Args:
            path: Path to a settings file. If None, uses the
                  BRAINSTORMER_CONFIG env var, else defaults.

        Returns:
            Settings with BRAINSTORMER_DATA_BASE applied on top
        """
        if path is None:
            path = os.environ.get(CONFIG_ENV_VAR) or None

        data: dict = {}
        if path is not None:
            path = Path(path)
            if not path.exists():
                raise FileNotFoundError(f"Settings file not found: {path}")
            with open(path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
            if loaded is None:
                loaded = {}
            if not isinstance(loaded, dict):
                raise ValueError("Settings file must be a YAML mapping")
            data = loaded

        settings = cls.from_dict(data)
        env_base = os.environ.get(DATA_BASE_ENV_VAR)
        if env_base:
            settings.data_base = env_base
        return settings
