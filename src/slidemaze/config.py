from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "SLIDEMAZE_"


class GenerationSettings(BaseModel):
    """Inputs to the dungeon generator.

    Settings can be built from:
    - keyword arguments (defaults produce a 40x40 level)
    - environment variables with the ``SLIDEMAZE_`` prefix, e.g. ``SLIDEMAZE_WIDTH=30``
    - a YAML mapping file whose keys are the field names below
    """

    model_config = {"frozen": True, "extra": "forbid"}

    width: int = Field(40, ge=6, description="Grid width in tiles")
    height: int = Field(40, ge=6, description="Grid height in tiles")
    seed: int = Field(1000, description="Base seed; attempt i uses seed + i")
    max_attempts: int = Field(10, ge=1, le=1000, description="Attempts before giving up")
    min_exit_distance: int = Field(5, ge=1, description="Minimum slide distance from start to exit")
    hazard_fraction: float = Field(0.05, ge=0.0, le=1.0, description="Share of floor-facing walls turned into hazards")
    coin_chance: float = Field(0.2, ge=0.0, le=1.0, description="Probability that a level gets a bonus coin")
    min_leaf_size: int = Field(6, ge=3, description="Smallest BSP region edge")
    max_leaf_size: int = Field(20, ge=6, description="Regions larger than this are always split")
    split_chance: float = Field(0.75, ge=0.0, le=1.0, description="Split probability for regions under the max size")
    room_min_size: int = Field(4, ge=4, description="Smallest room edge")

    @model_validator(mode="after")
    def _check_geometry(self) -> "GenerationSettings":
        if self.min_leaf_size < self.room_min_size + 2:
            raise ValueError("min_leaf_size must leave room for a room plus a one-tile wall on each side")
        if min(self.width, self.height) < self.room_min_size + 2:
            raise ValueError("grid is too small to hold a single room with a wall border")
        if self.max_leaf_size < self.min_leaf_size:
            raise ValueError("max_leaf_size must not be smaller than min_leaf_size")
        return self

    def with_overrides(self, **overrides: Any) -> "GenerationSettings":
        """Return a copy with the non-None overrides applied (validated)."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return GenerationSettings(**data)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source: str = "<mapping>") -> "GenerationSettings":
        try:
            return cls(**dict(raw))
        except ValidationError as e:
            raise ConfigError(f"Invalid generation settings in {source}: {e}") from e

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GenerationSettings":
        env = os.environ if environ is None else environ
        raw: Dict[str, Any] = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in env:
                raw[name] = env[key]
        if raw:
            logger.debug("Generation settings from environment: %s", raw)
        return cls.from_mapping(raw, source="environment")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "GenerationSettings":
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must contain a mapping, got {type(raw).__name__}")
        logger.debug("Loaded generation settings from %s", path)
        return cls.from_mapping(raw, source=str(path))

    def to_yaml(self, path: str | Path) -> None:
        Path(path).write_text(yaml.safe_dump(self.model_dump(), sort_keys=True), encoding="utf-8")
