"""Runtime configuration.

Settings are loaded from YAML defaults and overridden by environment variables
prefixed with `FTD_`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from floortouch.core.analytics.pipeline import PipelineConfig


class TouchSettings(BaseSettings):
    """Runtime configuration loaded from YAML defaults and `FTD_` env overrides."""

    model_config = SettingsConfigDict(env_prefix="FTD_", validate_assignment=True)

    source: str = Field("openni", description="openni|synthetic")
    frame_width: int = 640
    frame_height: int = 480

    # Depth -> 8-bit intensity conversion: saturate(depth * gain) * scale.
    depth_gain: float = 32.0
    depth_scale: float = 0.006
    # Contrast boost applied to |current - baseline|.
    difference_gain: float = 2.0

    # Noise band. Pixels above upper_bound are removed (or clamped), pixels at
    # or below lower_bound are removed.
    lower_bound: int = 10
    upper_bound: int = 50
    clip_mode: str = Field("zero", description="zero|clamp")
    # Regions with this many boundary points or fewer are treated as noise.
    min_points: int = 100

    marker_radius: int = 20
    marker_thickness: int = 2
    marker_intensity: int = 100

    # Frame rate of the synthetic source (sensors pace themselves). 0 generates
    # frames as fast as they are read.
    target_fps: float = 30.0
    jpeg_quality: int = 80
    profile_steps: bool = False
    # Standard deviation of the synthetic source's depth noise (raw units).
    synthetic_noise: float = 0.0

    @field_validator("source")
    def _validate_source(cls, v: str) -> str:
        if v not in {"openni", "synthetic"}:
            raise ValueError("source must be openni|synthetic")
        return v

    @field_validator("clip_mode")
    def _validate_clip_mode(cls, v: str) -> str:
        if v not in {"zero", "clamp"}:
            raise ValueError("clip_mode must be zero|clamp")
        return v

    @field_validator("frame_width", "frame_height")
    def _validate_frame_dim(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("frame dimensions must be > 0")
        return v

    @field_validator("depth_gain", "depth_scale", "difference_gain")
    def _validate_gain(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("gains must be > 0")
        return float(v)

    @field_validator("lower_bound", "upper_bound", "marker_intensity")
    def _validate_intensity(cls, v: int) -> int:
        if not 0 <= int(v) <= 255:
            raise ValueError("intensity values must be in [0, 255]")
        return int(v)

    @field_validator("min_points")
    def _validate_min_points(cls, v: int) -> int:
        if v < 0:
            raise ValueError("min_points must be >= 0")
        return v

    @field_validator("marker_radius", "marker_thickness")
    def _validate_marker(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("marker sizes must be > 0")
        return v

    @field_validator("target_fps")
    def _validate_target_fps(cls, v: float) -> float:
        if v < 0:
            raise ValueError("target_fps must be >= 0")
        return float(v)

    @field_validator("jpeg_quality")
    def _validate_jpeg_quality(cls, v: int) -> int:
        if not 10 <= v <= 100:
            raise ValueError("jpeg_quality must be in [10, 100]")
        return v

    @field_validator("synthetic_noise")
    def _validate_synthetic_noise(cls, v: float) -> float:
        if v < 0:
            raise ValueError("synthetic_noise must be >= 0")
        return float(v)

    @model_validator(mode="after")
    def _validate_band(self) -> TouchSettings:
        if self.lower_bound > self.upper_bound:
            raise ValueError("lower_bound must be <= upper_bound")
        return self


def settings_to_dict(settings: TouchSettings) -> dict[str, Any]:
    """Convert settings to a plain dict."""

    return cast(dict[str, Any], settings.model_dump())


def _config_path() -> Path:
    """Return the YAML configuration path (defaults to config/floortouch.config.yml)."""

    return Path(os.getenv("FTD_CONFIG", "config/floortouch.config.yml"))


def load_settings() -> TouchSettings:
    """Load settings from YAML and environment variables.

    YAML provides defaults; environment variables override.
    """

    data: dict[str, Any] = {}
    path = _config_path()
    if path.exists():
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    env_settings = TouchSettings()
    env_overrides: dict[str, Any] = {
        name: getattr(env_settings, name) for name in env_settings.model_fields_set
    }

    merged = {**data, **env_overrides}
    return TouchSettings(**merged)


def pipeline_config_from_settings(settings: TouchSettings) -> PipelineConfig:
    """Build the pipeline's tuning parameters from `settings`."""

    return PipelineConfig(
        depth_gain=settings.depth_gain,
        depth_scale=settings.depth_scale,
        difference_gain=settings.difference_gain,
        lower_bound=settings.lower_bound,
        upper_bound=settings.upper_bound,
        clip_mode=settings.clip_mode,
        min_points=settings.min_points,
        marker_radius=settings.marker_radius,
        marker_thickness=settings.marker_thickness,
        marker_intensity=settings.marker_intensity,
    )
