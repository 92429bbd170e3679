"""Pydantic models for the HTTP/WS API."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator


class TouchSchema(BaseModel):
    """Touch point payload."""

    x: float
    y: float
    size: int
    area: float = 0.0
    axes: tuple[float, float] = (0.0, 0.0)
    angle: float = 0.0


class FrameSchema(BaseModel):
    """Per-frame payload sent over `WS /stream/metadata`."""

    frame_id: int
    timestamp: float
    calibrated: bool
    calibrated_now: bool = False
    touch: TouchSchema | None = None
    region_count: int
    fps: float
    frame_size: tuple[int, int] | list[int]
    stream_fps: float | None = None
    profile: dict[str, float] | None = None


class HealthSchema(BaseModel):
    status: str
    engine: str
    state: str | None = None


class StatsSchema(BaseModel):
    """High-level summary stats payload."""

    state: str
    touch: TouchSchema | None = None
    region_count: int = 0
    lower_bound: int
    upper_bound: int
    fps: float
    stream_fps: float | None = None
    error: str | None = None


class BandSchema(BaseModel):
    """Noise band used by `POST /control/reset`."""

    lower: int = Field(ge=0, le=255)
    upper: int = Field(ge=0, le=255)

    @model_validator(mode="after")
    def _validate_order(self) -> BandSchema:
        if self.lower > self.upper:
            raise ValueError("lower must be <= upper")
        return self


class ControlSchema(BaseModel):
    """Result of a control request."""

    state: str
    lower_bound: int
    upper_bound: int


class ConfigSchema(BaseModel):
    """Runtime configuration payload."""

    source: str
    frame_width: int = Field(default=640, gt=0)
    frame_height: int = Field(default=480, gt=0)
    depth_gain: float = Field(default=32.0, gt=0.0)
    depth_scale: float = Field(default=0.006, gt=0.0)
    difference_gain: float = Field(default=2.0, gt=0.0)
    lower_bound: int = Field(default=10, ge=0, le=255)
    upper_bound: int = Field(default=50, ge=0, le=255)
    clip_mode: str = "zero"
    min_points: int = Field(default=100, ge=0)
    marker_radius: int = Field(default=20, gt=0)
    marker_thickness: int = Field(default=2, gt=0)
    marker_intensity: int = Field(default=100, ge=0, le=255)
    target_fps: float = Field(default=30.0, ge=0)
    jpeg_quality: int = Field(default=80, ge=10, le=100)
    profile_steps: bool = False
    synthetic_noise: float = Field(default=0.0, ge=0.0)

    @field_validator("source")
    @classmethod
    def _validate_source(cls, v: str) -> str:
        if v not in {"openni", "synthetic"}:
            raise ValueError("source must be openni|synthetic")
        return v

    @field_validator("clip_mode")
    @classmethod
    def _validate_clip_mode(cls, v: str) -> str:
        if v not in {"zero", "clamp"}:
            raise ValueError("clip_mode must be zero|clamp")
        return v

    @model_validator(mode="after")
    def _validate_band(self) -> ConfigSchema:
        if self.lower_bound > self.upper_bound:
            raise ValueError("lower_bound must be <= upper_bound")
        return self
