from __future__ import annotations
import time
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


MediaKind = Literal["image", "video", "other"]
HandleKind = Literal["inlineData", "transientResourceURL", "none"]
HandleStatus = Literal["pending", "ready", "error"]
Phase = Literal["idle", "selected", "generated"]
LayoutStrategy = Literal["gridStatic", "gridCentered", "randomScatterNonOverlapping", "animatedStaggered"]

RGB = Tuple[int, int, int]

VIDEO_PLAYBACK: Dict[str, bool] = {
    "loop": True,
    "muted": True,
    "autoplay": True,
    "playsinline": True,
    "controls": False,
}


class RawFile(BaseModel):
    """Bytes handed over by the host's file picker, spooled to the scratch store."""
    model_config = ConfigDict(frozen=True)

    name: str
    content_type: Optional[str] = None
    path: str
    size: int = 0
    batch: str = ""


class SelectionItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    name: str
    media_kind: MediaKind = "other"
    raw: RawFile


class DisplayHandle(BaseModel):
    index: int  # position of the owning SelectionItem
    name: str
    media_kind: MediaKind
    kind: HandleKind = "none"
    status: HandleStatus = "ready"
    uri: str = ""
    token: Optional[str] = None  # transient reference id, videos only
    label: str = ""
    error: Optional[str] = None
    playback: Dict[str, bool] = Field(default_factory=dict)


class ScriptParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Canvas
    canvas_width: int = Field(default=1920, gt=0)
    canvas_height: int = Field(default=1080, gt=0)
    fps: int = Field(default=30, gt=0)
    # Timing
    segment_duration: float = Field(default=7.0, gt=0)
    min_total_duration: float = Field(default=10.0, ge=0)
    stagger_seconds: float = Field(default=0.5, ge=0)
    # Tiles
    tile_width: int = Field(default=480, gt=0)
    border: int = Field(default=10, ge=0)
    padding: int = Field(default=50, ge=0)
    cell_gap: int = Field(default=20, ge=0)
    drift_px: int = Field(default=12, ge=0)
    # Colors
    background_color: RGB = (15, 15, 15)
    border_color: RGB = (200, 200, 200)
    # Layout
    layout: LayoutStrategy = "gridCentered"
    grid_cols: Optional[int] = Field(default=None, gt=0)
    grid_rows: Optional[int] = Field(default=None, gt=0)
    seed: int = 42
    placement_attempts: int = Field(default=50, gt=0)
    # Audio
    music_filename: Optional[str] = None
    music_volume: float = Field(default=0.3, ge=0)
    # Output
    output_filename: str = "composite_output_1080p.mp4"
    script_filename: str = "composite_script.py"

    @field_validator("background_color", "border_color")
    @classmethod
    def _rgb_range(cls, v: RGB) -> RGB:
        if any(c < 0 or c > 255 for c in v):
            raise ValueError("RGB components must be within 0..255")
        return v

    @field_validator("output_filename", "script_filename")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("filename must not be blank")
        return v

    @model_validator(mode="after")
    def _canvas_fits_padding(self) -> "ScriptParameters":
        if 2 * self.padding >= min(self.canvas_width, self.canvas_height):
            raise ValueError("padding leaves no room on the canvas")
        return self

    def total_duration(self, count: int = 1) -> float:
        total = max(self.segment_duration, self.min_total_duration)
        if self.layout == "animatedStaggered" and count > 1:
            total = max(total, (count - 1) * self.stagger_seconds + self.segment_duration)
        return total


class GeneratedScript(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    filenames: List[str]
    params: ScriptParameters
    generation: int = 0
    created_at: float = Field(default_factory=time.time)


class GenerateReq(BaseModel):
    duration: Optional[float] = Field(default=None, gt=0)
    layout: Optional[LayoutStrategy] = None
