"""
Palette Maker API Schemas
Pydantic models for palettes and extraction request/response validation.
"""
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from palette_maker.services.colors.color_space import RGB, color_from_hex
from palette_maker.services.colors.palettes import TARGET_COLOR_COUNT


HEX_PATTERN = r"^#[0-9A-F]{6}$"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Palette(BaseModel):
    """A saved extraction: six colors plus when and from what they came."""
    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    id: uuid.UUID = Field(default_factory=uuid.uuid4, description="Palette identifier")
    colors: List[str] = Field(
        ...,
        min_length=TARGET_COLOR_COUNT,
        max_length=TARGET_COLOR_COUNT,
        description="Colors as uppercase #RRGGBB, most prominent first"
    )
    created_at: datetime = Field(default_factory=_utcnow, description="Creation time (UTC)")
    thumbnail_data: Optional[bytes] = Field(None, description="JPEG thumbnail of the source image")

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, v):
        for hex_color in v:
            if not re.match(HEX_PATTERN, hex_color):
                raise ValueError(f"invalid color {hex_color!r}, expected #RRGGBB")
        return v

    def rgb_colors(self) -> List[RGB]:
        """Palette colors as RGB values."""
        return [color_from_hex(hex_color) for hex_color in self.colors]


class PaletteExtractResponse(BaseModel):
    """Response of the extraction endpoint."""
    request_id: str = Field(..., description="Request identifier for tracing")
    palette: Palette = Field(..., description="Extracted palette")
    fallback_used: bool = Field(
        ...,
        description="Whether the default palette was returned because the image had too little usable color"
    )
    valid_pixel_count: int = Field(..., ge=0, description="Pixels left after filtering")
    swatch_png_b64: Optional[str] = Field(None, description="Base64-encoded PNG swatch strip")
    debug: Dict[str, Any] = Field(default_factory=dict, description="Timings and engine parameters")


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("palette-maker", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")
