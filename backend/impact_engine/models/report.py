"""
Report model definitions.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

RGB = tuple[int, int, int]


class ReportTheme(BaseModel):
    """Palette used by the PDF renderer (0-255 RGB)."""

    model_config = ConfigDict(frozen=True)

    primary: RGB = (34, 139, 34)
    secondary: RGB = (70, 130, 180)
    danger: RGB = (220, 53, 69)
    warning: RGB = (255, 193, 7)
    success: RGB = (40, 167, 69)
    info: RGB = (23, 162, 184)
    gray: RGB = (108, 117, 125)
    light_gray: RGB = (248, 249, 250)
    white: RGB = (255, 255, 255)


class ReportConfig(BaseModel):
    """
    Everything the renderer needs besides the assessment itself.

    Dimensions are in millimetres; the renderer converts to PDF points.
    """

    model_config = ConfigDict(frozen=True)

    product_name: str = "TIER IV PRO"
    title: str = "PROJECT IMPACT ASSESSMENT"
    page_width_mm: float = 210.0
    page_height_mm: float = 297.0
    margin_mm: float = 20.0
    theme: ReportTheme = Field(default_factory=ReportTheme)


class ReportDocument(BaseModel):
    """A rendered report, ready to download or save."""

    filename: str
    content: bytes
    page_count: int
    sections: list[str] = Field(default_factory=list, description="Section names in draw order")
