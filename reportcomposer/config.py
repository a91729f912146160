from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        env_prefix='COMPOSER_',
        case_sensitive=False,
        extra='ignore',
    )

    output_dir: Path = Field(default=Path('./out'))

    # Page setup (points)
    page_width: float = A4[0]
    page_height: float = A4[1]
    margin_top: float = 20 * mm
    margin_bottom: float = 20 * mm
    margin_left: float = 20 * mm
    margin_right: float = 20 * mm

    # Typography
    base_font_size: float = 10.0
    font_regular: str = 'Helvetica'
    font_bold: str = 'Helvetica-Bold'
    font_italic: str = 'Helvetica-Oblique'

    # Running header / footer
    header_footer_enabled: bool = True
    logo_enabled: bool = True
    date_format: str = '%d/%m/%Y'

    # Image acquisition
    image_fetch_timeout_seconds: float = 15.0
    # Relative image paths resolve against this directory
    image_base_dir: Path | None = None


@dataclass(frozen=True)
class LayoutConfig:
    page_width: float = A4[0]
    page_height: float = A4[1]
    margin_top: float = 20 * mm
    margin_bottom: float = 20 * mm
    margin_left: float = 20 * mm
    margin_right: float = 20 * mm

    base_font_size: float = 10.0
    font_regular: str = 'Helvetica'
    font_bold: str = 'Helvetica-Bold'
    font_italic: str = 'Helvetica-Oblique'

    header_footer_enabled: bool = True
    logo_enabled: bool = True
    date_format: str = '%d/%m/%Y'

    # Fixed metrics used by measurement; no font lookups.
    char_width_ratio: float = 0.5
    line_height_ratio: float = 1.4
    block_spacing: float = 4 * mm
    heading_padding: float = 2.5 * mm
    cell_padding: float = 1.5 * mm
    header_row_height: float = 8 * mm
    key_value_label_ratio: float = 0.35
    bullet_indent: float = 5 * mm
    placeholder_height: float = 30 * mm
    signature_height: float = 30 * mm
    rule_height: float = 4 * mm
    rule_thickness: float = 0.8
    logo_height: float = 15 * mm
    # Wide logos are capped to this share of the column width.
    logo_max_width_ratio: float = 0.4
    header_gap: float = 10 * mm
    footer_font_size: float = 8.0

    @property
    def column_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def usable_height(self) -> float:
        return self.page_height - self.margin_top - self.margin_bottom

    def line_height(self, font_size: float) -> float:
        return font_size * self.line_height_ratio

    @classmethod
    def from_settings(cls, settings: Settings) -> 'LayoutConfig':
        return cls(
            page_width=settings.page_width,
            page_height=settings.page_height,
            margin_top=settings.margin_top,
            margin_bottom=settings.margin_bottom,
            margin_left=settings.margin_left,
            margin_right=settings.margin_right,
            base_font_size=settings.base_font_size,
            font_regular=settings.font_regular,
            font_bold=settings.font_bold,
            font_italic=settings.font_italic,
            header_footer_enabled=settings.header_footer_enabled,
            logo_enabled=settings.logo_enabled,
            date_format=settings.date_format,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
