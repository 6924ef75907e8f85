import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    max_workers: int
    default_export_dir: str
    jpeg_quality: int
    preview_format: str
    pdf_page_size_mm: tuple[float, float]
    pdf_margin_mm: float
    pdf_image_dpi: float
    pdf_label_font_size: float


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


# User dir env (where exports land when no path is given)
BASE_USER_DIR = os.path.abspath(os.getenv("INKSPLIT_USER_DIR", "user"))

# Global application constants
APP_CONFIG = AppConfig(
    max_workers=_env_int("INKSPLIT_MAX_WORKERS", max(1, (os.cpu_count() or 1) - 1)),
    default_export_dir=os.getenv(
        "INKSPLIT_EXPORT_DIR", os.path.join(BASE_USER_DIR, "export")
    ),
    jpeg_quality=70,
    preview_format="PNG",
    pdf_page_size_mm=(210.0, 297.0),  # A4
    pdf_margin_mm=20.0,
    pdf_image_dpi=72.0,
    pdf_label_font_size=14.0,
)

# Fixed parameters of the plate effects
EFFECT_CONSTANTS = {
    "dither_threshold": 128.0,
    "halftone_cell": 6,
    "halftone_radius_divisor": 1.3,
    "threshold_cutoff": 128,
    "posterize_levels": 4,
}

# Fixed parameters of the composite filters
FILTER_CONSTANTS = {
    "pixelate_block": 10,
    "brightness_offset": 30,
    "contrast": 25.0,
    "blur_sigma": 3.0,
    "sharpen_kernel": [-1.0, -1.0, -1.0, -1.0, 9.0, -1.0, -1.0, -1.0, -1.0],
    "sepia_matrix": [
        0.393,
        0.769,
        0.189,
        0.349,
        0.686,
        0.168,
        0.272,
        0.534,
        0.131,
    ],
}
