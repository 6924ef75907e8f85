import os
from typing import List, Optional, Sequence
from fpdf import FPDF
from PIL import Image
from inksplit.domain.models import ChannelKind, ChannelPlate, ChannelResult, ExportConfig
from inksplit.features.color.logic import color_suffix
from inksplit.kernel.errors import ProcessingError, StorageError
from inksplit.kernel.image.io import format_extension, load_image, save_image
from inksplit.kernel.system.config import APP_CONFIG
from inksplit.kernel.system.logging import get_logger
from inksplit.services.export.templating import (
    DEFAULT_CHANNEL_PATTERN,
    FilenameTemplater,
)

logger = get_logger(__name__)

MM_PER_INCH = 25.4


def _ensure_dir(path: str) -> None:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Failed to create export directory: {path} ({e})") from e


def _color_at(colors: Optional[Sequence[str]], i: int) -> Optional[str]:
    if colors is None or i >= len(colors):
        return None
    return colors[i]


def channel_label(channel: str, color: Optional[str] = None) -> str:
    if color:
        return f"Channel: {channel} - {color}"
    return f"Channel: {channel}"


class ExportService:
    """
    Writes persisted channels out as individual files or one PDF.
    Channels and colors are matched by position.
    """

    @staticmethod
    def save_plates_to_disk(
        plates: Sequence[ChannelPlate],
        base_name: str,
        colors: Optional[Sequence[str]] = None,
        export: Optional[ExportConfig] = None,
        filename_pattern: str = DEFAULT_CHANNEL_PATTERN,
    ) -> List[ChannelResult]:
        """
        One file per plate named {base}_{channel}[_{color}].{ext}, where
        color is the display color given for that position, if any.
        """
        export = export or ExportConfig(export_fmt="PNG")
        _ensure_dir(export.export_path)
        ext = format_extension(export.export_fmt)
        templater = FilenameTemplater()

        results = []
        for i, plate in enumerate(plates):
            color = _color_at(colors, i)
            name = templater.channel_name(
                base_name,
                plate.channel,
                color_suffix(color) if color else None,
                filename_pattern,
            )
            out_path = os.path.join(export.export_path, f"{name}.{ext}")
            save_image(plate.image, out_path, export.export_fmt, export.jpeg_quality)
            results.append(ChannelResult(plate.channel, out_path, plate.index))

        logger.info(f"Exported {len(results)} channel file(s) to {export.export_path}")
        return results

    @staticmethod
    def save_channels_to_disk(
        channels: Sequence[ChannelResult],
        base_name: str,
        colors: Optional[Sequence[str]] = None,
        export: Optional[ExportConfig] = None,
        filename_pattern: str = DEFAULT_CHANNEL_PATTERN,
    ) -> List[str]:
        """
        Re-exports already persisted channels, same naming as save_plates_to_disk.
        """
        plates = [
            ChannelPlate(ChannelKind.parse(c.channel), load_image(c.image_path))
            for c in channels
        ]
        results = ExportService.save_plates_to_disk(
            plates, base_name, colors, export, filename_pattern
        )
        return [r.image_path for r in results]

    @staticmethod
    def save_channels_to_pdf(
        channels: Sequence[ChannelResult],
        export_path: str,
        base_name: str,
        colors: Optional[Sequence[str]] = None,
    ) -> str:
        """
        A4 document, one page per channel: the image scaled to fit inside
        the margins (never upscaled), centered, with a channel label on top.
        """
        _ensure_dir(export_path)
        pdf_path = os.path.join(export_path, f"{base_name}.pdf")

        page_w, page_h = APP_CONFIG.pdf_page_size_mm
        margin = APP_CONFIG.pdf_margin_mm
        avail_w = page_w - 2.0 * margin
        avail_h = page_h - 2.0 * margin

        pdf = FPDF(orientation="P", unit="mm", format=(page_w, page_h))
        pdf.set_title(base_name)
        pdf.set_auto_page_break(auto=False)

        for i, channel in enumerate(channels):
            try:
                with Image.open(channel.image_path) as img:
                    px_w, px_h = img.size
            except OSError as e:
                raise ProcessingError(
                    f"Failed to read channel image: {channel.image_path} ({e})"
                ) from e

            img_w = px_w / APP_CONFIG.pdf_image_dpi * MM_PER_INCH
            img_h = px_h / APP_CONFIG.pdf_image_dpi * MM_PER_INCH
            scale = min(avail_w / img_w, avail_h / img_h, 1.0)
            final_w = img_w * scale
            final_h = img_h * scale
            x = margin + (avail_w - final_w) / 2.0
            y = margin + (avail_h - final_h) / 2.0

            pdf.add_page()
            pdf.image(channel.image_path, x=x, y=y, w=final_w, h=final_h)
            pdf.set_font("Helvetica", size=APP_CONFIG.pdf_label_font_size)
            pdf.text(margin, margin - 5.0, channel_label(channel.channel, _color_at(colors, i)))

        try:
            pdf.output(pdf_path)
        except OSError as e:
            raise StorageError(f"Failed to write PDF: {pdf_path} ({e})") from e

        logger.info(f"Exported {len(channels)} page(s) to {pdf_path}")
        return pdf_path
