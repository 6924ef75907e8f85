"""inksplit CLI batch separator.

Splits images into CMYK plates without a GUI.
"""

import os
import sys

os.environ.setdefault("NUMBA_THREADING_LAYER", "workqueue")

import argparse
import logging
from typing import List, Optional

from inksplit import __version__
from inksplit.domain.models import (
    ChannelKind,
    EffectKind,
    ExportConfig,
    FilterKind,
    ProcessSettings,
)
from inksplit.domain.session import PipelineSession
from inksplit.kernel.errors import InksplitError
from inksplit.kernel.image.io import SUPPORTED_IMAGE_EXTS, load_image
from inksplit.kernel.system.config import APP_CONFIG
from inksplit.kernel.system.logging import get_logger, setup_logging
from inksplit.services.export.service import ExportService
from inksplit.services.rendering.engine import SeparationEngine

logger = get_logger("cli")

FILTER_CHOICES = tuple(k.name.lower() for k in FilterKind)
EFFECT_CHOICES = tuple(k.name.lower() for k in EffectKind)
FORMAT_CHOICES = ("jpeg", "png")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inksplit",
        description="inksplit -- CMYK plate separator",
        epilog="Example: inksplit --effect halftone --color '#0b3d91' --pdf photo.png",
    )

    parser.add_argument(
        "inputs",
        nargs="+",
        metavar="FILE_OR_DIR",
        help="Input images (PNG/JPEG) or directories containing them",
    )
    parser.add_argument(
        "--channels",
        default="cmyk",
        help="Plates to produce, letters or names (default: cmyk)",
    )
    parser.add_argument("--filter", choices=FILTER_CHOICES, default=None)
    parser.add_argument("--effect", choices=EFFECT_CHOICES, default=None)
    parser.add_argument(
        "--color",
        dest="colors",
        action="append",
        default=None,
        metavar="COLOR",
        help="Gradient stop (hex or CSS name), repeat for duotone / multi-tone",
    )
    parser.add_argument(
        "--label-color",
        dest="label_colors",
        action="append",
        default=None,
        metavar="COLOR",
        help="Display color of the n-th produced plate, used as file suffix and PDF label",
    )
    parser.add_argument(
        "--output",
        default=APP_CONFIG.default_export_dir,
        help="Output directory",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=FORMAT_CHOICES,
        default="jpeg",
    )
    parser.add_argument(
        "--pdf",
        action="store_true",
        help="Also compose the plates into a labeled multi-page PDF",
    )
    parser.add_argument(
        "--separate-only",
        action="store_true",
        help="Write the plain separated plates, ignoring --filter, --effect and --color",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def discover_files(inputs: List[str]) -> List[str]:
    """Expands directories, keeps supported images, drops duplicates."""
    found: List[str] = []
    for path in inputs:
        if os.path.isdir(path):
            for name in sorted(os.listdir(path)):
                full = os.path.join(path, name)
                if os.path.isfile(full) and os.path.splitext(name)[1].lower() in SUPPORTED_IMAGE_EXTS:
                    found.append(full)
        elif os.path.isfile(path):
            found.append(path)
        else:
            logger.warning(f"Skipping missing input: {path}")

    seen = set()
    unique = []
    for p in found:
        key = os.path.abspath(p)
        if key not in seen:
            seen.add(key)
            unique.append(p)
    return unique


def build_settings(args: argparse.Namespace) -> ProcessSettings:
    if args.separate_only:
        return ProcessSettings()
    return ProcessSettings(
        colors=tuple(args.colors) if args.colors else None,
        effect=EffectKind.parse(args.effect) if args.effect else None,
        filter=FilterKind.parse(args.filter) if args.filter else None,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        channels = ChannelKind.parse(args.channels)
        settings = build_settings(args)
    except InksplitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    files = discover_files(args.inputs)
    if not files:
        print("Error: no input images found", file=sys.stderr)
        return 1

    export = ExportConfig(export_path=args.output, export_fmt=args.output_format.upper())
    failures = 0

    with SeparationEngine() as engine:
        for path in files:
            session = PipelineSession()
            try:
                engine.load(session, load_image(path), os.path.basename(path), precompute=False)
                results = engine.run(
                    session, settings, args.output, channels, export, args.label_colors
                )
                if args.pdf:
                    ExportService.save_channels_to_pdf(
                        results, args.output, session.base_name, args.label_colors
                    )
            except InksplitError as e:
                failures += 1
                logger.error(f"{path}: {e}")
                continue
            for result in results:
                print(result.image_path)

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
