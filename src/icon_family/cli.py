"""Build icon families from a single source image.

Usage examples:
  icon-family ico hydra.png --out hydra.ico --sizes 16,32,48,256
  icon-family icns hydra.png --out hydra.icns --filter cubic
  icon-family favicon box.svg --out static/ --sizes 16,32,64 --apple-touch --pwa
"""

from __future__ import annotations

import argparse
import logging
import sys

from icon_family import resample
from icon_family.config import settings
from icon_family.encode import Encoder
from icon_family.errors import IconError
from icon_family.formats.favicon import Favicon
from icon_family.formats.icns import Icns
from icon_family.formats.ico import Ico
from icon_family.image import open_image

logger = logging.getLogger(__name__)

DEFAULT_SIZES: dict[str, list[int]] = {
    "ico": [16, 24, 32, 48, 64, 128, 256],
    "icns": [16, 32, 64, 128, 256, 512, 1024],
    "favicon": [16, 32, 48, 180, 192, 512],
}


def parse_sizes(raw: str | None) -> list[int] | None:
    if not raw:
        return None
    sizes: list[int] = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            value = int(token)
        except ValueError as exc:
            raise ValueError(f"invalid size value: {token!r}") from exc
        if value not in sizes:
            sizes.append(value)
    if not sizes:
        raise ValueError("at least one size must be provided with --sizes")
    return sizes


def _build_encoder(args: argparse.Namespace) -> Encoder:  # pyright: ignore[reportMissingTypeArgument]
    if args.format == "ico":
        return Ico.new()
    if args.format == "icns":
        return Icns.new()
    return Favicon.new().include_apple_touch_helper(args.apple_touch).include_pwa_helper(args.pwa)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icon-family",
        description="Build multi-resolution icon families from a PNG/JPEG/GIF/BMP/WEBP/SVG source.",
    )
    sub = parser.add_subparsers(dest="format", required=True)

    for name, help_text in (
        ("ico", "Windows .ico file"),
        ("icns", "Apple .icns file"),
        ("favicon", "favicon bundle (directory, or tar when --out is an existing file)"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("source", help="Source image")
        p.add_argument("--out", required=True, help="Output path")
        p.add_argument(
            "--sizes",
            help="Comma-separated sizes (default: " + ",".join(map(str, DEFAULT_SIZES[name])) + ")",
        )
        p.add_argument(
            "--filter",
            choices=sorted(resample.FILTERS),
            default="cubic",
            help="Resampling filter for raster sources (default: cubic)",
        )
        if name == "favicon":
            p.add_argument(
                "--apple-touch",
                action=argparse.BooleanOptionalAction,
                default=settings.favicon_apple_touch,
                help="Emit apple-touch-icon links for 76/120/152/180 px entries",
            )
            p.add_argument(
                "--pwa",
                action=argparse.BooleanOptionalAction,
                default=settings.favicon_pwa,
                help="Emit app.webmanifest and link it from the helper",
            )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    try:
        sizes = parse_sizes(args.sizes) or DEFAULT_SIZES[args.format]
        image = open_image(args.source)
        encoder = _build_encoder(args)
        encoder.add_entries(resample.FILTERS[args.filter], image, sizes)
        encoder.save(args.out)
    except (IconError, OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.info("wrote %s with %d entries: %s", args.out, len(encoder), encoder)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
