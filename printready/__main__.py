"""
Command line entry point: render a print-ready PDF from local image files.

    python -m printready generate photo.jpg -o print.pdf --width 24 --height 36 --zoom 1.2
"""

import argparse
import sys
from pathlib import Path

from loguru import logger

from .config import load_config
from .errors import PrintReadyError
from .jobs import PrintJobRunner
from .models import GenerationOptions, ImageTransform, PrintDimensions, PrintJob, PrintSide


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='printready', description="Print-ready PDF generator")
    subparsers = parser.add_subparsers(dest='command', required=True)

    generate = subparsers.add_parser('generate', help="Generate a print-ready PDF")
    generate.add_argument('image', type=Path, help="Front image file")
    generate.add_argument('-o', '--output', type=Path, required=True, help="Output PDF path")
    generate.add_argument('--width', type=float, required=True, help="Print width in inches")
    generate.add_argument('--height', type=float, required=True, help="Print height in inches")
    generate.add_argument('--rotation', type=int, default=0, help="Front rotation (0/90/180/270)")
    generate.add_argument('--zoom', type=float, default=1.0, help="Front zoom (>= 1.0)")
    generate.add_argument('--pan-x', type=float, default=0.0, help="Front horizontal pan in pixels")
    generate.add_argument('--pan-y', type=float, default=0.0, help="Front vertical pan in pixels")
    generate.add_argument('--back', type=Path, help="Back image file for double-sided prints")
    generate.add_argument('--back-rotation', type=int, default=0)
    generate.add_argument('--back-zoom', type=float, default=1.0)
    generate.add_argument('--back-pan-x', type=float, default=0.0)
    generate.add_argument('--back-pan-y', type=float, default=0.0)
    generate.add_argument('--bleed', action='store_true', help="Add 0.125in bleed margin")
    generate.add_argument('--crop-marks', action='store_true', help="Draw crop marks")
    generate.add_argument('--env', default='development', help="Configuration environment")
    return parser


def build_job(args) -> PrintJob:
    front = PrintSide(
        args.image.read_bytes(),
        ImageTransform(rotation=args.rotation, zoom=args.zoom, pan_x=args.pan_x, pan_y=args.pan_y),
        label="front",
    )
    back = None
    if args.back:
        back = PrintSide(
            args.back.read_bytes(),
            ImageTransform(rotation=args.back_rotation, zoom=args.back_zoom,
                           pan_x=args.back_pan_x, pan_y=args.back_pan_y),
            label="back",
        )
    return PrintJob(
        front=front,
        back=back,
        dimensions=PrintDimensions(width=args.width, height=args.height),
        options=GenerationOptions(include_bleed=args.bleed, include_crop_marks=args.crop_marks),
        filename=args.output.name,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        job = build_job(args)
        runner = PrintJobRunner(load_config(args.env))
        document = runner.run(job)
    except PrintReadyError as e:
        logger.error(str(e))
        for suggestion in e.suggestions:
            logger.info(f"  - {suggestion}")
        return 1
    except OSError as e:
        logger.error(f"Could not read input: {e}")
        return 1

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(document)
    logger.info(f"Wrote {args.output} ({len(document)} bytes)")
    return 0


if __name__ == '__main__':
    sys.exit(main())
