"""Command line entry point: read a plate from an image file."""

from __future__ import annotations

import argparse
import sys

from platerec.pipeline import PlateRecognitionError, load_image, recognize, save_stages
from platerec.templates import TemplateSet


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="platerec", description="Recognise a blue number plate in an image."
    )
    parser.add_argument("image", help="image file to read")
    parser.add_argument(
        "--templates",
        default="model_new",
        help="directory holding the character templates (default: model_new)",
    )
    parser.add_argument(
        "--save-stages",
        metavar="DIR",
        help="write the intermediate images into this directory",
    )
    return parser


def main(argv=None) -> int:
    """Run the recogniser and print the plate text; return the exit status."""
    args = _parser().parse_args(argv)
    try:
        templates = TemplateSet.load(args.templates)
        image = load_image(args.image)
        result = recognize(image, templates)
    except (FileNotFoundError, PlateRecognitionError) as exc:
        print(f"platerec: {exc}", file=sys.stderr)
        return 1
    if args.save_stages:
        save_stages(result, args.save_stages)
    print(result.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())