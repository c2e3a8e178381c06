"""
Command-line entrypoint for one-off redesigns.

Architectural role:
- Terminal interface over the same engine the HTTP adapter uses.
- Reads a local photo, runs one redesign, writes the render to disk.

Request lifecycle:
1. Parse arguments and load deployment configuration from the environment.
2. Read the photo into an `UploadedImage` (mime guessed from the extension).
3. Call `process_redesign` and wait for the provider.
4. Write image bytes to `--output` or report the failure.

Exit codes:
- 0 on success.
- 1 on any pipeline failure (`error: <kind>: <details>` on stderr).
- 2 on argument errors or an unreadable/empty input file.
"""

import argparse
import asyncio
import logging
import mimetypes
import os
import sys

from redesigner.core.engine import process_redesign
from redesigner.core.types import IMAGE_EXTENSIONS, Failure, InputError, StyleParameters, UploadedImage
from redesigner.image.provider_config import load_config


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Redesign a room photo with an image provider")
    parser.add_argument("photo", help="Path to the room photograph")
    parser.add_argument("--style", default=None)
    parser.add_argument("--room-type", dest="room_type", default=None)
    parser.add_argument("--length", default=None)
    parser.add_argument("--width", default=None)
    parser.add_argument("--height", default=None)
    parser.add_argument("--budget", default=None)
    parser.add_argument("--wishes", default=None)
    parser.add_argument("--prompt", default=None, help="Send this prompt verbatim instead of the template")
    parser.add_argument("--strength", dest="image_strength", default=None, help="Influence strength 0..1")
    parser.add_argument("--cfg-scale", dest="cfg_scale", default=None)
    parser.add_argument("--seed", default=None)
    parser.add_argument("--steps", default=None)
    parser.add_argument("--style-preset", dest="style_preset", default=None)
    parser.add_argument("--output-format", dest="output_format", default=None)
    parser.add_argument("-o", "--output", default=None, help="Output file (default: redesign.<ext>)")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def read_photo(path: str) -> UploadedImage:
    with open(path, "rb") as f:
        data = f.read()
    mime_type, _ = mimetypes.guess_type(path)
    return UploadedImage(data=data, mime_type=mime_type or "", filename=os.path.basename(path))


def params_from_args(args: argparse.Namespace) -> StyleParameters:
    return StyleParameters(
        style=args.style,
        room_type=args.room_type,
        length=args.length,
        width=args.width,
        height=args.height,
        budget=args.budget,
        wishes=args.wishes,
        prompt=args.prompt,
        image_strength=args.image_strength,
        cfg_scale=args.cfg_scale,
        seed=args.seed,
        steps=args.steps,
        style_preset=args.style_preset,
        output_format=args.output_format,
    )


def main(argv: list[str] | None = None) -> int:
    """Run one redesign from the terminal and return the exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        image = read_photo(args.photo)
    except OSError as exc:
        print(f"error: cannot read {args.photo}: {exc.strerror or exc}", file=sys.stderr)
        return 2
    except InputError as exc:
        print(f"error: {exc.kind.value}: {exc.message}", file=sys.stderr)
        return 2

    try:
        config = load_config()
    except ValueError as exc:
        print(f"error: invalid configuration: {exc}", file=sys.stderr)
        return 2

    result = asyncio.run(process_redesign(image, params_from_args(args), config))

    if isinstance(result, Failure):
        print(f"error: {result.kind.value}: {result.provider_message}", file=sys.stderr)
        return 1

    output = args.output or "redesign" + IMAGE_EXTENSIONS.get(result.mime_type, ".png")
    with open(output, "wb") as f:
        f.write(result.image_bytes)
    logger.info("Wrote %d bytes (%s) to %s", len(result.image_bytes), result.mime_type, output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
