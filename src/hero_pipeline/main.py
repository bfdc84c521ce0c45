"""Main module for the hero pipeline CLI."""

import sys
import json
import argparse
from typing import Any, Dict, Optional

from . import __version__
from .core import DEFAULT_CATALOG, calculate_variant_key, get_logger, parse_image_key
from .core.config import ProcessingSettings
from .core.exceptions import HeroPipelineError
from .core.logging_config import set_debug_logging
from .handler import HeroImageEventHandler


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``hero-pipeline`` command."""
    parser = argparse.ArgumentParser(
        prog="hero-pipeline",
        description="Hero Image Pipeline - generate optimized hero image variants",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process a HeroImageUpdated notification saved as JSON
  hero-pipeline process --event event.json

  # Process an image key directly
  hero-pipeline process --image-key tenant-42/abc123 \\
                        --canonical-url https://cdn.example.com/tenant-42/abc123.jpg

  # Show the variant keys that would be written
  hero-pipeline keys --image-key tenant-42/abc123
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser(
        "process", help="Process one hero image notification"
    )
    source_group = process_parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument(
        "--event", help="Path to a JSON notification ('-' reads stdin)"
    )
    source_group.add_argument("--image-key", help="Source image key")
    process_parser.add_argument(
        "--canonical-url", default="", help="Canonical URL of the source image"
    )
    process_parser.add_argument(
        "--max-workers", type=int, default=None, help="Variant worker pool size"
    )
    process_parser.add_argument(
        "--fail-when-no-variants",
        action="store_true",
        help="Exit with an error when every variant fails",
    )
    process_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    keys_parser = subparsers.add_parser(
        "keys", help="Print the storage keys of every catalog variant"
    )
    keys_parser.add_argument("--image-key", required=True, help="Source image key")

    subparsers.add_parser("version", help="Show version information")

    return parser


def load_event(args: argparse.Namespace) -> Dict[str, Any]:
    """Build the notification payload from CLI arguments."""
    if args.event:
        if args.event == "-":
            return json.load(sys.stdin)
        with open(args.event, "r", encoding="utf-8") as event_file:
            return json.load(event_file)

    return {
        "detail-type": "HeroImageUpdated",
        "source": "hero-pipeline.cli",
        "detail": {"canonicalUrl": args.canonical_url, "imageKey": args.image_key},
    }


def run_process(args: argparse.Namespace, handler: Optional[HeroImageEventHandler] = None) -> int:
    """Run the ``process`` command and print the result as JSON."""
    logger = get_logger("hero-pipeline.cli")
    if args.debug:
        set_debug_logging()

    if handler is None:
        settings = ProcessingSettings.from_env()
        overrides: Dict[str, Any] = {}
        if args.max_workers is not None:
            overrides["max_workers"] = args.max_workers
        if args.fail_when_no_variants:
            overrides["fail_when_no_variants"] = True
        if overrides:
            settings = ProcessingSettings(**{**settings.model_dump(), **overrides})
        handler = HeroImageEventHandler(settings=settings)

    result = handler.handle(load_event(args))
    print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))

    if not result.any_variants_processed:
        logger.warning("No variants were processed")
    return 0


def run_keys(args: argparse.Namespace) -> int:
    """Print ``label<TAB>key`` for every catalog variant."""
    parse_image_key(args.image_key)
    for spec in DEFAULT_CATALOG:
        print(f"{spec.label}\t{calculate_variant_key(args.image_key, spec)}")
    return 0


def main() -> None:
    """
    Entry point for the ``hero-pipeline`` command-line interface.

    Exits with status 0 on success and 1 when processing raised a fatal
    error or no command was given.
    """
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)
        return

    if args.command == "version":
        print("Hero Image Pipeline CLI")
        print(f"Version {__version__}")
        print("Optimized hero image variants for S3-compatible storage")
        sys.exit(0)
        return

    logger = get_logger("hero-pipeline.cli")
    try:
        if args.command == "process":
            exit_code = run_process(args)
        else:
            exit_code = run_keys(args)
    except KeyboardInterrupt:
        logger.warning("Processing interrupted by user.")
        exit_code = 130
    except (HeroPipelineError, OSError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
