"""Command line entry point for converting Jira exports to Markdown.

Inputs may also be set in the environment or a .env file:
JIRA2MD_SOURCE, JIRA2MD_TARGET and JIRA2MD_CUSTOM_DATA.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import dotenv

from jira2md.models.custom_data import CustomDataConfig, load_custom_data
from jira2md.tools.issue_renderer import IssueRenderer
from jira2md.tools.record_loader import (
    ATTACHMENTS_DIR_NAME,
    ConversionResult,
    convert_directory,
)

logger: logging.Logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the converter."""
    level: int = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="[%(asctime)s]%(filename)s:%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser, with defaults taken from the environment."""
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Convert exported Jira issue JSON files to Markdown."
    )
    parser.add_argument(
        "--source",
        type=Path,
        default=os.getenv("JIRA2MD_SOURCE"),
        help="Directory with one exported JSON file per issue.",
    )
    parser.add_argument(
        "--target",
        type=Path,
        default=os.getenv("JIRA2MD_TARGET"),
        help="Directory to write the Markdown files to.",
    )
    parser.add_argument(
        "--custom-data",
        type=Path,
        default=os.getenv("JIRA2MD_CUSTOM_DATA"),
        help="JSON file listing extra fields and sections to render.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the converter."""
    dotenv.load_dotenv()
    parser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.source is None:
        parser.error("--source is required (or set JIRA2MD_SOURCE)")
    if args.target is None:
        parser.error("--target is required (or set JIRA2MD_TARGET)")

    source: Path = args.source
    target: Path = args.target
    custom_data_path: Path | None = args.custom_data

    setup_logging(args.debug)

    try:
        custom_data: CustomDataConfig = load_custom_data(custom_data_path)
    except (OSError, ValueError) as e:
        parser.error(f"invalid custom data file: {e}")

    renderer = IssueRenderer(custom_data, source / ATTACHMENTS_DIR_NAME)
    result: ConversionResult = convert_directory(source, target, renderer)

    logger.info(
        "Rendered %d issues to %s, %d failed, %d attachments copied",
        len(result.rendered),
        target,
        len(result.failures),
        len(result.copied_attachments),
    )


if __name__ == "__main__":
    main()
