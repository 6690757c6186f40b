"""Command-line entry point: convert .eml files to XLSX, PDF, or CSV.

Usage:
    emlthread thread.eml other.eml --format xlsx --format pdf -o out/
    emlthread inbox/*.eml --settings export.yaml --verbose
"""

import argparse
import logging
import sys
from pathlib import Path

from emlthread.config import default_settings, load_settings
from emlthread.converter import FORMATS, Converter, batch_display_name
from emlthread.exceptions import ConversionError
from emlthread.ingest import is_eml_name

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="emlthread",
        description="Split email threads into records and export them.",
    )
    parser.add_argument("files", nargs="+", type=Path, help=".eml files to convert")
    parser.add_argument(
        "-f",
        "--format",
        dest="formats",
        action="append",
        choices=sorted(FORMATS),
        help="Output format; repeat for several (default: xlsx)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for the exported files (default: current directory)",
    )
    parser.add_argument("--settings", type=Path, help="YAML file overriding export settings")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log heuristic decisions")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.settings) if args.settings else default_settings()
        converter = Converter(settings=settings)
        artifacts = converter.convert_files(args.files, args.formats or ["xlsx"])
    except ConversionError as e:
        logger.error("%s", e)
        return 1
    except OSError:
        logger.exception("Could not read input")
        return 1

    args.output_dir.mkdir(parents=True, exist_ok=True)
    converted = [path.name for path in args.files if is_eml_name(path.name)]
    for artifact in artifacts.values():
        target = args.output_dir / artifact.file_name
        target.write_bytes(artifact.content)
        print(f"{batch_display_name(converted)} -> {target}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
