#!/usr/bin/env python
"""Inspect how a message file is split into thread records.

Usage:
    python scripts/inspect_thread.py thread.eml                 # Show boundaries and records
    python scripts/inspect_thread.py thread.eml --segments      # Also print raw segments
    python scripts/inspect_thread.py thread.eml --search "wrote:"  # Find a line
"""

import argparse
from pathlib import Path

from emlthread.extractor import ThreadExtractor
from emlthread.ingest import load_eml
from emlthread.patterns.boundaries import BOUNDARY_PREDICATES
from emlthread.pipeline.headers import HeaderBlockParser
from emlthread.pipeline.normalizer import Normalizer
from emlthread.pipeline.segmenter import ThreadSegmenter


def matching_rules(lines: list[str], index: int) -> list[str]:
    """Names of the boundary rules that fire on a line."""
    names = []
    for predicate in BOUNDARY_PREDICATES:
        if predicate(lines, index):
            names.append(getattr(predicate, "__name__", None) or predicate.func.__name__)
    return names


def print_line_table(lines: list[str], boundaries: list[int], highlight_idx: int | None = None) -> None:
    """Print every normalized line with the rules that mark it as a boundary."""
    print("LINES:")
    print(f"  {'#':>4}  {'Rule':<30}  Text")
    print(f"  {'-'*4}  {'-'*30}  {'-'*55}")

    for i, line in enumerate(lines):
        rules = ", ".join(matching_rules(lines, i))
        if i == 0 and not rules:
            rules = "(start)"
        marker = ">>>" if i == highlight_idx else ("  *" if i in boundaries else "   ")
        preview = line[:55] + "..." if len(line) > 55 else line
        print(f"{marker}{i:>4}  {rules:<30}  {preview or '(blank)'}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("path", type=Path, help=".eml file to inspect")
    parser.add_argument("--segments", action="store_true", help="Print raw segments")
    parser.add_argument("--search", type=str, help="Search for text in normalized lines")
    args = parser.parse_args()

    message = load_eml(args.path)
    normalizer = Normalizer()
    segmenter = ThreadSegmenter()
    header_parser = HeaderBlockParser()

    print(f"File: {message.source_name}")
    print(f"From: {message.top_from}")
    print(f"Subject: {message.top_subject}")
    print(f"Date: {message.top_date}")
    print("=" * 80)
    print()

    normalized = normalizer.normalize(message.body_text)
    lines = normalized.split("\n")
    boundaries = segmenter.find_boundaries(lines)

    target_idx = None
    if args.search:
        for i, line in enumerate(lines):
            if args.search in line:
                target_idx = i
                print(f"Found '{args.search}' at line {i}")
                print()
                break
        else:
            print(f"'{args.search}' not found in any line")
            return

    print_line_table(lines, boundaries, target_idx)

    if args.segments:
        print()
        print("=" * 80)
        print("SEGMENTS")
        print("=" * 80)
        for segment in segmenter.segment(normalized):
            block = header_parser.parse(segment.lines)
            print()
            print(
                f"[lines {segment.start_line}-{segment.end_line}] "
                f"header fields: {block.field_count}, consumed: {block.consumed_lines}"
            )
            print(segment.text)

    result = ThreadExtractor().extract_with_metadata(message)

    print()
    print("=" * 80)
    print(
        f"RECORDS ({len(result.records)} from {result.segment_count} segments, "
        f"{result.header_blocks_found} header blocks, fallback: {result.used_fallback})"
    )
    print("=" * 80)
    for record in result.records:
        print()
        print(f"File:    {record.file_name}")
        print(f"From:    {record.sender}")
        print(f"To:      {record.recipient}")
        print(f"Subject: {record.subject}")
        print(f"Date:    {record.date}")
        print("-" * 40)
        print(record.body_text)


if __name__ == "__main__":
    main()
