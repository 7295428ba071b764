"""Command-line interface for loading and exporting job category data."""

import argparse
from pathlib import Path

from job_gender_network.config import DEFAULT_DATA_DIR, DEFAULT_INPUT_FILE
from job_gender_network.loader import load_job_categories
from job_gender_network.output import save_csvs


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="job-gender-network",
        description="Load a job category table and export the cleaned records.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=DEFAULT_INPUT_FILE,
        help=f"Whitespace-delimited input table (default: {DEFAULT_INPUT_FILE})",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help=f"Output directory (default: {DEFAULT_DATA_DIR}/<input stem>/)",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Only print a summary of the parsed records",
    )

    args = parser.parse_args(argv)

    records = load_job_categories(args.input)

    print(f"Loaded {len(records)} job categories from {args.input}")
    if records:
        percentages = [r.male_percentage for r in records]
        print(f"  Male percentage range: {min(percentages):.1f} - {max(percentages):.1f}")
        duplicates = len(records) - len({r.name for r in records})
        if duplicates:
            print(f"  {duplicates} duplicate category name(s) kept as separate rows")

    if args.no_export:
        return

    output_dir = args.output or DEFAULT_DATA_DIR / args.input.stem
    save_csvs(output_dir, args.input.stem, records)
