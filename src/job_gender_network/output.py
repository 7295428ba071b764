"""CSV output for cleaned job category records."""

import csv
from dataclasses import asdict, fields
from pathlib import Path

from job_gender_network.models import JobCategory


def save_csvs(
    output_dir: Path,
    output_name: str,
    records: list[JobCategory],
) -> Path:
    """Save the cleaned category records to CSV and return the file path."""
    print("\n" + "=" * 60)
    print("Saving CSV files...")
    print("=" * 60)

    output_dir.mkdir(parents=True, exist_ok=True)

    categories_file = output_dir / f"{output_name}_categories.csv"
    with open(categories_file, "w", newline="", encoding="utf-8") as f:
        fieldnames = ["row", *(fld.name for fld in fields(JobCategory))]
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row, record in enumerate(records):
            writer.writerow({"row": row, **asdict(record)})
    print(f"  {categories_file} ({len(records)} rows)")

    return categories_file
