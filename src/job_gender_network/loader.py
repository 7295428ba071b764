"""Parse the job category table into JobCategory records.

The input is a whitespace-delimited text file with a single header line:

  Occupation                                    Male %
  Kindergarten and earlier school teachers      2.3
  Flight attendants                             24.6

The last token on each line is the male percentage; everything before it is
the category name, rejoined with single spaces.
"""

import sys
from pathlib import Path

from job_gender_network.models import JobCategory


def parse_line(line: str) -> JobCategory | None:
    """Parse one data line.

    Returns None for lines with fewer than two tokens (blank lines, stray
    labels). Raises ValueError when the trailing token is not a number.
    """
    parts = line.split()
    if len(parts) < 2:
        return None

    name = " ".join(parts[:-1])
    try:
        male_percentage = float(parts[-1])
    except ValueError:
        raise ValueError(f"Could not parse male percentage for '{name}'") from None
    return JobCategory(name=name, male_percentage=male_percentage)


def load_job_categories(path: Path | str) -> list[JobCategory]:
    """Load every parseable record from a job category file, in file order.

    Missing or unreadable files raise (FileNotFoundError, OSError). Malformed
    percentages are reported on stderr and the line is dropped.
    """
    records: list[JobCategory] = []
    with open(path, encoding="utf-8") as f:
        for index, line in enumerate(f):
            if index == 0:
                continue  # header
            try:
                record = parse_line(line)
            except ValueError as e:
                print(f"  WARNING: {e} (line {index + 1})", file=sys.stderr)
                continue
            if record is not None:
                records.append(record)
    return records
