"""Configuration constants for the job category network analysis."""

from pathlib import Path

DEFAULT_INPUT_FILE = Path("male-flight-attendants.tsv")
DEFAULT_DATA_DIR = Path("data")
DEFAULT_RESULTS_DIR = Path("results")

SIMILARITY_THRESHOLD = 10.0  # percentage points; edges need a strictly smaller difference
