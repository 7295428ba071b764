"""Data classes for job category records."""

from dataclasses import dataclass


@dataclass(frozen=True)
class JobCategory:
    """One occupation and the share of its workers who are male."""
    name: str
    male_percentage: float  # 0-100 in practice, not enforced
