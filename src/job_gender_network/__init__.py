"""Job Gender Network - similarity graphs over job categories by male participation."""

__version__ = "0.1.0"

from job_gender_network.loader import load_job_categories as load_job_categories
from job_gender_network.models import JobCategory as JobCategory
