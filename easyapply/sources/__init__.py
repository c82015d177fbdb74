from .base import ListingSourceBase
from .linkedin import LinkedInListingScanner, extract_job_id

__all__ = ["ListingSourceBase", "LinkedInListingScanner", "extract_job_id"]
