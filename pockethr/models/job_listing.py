from datetime import datetime

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class SalaryRange(BaseModel):
    min: int
    max: int
    currency: str = "$"


class JobPosting(BaseModel):
    """Listing fields the search filter works on."""
    external_id: str
    title: str
    company: str
    location: str
    description: str = ""
    url: str = ""
    salary: SalaryRange | None = None
    date_posted: datetime
    source: str = "other"  # linkedin, indeed, glassdoor, other


class JobListing(Document):
    external_id: Indexed(str, unique=True)
    title: str
    company: str
    location: str
    description: str = ""
    url: str = ""
    salary: SalaryRange | None = None
    date_posted: datetime = Field(default_factory=datetime.utcnow)
    source: str = "other"

    class Settings:
        name = "job_listings"
        indexes = [[("date_posted", -1)]]
