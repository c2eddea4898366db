from pockethr.models.credit_balance import CreditBalance
from pockethr.models.job_listing import JobListing, JobPosting, SalaryRange
from pockethr.models.user import User, UserProfile
from pockethr.models.webhook_event import ProcessedWebhookEvent

__all__ = [
    "CreditBalance",
    "JobListing",
    "JobPosting",
    "SalaryRange",
    "User",
    "UserProfile",
    "ProcessedWebhookEvent",
]
