"""Job search: predicate filter over stored listings."""

from datetime import datetime
from typing import Iterable, Literal

from pydantic import BaseModel, Field

from pockethr.models.job_listing import JobListing, JobPosting, SalaryRange

DatePosted = Literal["past24Hours", "past3Days", "pastWeek", "pastMonth", "anytime"]

MAX_AGE_DAYS = {
    "past24Hours": 1,
    "past3Days": 3,
    "pastWeek": 7,
    "pastMonth": 30,
}


class JobSearchParams(BaseModel):
    title: str | None = None
    keywords: list[str] = Field(default_factory=list)
    location: str | None = None
    remote: bool | None = None
    experience_level: Literal["entry", "mid", "senior", "executive"] | None = None
    date_posted: DatePosted | None = None
    salary: SalaryRange | None = None


class CareerRole(BaseModel):
    title: str
    required_skills: list[str] = Field(default_factory=list)
    preferred_skills: list[str] = Field(default_factory=list)
    average_salary: SalaryRange | None = None


def _age_days(posted: datetime, now: datetime) -> int:
    return int((now - posted).total_seconds() // 86400)


def matches(job: JobPosting, params: JobSearchParams, now: datetime) -> bool:
    if params.title and params.title.lower() not in job.title.lower():
        return False
    if params.location and params.location.lower() not in job.location.lower():
        return False
    if params.remote is True and "remote" not in job.location.lower():
        return False
    if params.salary:
        # ranges must overlap
        if not job.salary:
            return False
        if job.salary.max < params.salary.min or job.salary.min > params.salary.max:
            return False
    max_age = MAX_AGE_DAYS.get(params.date_posted) if params.date_posted else None
    if max_age is not None and _age_days(job.date_posted, now) > max_age:
        return False
    return True


def filter_jobs(
    postings: Iterable[JobPosting],
    params: JobSearchParams,
    now: datetime | None = None,
) -> list[JobPosting]:
    """Return postings satisfying every predicate set in params, in input order."""
    now = now or datetime.utcnow()
    return [job for job in postings if matches(job, params, now)]


def params_for_role(role: CareerRole, location: str | None = None, remote: bool | None = None) -> JobSearchParams:
    return JobSearchParams(
        title=role.title,
        keywords=[*role.required_skills, *role.preferred_skills],
        location=location,
        remote=remote,
        salary=role.average_salary,
    )


async def search_jobs(params: JobSearchParams) -> list[JobPosting]:
    postings = await JobListing.find_all().sort(-JobListing.date_posted).project(JobPosting).to_list()
    return filter_jobs(postings, params)
