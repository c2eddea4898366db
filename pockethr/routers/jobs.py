from fastapi import APIRouter, Depends

from pockethr.deps import Principal, get_current_user
from pockethr.services import job_search
from pockethr.services.job_search import CareerRole, JobSearchParams

router = APIRouter()


@router.post("/search")
async def jobs_search(params: JobSearchParams, user: Principal = Depends(get_current_user)):
    jobs = await job_search.search_jobs(params)
    return {"jobs": [j.model_dump(mode="json") for j in jobs]}


@router.post("/for-role")
async def jobs_for_role(
    role: CareerRole,
    location: str | None = None,
    remote: bool | None = None,
    user: Principal = Depends(get_current_user),
):
    """Listings matching a career pathway role."""
    jobs = await job_search.search_jobs(job_search.params_for_role(role, location, remote))
    return {"jobs": [j.model_dump(mode="json") for j in jobs]}
