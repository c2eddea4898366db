import certifi
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from pockethr.core.config import get_settings
from pockethr.models.job_listing import JobListing
from pockethr.models.user import User
from pockethr.models.webhook_event import ProcessedWebhookEvent

DOCUMENT_MODELS = [
    User,
    ProcessedWebhookEvent,
    JobListing,
]


def _use_tls(uri: str) -> bool:
    """True if URI uses TLS (Atlas or explicit tls=true)."""
    return "mongodb+srv://" in uri or "tls=true" in uri.lower()


async def init_db() -> None:
    settings = get_settings()
    kwargs = {}
    if _use_tls(settings.mongodb_uri):
        kwargs["tlsCAFile"] = certifi.where()
        kwargs["tlsDisableOCSPEndpointCheck"] = True
    client = AsyncIOMotorClient(settings.mongodb_uri, **kwargs)
    database = client[settings.mongodb_db_name]
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
