from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field


class ProcessedWebhookEvent(Document):
    """Stripe event ids already handled; Stripe redelivers on timeouts."""
    event_id: Indexed(str, unique=True)
    event_type: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "stripe_events"
