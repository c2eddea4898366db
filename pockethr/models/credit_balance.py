from pydantic import BaseModel, Field


class CreditBalance(BaseModel):
    """Word credits for one user, as read from the user store."""
    remaining: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
