"""
Session Model

The session is the only piece of identity state the client holds:
who is logged in and which bearer token to present to the API.

DESIGN DECISION: Sessions are immutable. The store swaps the whole
object, so no reader can observe an email without its token.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Session(BaseModel):
    """
    An authenticated session.

    Expiry is not tracked here: stale tokens are rejected by the API,
    not by the client.
    """
    model_config = ConfigDict(frozen=True)

    user_email: str = Field(
        ...,
        min_length=1,
        description="Identity the session belongs to"
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token presented to the finance API"
    )
    issued_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the session was created (UTC)"
    )

    @property
    def authorization_header(self) -> Optional[str]:
        """Value for the Authorization header, if the session has a token."""
        if not self.api_token:
            return None
        return f"Bearer {self.api_token}"
