from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class JsonMessageRequest(BaseModel):
    """JSON body accepted by `POST /`, relayed through the text path.

    Attributes:
        message: Text to relay. Composed with the mention and geo summary
            and truncated like any other text submission.

    Example:
        {"message": "deploy finished"}
    """

    message: str


class GeoResponse(BaseModel):
    """Caller location echoed by `GET /`.

    Fields are null when the edge did not provide them.
    """

    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
