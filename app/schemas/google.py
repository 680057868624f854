from pydantic import BaseModel
from typing import Optional

class GoogleStatusResponse(BaseModel):
    googleLinked: bool
    hasAccessToken: bool
    hasRefreshToken: bool
    expiryDate: Optional[str] = None
