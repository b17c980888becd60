from typing import Optional

from pydantic import BaseModel, Field


class Token(BaseModel):
    access_token: str = Field(..., min_length=32, description="Access token string.")
    token_type: str = Field(..., pattern="^Bearer$", description="Type of the token, typically 'Bearer'.")
    expires_in: Optional[int] = Field(None, description="Time in seconds before token expires.")
