from datetime import datetime

from pydantic import BaseModel


class Timestamps(BaseModel):
    created_at: datetime
    updated_at: datetime


class ErrorResponse(BaseModel):
    detail: str
