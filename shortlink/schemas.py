import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class LinkCreate(CamelModel):
    # Format checks live in the directory service so failures share one message shape
    target_url: str
    code: Optional[str] = None

class LinkResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    target_url: str
    total_clicks: int
    last_clicked: Optional[datetime]
    created_at: datetime
    updated_at: datetime

class ErrorResponse(BaseModel):
    error: str

class MessageResponse(BaseModel):
    message: str
