"""Pydantic schemas for message submission.

Learn: The reply keeps the camelCase keys existing producers already
parse (clientCount, localTime). Fields are snake_case in Python and
serialized by alias.
"""

from pydantic import BaseModel, Field


class SendMessageResponse(BaseModel):
    success: bool = True
    message: str = "Message sent"
    client_count: int = Field(..., alias="clientCount")
    timestamp: str
    local_time: str = Field(..., alias="localTime")
    timezone: str

    model_config = {"populate_by_name": True}
