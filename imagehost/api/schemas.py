"""Response bodies."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str


class UploadResponse(BaseModel):
    message: str
    filename: str
    url: str
