from pydantic import BaseModel
from datetime import datetime
from app.core.enums import DocumentType


class DocumentCreate(BaseModel):
    booking_id: str
    type: DocumentType


class DocumentOut(BaseModel):
    id: str
    booking_id: str
    type: DocumentType
    title: str
    filename: str
    url: str
    created_at: datetime
