from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

class RecordingBase(BaseModel):
    stored_name: str
    original_name: str
    relative_path: str
    size_bytes: int

class RecordingCreate(RecordingBase):
    pass

class RecordingInDB(RecordingBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class RecordingListItem(RecordingInDB):
    file_exists: bool

class UploadResponse(BaseModel):
    message: str = "File uploaded successfully"
    data: RecordingInDB

class DeleteResponse(BaseModel):
    message: str
    deleted_id: int
    error: Optional[str] = None
