from typing import List, Optional, Union

from fastapi import APIRouter, Depends, File, Header, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

import schemas
from config import Settings, get_settings
from database import get_db
from errors import BadRequestError, NotFoundError, RangeNotSatisfiableError, StorageError
from logging_config import get_logger
from ranges import parse_range_header
from service import DeleteStatus, RecordingService
from storage import BlobStore

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/recordings",
    tags=["recordings"],
)

def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store

def get_recording_service(
    db: AsyncSession = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
    current_settings: Settings = Depends(get_settings)
) -> RecordingService:
    return RecordingService(db, blobs, extension=current_settings.RECORDING_EXTENSION)

def to_http_exception(exc: Exception) -> HTTPException:
    if isinstance(exc, RangeNotSatisfiableError):
        return HTTPException(
            status_code=416,
            detail=str(exc),
            headers={"Content-Range": f"bytes */{exc.total_size}"}
        )
    if isinstance(exc, BadRequestError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))

@router.get("", response_model=List[schemas.RecordingListItem])
async def list_recordings(service: RecordingService = Depends(get_recording_service)):
    logger.info("List request for all recordings")
    annotated = await service.list()
    return [
        schemas.RecordingListItem(
            **schemas.RecordingInDB.model_validate(recording).model_dump(),
            file_exists=file_exists
        )
        for recording, file_exists in annotated
    ]

@router.get("/{recording_id}")
async def stream_recording(
    recording_id: int,
    range_header: Optional[str] = Header(None, alias="Range"),
    service: RecordingService = Depends(get_recording_service),
    current_settings: Settings = Depends(get_settings)
):
    logger.info(f"Stream request for recording_id: {recording_id}, range: {range_header}")
    try:
        requested = parse_range_header(range_header) if range_header else None
        result = await service.stream(recording_id, requested)
    except (NotFoundError, BadRequestError, StorageError) as e:
        raise to_http_exception(e)

    byte_range = result.byte_range
    headers = {
        "Content-Length": str(byte_range.length),
        "Accept-Ranges": "bytes",
    }
    status_code = 200
    if result.partial:
        headers["Content-Range"] = byte_range.content_range
        status_code = 206

    return StreamingResponse(
        result.chunks,
        status_code=status_code,
        media_type=current_settings.RECORDING_MEDIA_TYPE,
        headers=headers
    )

@router.post("", response_model=schemas.UploadResponse, status_code=201)
async def upload_recording(
    file: Union[UploadFile, str, None] = File(None),
    service: RecordingService = Depends(get_recording_service)
):
    # a form field named "file" without a filename arrives as a plain string
    if file is None or isinstance(file, str):
        logger.warning("Upload request without a file")
        raise HTTPException(status_code=400, detail="No file uploaded.")

    logger.info(f"Upload request for filename: '{file.filename}', content_type: '{file.content_type}'")
    try:
        recording = await service.upload(file.filename, file)
    except (BadRequestError, StorageError) as e:
        raise to_http_exception(e)
    finally:
        await file.close()

    return schemas.UploadResponse(data=schemas.RecordingInDB.model_validate(recording))

@router.delete("/{recording_id}", response_model=schemas.DeleteResponse)
async def delete_recording(
    recording_id: int,
    service: RecordingService = Depends(get_recording_service)
):
    logger.info(f"Delete request for recording_id: {recording_id}")
    try:
        outcome = await service.delete(recording_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Recording not found in database.")

    if outcome.status is DeleteStatus.BLOB_REMOVAL_FAILED:
        body = schemas.DeleteResponse(
            message="Database record deleted but file could not be removed.",
            deleted_id=outcome.recording_id,
            error=outcome.error
        )
        return JSONResponse(status_code=500, content=body.model_dump())

    return schemas.DeleteResponse(
        message="Recording deleted successfully.",
        deleted_id=outcome.recording_id
    )
