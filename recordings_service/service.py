import enum
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

import crud, models, schemas
from errors import BadRequestError, NotFoundError, StorageError
from logging_config import get_logger
from ranges import ByteRange, RequestedRange, full_range, resolve_range
from storage import BlobStore

logger = get_logger(__name__)

MISSING_FILE_MESSAGE = "Recording file not found. It may have been deleted."


class DeleteStatus(str, enum.Enum):
    DELETED = "deleted"
    BLOB_REMOVAL_FAILED = "blob_removal_failed"


@dataclass
class DeleteOutcome:
    recording_id: int
    status: DeleteStatus
    error: Optional[str] = None


@dataclass
class StreamResult:
    recording: models.Recording
    byte_range: ByteRange
    partial: bool
    chunks: AsyncIterator[bytes]


class RecordingService:
    def __init__(self, db: AsyncSession, blobs: BlobStore, extension: str = ".webm"):
        self.db = db
        self.blobs = blobs
        self.extension = extension

    async def get(self, recording_id: int) -> models.Recording:
        recording = await crud.get_recording_by_id(self.db, recording_id)
        if recording is None:
            logger.warning(f"Recording not found: ID {recording_id}")
            raise NotFoundError("Recording not found")
        return recording

    async def list(self) -> List[Tuple[models.Recording, bool]]:
        recordings = await crud.list_recordings(self.db)
        annotated = []
        for recording in recordings:
            file_exists = await self.blobs.exists(recording.relative_path)
            if not file_exists:
                logger.warning(f"Recording {recording.id} is stale: {recording.relative_path} is missing")
            annotated.append((recording, file_exists))
        logger.debug(f"Listed {len(annotated)} recording(s)")
        return annotated

    async def stream(self, recording_id: int, requested: Optional[RequestedRange] = None) -> StreamResult:
        recording = await self.get(recording_id)
        path = recording.relative_path

        if not await self.blobs.exists(path):
            logger.error(f"File not found, deleting database record for ID: {recording.id}")
            await self._prune(recording)
            raise NotFoundError(MISSING_FILE_MESSAGE)

        try:
            total_size = await self.blobs.size(path)
            byte_range = resolve_range(requested, total_size) if requested is not None else full_range(total_size)
            chunks = await self.blobs.open_range(path, byte_range.start, byte_range.end)
        except NotFoundError:
            logger.error(f"File for ID {recording.id} disappeared before it could be opened, deleting database record")
            await self._prune(recording)
            raise NotFoundError(MISSING_FILE_MESSAGE)

        logger.info(f"Streaming recording {recording.id} ({byte_range.content_range})")
        return StreamResult(
            recording=recording,
            byte_range=byte_range,
            partial=requested is not None,
            chunks=chunks,
        )

    async def upload(self, original_name: Optional[str], source) -> models.Recording:
        if source is None or not original_name:
            raise BadRequestError("No file uploaded.")

        stored_name = self.blobs.generate_name(self.extension)
        logger.info(f"Upload '{original_name}' stored as {stored_name}")
        size_bytes = await self.blobs.write(stored_name, source)

        recording_create = schemas.RecordingCreate(
            stored_name=stored_name,
            original_name=original_name,
            relative_path=stored_name,
            size_bytes=size_bytes,
        )
        try:
            recording = await crud.create_recording(self.db, recording_create)
        except SQLAlchemyError:
            logger.exception(f"Could not save metadata for {stored_name}, removing the written blob")
            await self.db.rollback()
            try:
                await self.blobs.delete(stored_name)
            except StorageError:
                logger.exception(f"Orphaned blob {stored_name} could not be removed")
            raise

        logger.info(f"Saved '{recording.original_name}' (ID: {recording.id}) metadata to DB.")
        return recording

    async def delete(self, recording_id: int) -> DeleteOutcome:
        recording = await self.get(recording_id)

        blob_error = None
        try:
            await self.blobs.delete(recording.relative_path)
        except StorageError as e:
            logger.error(f"Error deleting file for recording {recording_id}: {e}")
            blob_error = str(e)

        await crud.delete_recording(self.db, recording_id)
        logger.info(f"Deleted database record for recording {recording_id}")

        if blob_error is not None:
            return DeleteOutcome(recording_id, DeleteStatus.BLOB_REMOVAL_FAILED, blob_error)
        return DeleteOutcome(recording_id, DeleteStatus.DELETED)

    async def _prune(self, recording: models.Recording) -> None:
        try:
            await crud.delete_recording(self.db, recording.id)
        except SQLAlchemyError:
            logger.exception(f"Error deleting stale record {recording.id}")
            await self.db.rollback()
