from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

import models, schemas

async def create_recording(db: AsyncSession, recording: schemas.RecordingCreate) -> models.Recording:
    db_recording = models.Recording(
        stored_name=recording.stored_name,
        original_name=recording.original_name,
        relative_path=recording.relative_path,
        size_bytes=recording.size_bytes,
    )
    db.add(db_recording)
    await db.commit()
    await db.refresh(db_recording)
    return db_recording

async def list_recordings(db: AsyncSession) -> List[models.Recording]:
    result = await db.execute(
        select(models.Recording).order_by(models.Recording.created_at.desc(), models.Recording.id.desc())
    )
    return list(result.scalars().all())

async def get_recording_by_id(db: AsyncSession, recording_id: int) -> Optional[models.Recording]:
    result = await db.execute(select(models.Recording).filter(models.Recording.id == recording_id))
    return result.scalars().first()

async def delete_recording(db: AsyncSession, recording_id: int) -> int:
    result = await db.execute(delete(models.Recording).where(models.Recording.id == recording_id))
    await db.commit()
    return result.rowcount
