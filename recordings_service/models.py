from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()

def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

class Recording(Base):
    __tablename__ = "recordings"
    # AUTOINCREMENT keeps SQLite from handing out the id of a deleted last row again.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    stored_name = Column(String, nullable=False, index=True)
    original_name = Column(String, nullable=False)
    relative_path = Column(String, nullable=False)
    size_bytes = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Recording(id={self.id}, stored='{self.stored_name}', original='{self.original_name}')>"
