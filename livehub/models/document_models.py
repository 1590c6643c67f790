"""
Key/value document model for Live Hub.
Each row holds one JSON document plus a version counter used for compare-and-swap.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Text
from .database_config import Base


class Document(Base):
    __tablename__ = "documents"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<Document {self.key} v{self.version}>"
