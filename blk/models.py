"""
Data models for BLK.

Bookmarklet and SharePayload are plain dataclasses that serialize to the
camelCase JSON layout used by the persistent slot and by export files.
KeyValue is the SQLAlchemy table behind the database storage backend.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from blk.utils import as_text, as_timestamp, generate_unique_id, now_ms


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class KeyValue(Base):
    """
    A single named slot holding serialized text.

    Attributes:
        key: Slot name (primary key)
        value: Serialized content of the slot
        updated_at: Time of the last write
    """
    __tablename__ = 'kv_store'

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default='')
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<KeyValue(key='{self.key}', size={len(self.value or '')})>"


@dataclass
class Bookmarklet:
    """
    A stored bookmarklet.

    Attributes:
        id: Opaque unique identifier, fixed at creation
        name: Display name
        description: Optional free text
        code: Normalized executable form (starts with ``javascript:``)
        created_at: Creation time, ms since epoch
        updated_at: Last modification time, ms since epoch
    """
    name: str
    code: str
    description: str = ""
    id: str = field(default_factory=generate_unique_id)
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted/exported JSON layout."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "code": self.code,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bookmarklet":
        """Rebuild a record from its persisted layout, tolerating missing keys."""
        now = now_ms()
        return cls(
            id=as_text(data.get("id")) or generate_unique_id(),
            name=as_text(data.get("name")),
            description=as_text(data.get("description")),
            code=as_text(data.get("code")),
            created_at=as_timestamp(data.get("createdAt"), now),
            updated_at=as_timestamp(data.get("updatedAt"), now),
        )

    def to_payload(self) -> "SharePayload":
        """The shareable subset of this record."""
        return SharePayload(name=self.name, description=self.description, code=self.code)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match against name and description."""
        haystack = f"{self.name} {self.description or ''}".lower()
        return query.lower() in haystack


@dataclass
class SharePayload:
    """The name/description/code triple carried by a share token."""
    name: str
    code: str
    description: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "description": self.description, "code": self.code}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["SharePayload"]:
        """
        Build a payload from decoded token data.

        Returns None unless name and code are non-empty strings.
        """
        name = data.get("name")
        code = data.get("code")
        if not isinstance(name, str) or not name or not isinstance(code, str) or not code:
            return None
        description = data.get("description")
        return cls(
            name=name,
            code=code,
            description=description if isinstance(description, str) else "",
        )
