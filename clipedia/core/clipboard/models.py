"""Clipboard item and tag definition models"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Set

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S.%f+00:00'


class ClipboardItemType(str, Enum):
    """Kind of clipboard payload"""
    TEXT = 'text'
    IMAGE = 'image'
    FILE = 'file'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'ClipboardItemType':
        """Parse a stored value, falling back to TEXT for unknown kinds"""
        try:
            return cls(value)
        except ValueError:
            return cls.TEXT


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


def format_timestamp(timestamp: datetime) -> str:
    """
    Format a timestamp as fixed-width ISO-8601 UTC text

    Naive datetimes are assumed to already be in UTC. The fixed width keeps
    lexical ordering equal to chronological ordering.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Parse a stored ISO-8601 timestamp into an aware UTC datetime"""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class ClipboardItem:
    """Single clipboard history entry"""
    id: str
    content: str
    item_type: ClipboardItemType
    timestamp: datetime
    is_pinned: bool = False
    tags: Set[str] = field(default_factory=set)
    application_source: Optional[str] = None

    @classmethod
    def create(cls, content: str, item_type: ClipboardItemType = ClipboardItemType.TEXT,
               timestamp: Optional[datetime] = None) -> 'ClipboardItem':
        """
        Create a new item with a fresh id and capture time

        Args:
            content: Clipboard content
            item_type: Kind of payload
            timestamp: Optional capture time (defaults to now, UTC)

        Returns:
            New unpinned, untagged item
        """
        return cls(
            id=str(uuid.uuid4()),
            content=content,
            item_type=item_type,
            timestamp=timestamp or utc_now(),
        )


@dataclass
class TagDefinition:
    """Catalog entry for a tag name"""
    name: str
    color: Optional[str] = None
    is_system: bool = False
