"""Repository for clipboard items, tags and the tag catalog"""

import re
from contextlib import contextmanager
from datetime import timedelta
from typing import Dict, Iterator, List, Optional, Set
from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from loguru import logger

from .database import ClipboardItemDB, TagDB, TagDefinitionDB, DatabaseManager
from ..clipboard.models import (
    ClipboardItem, ClipboardItemType, TagDefinition,
    format_timestamp, parse_timestamp, utc_now,
)
from ..errors import PatternError, StorageError

# Keeps IN (...) lists below SQLite's bound parameter limit
_TAG_LOOKUP_CHUNK = 500


def compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile a user-supplied search pattern

    Raises:
        PatternError: If the pattern is not a valid regular expression
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(f"Invalid pattern {pattern!r}: {e}") from e


class ClipboardRepository:
    """Durable store for clipboard history with transactional item+tag writes"""

    def __init__(self, database_manager: DatabaseManager):
        """
        Initialize repository

        Args:
            database_manager: DatabaseManager owning the shared connection
        """
        self.db_manager = database_manager

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Run one transaction while holding the connection lock

        Raises:
            StorageError: If any statement or the commit fails
        """
        with self.db_manager.lock:
            session = self.db_manager.get_session()
            try:
                yield session
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Database operation failed: {e}")
                raise StorageError(str(e)) from e
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def insert(self, item: ClipboardItem) -> None:
        """
        Insert an item and all of its tags atomically

        Args:
            item: Item to persist

        Raises:
            StorageError: If the id already exists or the database fails
        """
        with self.session_scope() as session:
            session.add(ClipboardItemDB(
                id=item.id,
                content=item.content,
                item_type=item.item_type.value,
                timestamp=format_timestamp(item.timestamp),
                is_pinned=item.is_pinned,
                application_source=item.application_source,
            ))
            # Parent row must exist before the tag rows reference it
            session.flush()

            for tag in sorted(item.tags):
                session.add(TagDB(item_id=item.id, tag=tag))

        logger.debug(f"Inserted item {item.id[:8]} with tags {sorted(item.tags)}")

    def get_by_id(self, item_id: str) -> Optional[ClipboardItem]:
        """Get a single item, or None if it does not exist"""
        with self.session_scope() as session:
            row = session.get(ClipboardItemDB, item_id)
            if row is None:
                return None
            return self._to_items(session, [row])[0]

    def list_all(self) -> List[ClipboardItem]:
        """
        Get every item

        Returns:
            Items ordered pinned first, then newest first
        """
        with self.session_scope() as session:
            rows = self._ordered(session.query(ClipboardItemDB)).all()
            return self._to_items(session, rows)

    def list_paginated(self, offset: int, limit: int) -> List[ClipboardItem]:
        """
        Get one page of items in list_all order

        Args:
            offset: Number of items to skip
            limit: Maximum number of items to return

        Raises:
            ValueError: If offset or limit is negative
        """
        if offset < 0 or limit < 0:
            raise ValueError(f"offset and limit must be non-negative (got {offset}, {limit})")

        with self.session_scope() as session:
            rows = (self._ordered(session.query(ClipboardItemDB))
                    .offset(offset).limit(limit).all())
            return self._to_items(session, rows)

    def get_recent(self, limit: int = 5) -> List[ClipboardItem]:
        """Get the first items of the history, as shown in quick-access menus"""
        return self.list_paginated(0, limit)

    def total_count(self) -> int:
        """Get total number of items"""
        with self.session_scope() as session:
            return session.query(ClipboardItemDB).count()

    def delete(self, item_id: str) -> bool:
        """
        Delete an item, its tag associations go with it

        Returns:
            True if an item was removed
        """
        with self.session_scope() as session:
            deleted = session.query(ClipboardItemDB).filter(
                ClipboardItemDB.id == item_id
            ).delete(synchronize_session=False)

        logger.debug(f"Deleted item {item_id[:8]}: {bool(deleted)}")
        return bool(deleted)

    def clear_all(self) -> int:
        """
        Delete every item; tag definitions are kept

        Returns:
            Number of items removed
        """
        with self.session_scope() as session:
            deleted = session.query(ClipboardItemDB).delete(synchronize_session=False)

        logger.info(f"Cleared {deleted} clipboard items")
        return deleted

    def set_pinned(self, item_id: str, is_pinned: bool) -> None:
        """Update the pin flag, unknown ids are ignored"""
        with self.session_scope() as session:
            session.query(ClipboardItemDB).filter(
                ClipboardItemDB.id == item_id
            ).update({ClipboardItemDB.is_pinned: is_pinned}, synchronize_session=False)

        logger.debug(f"Set pinned={is_pinned} on {item_id[:8]}")

    def trim_to_size(self, max_items: int) -> int:
        """
        Delete the oldest unpinned items beyond max_items

        Pinned items never count towards the limit and are never removed.

        Returns:
            Number of items removed
        """
        with self.session_scope() as session:
            stale = (select(ClipboardItemDB.id)
                     .where(ClipboardItemDB.is_pinned.is_(False))
                     .order_by(ClipboardItemDB.timestamp.desc())
                     .offset(max(max_items, 0)))
            deleted = session.query(ClipboardItemDB).filter(
                ClipboardItemDB.id.in_(stale)
            ).delete(synchronize_session=False)

        if deleted:
            logger.info(f"Trimmed {deleted} items over the {max_items} item limit")
        return deleted

    def delete_older_than(self, days: int) -> int:
        """
        Delete unpinned items captured more than the given number of days ago

        Returns:
            Number of items removed
        """
        cutoff = format_timestamp(utc_now() - timedelta(days=days))

        with self.session_scope() as session:
            deleted = session.query(ClipboardItemDB).filter(
                ClipboardItemDB.is_pinned.is_(False),
                ClipboardItemDB.timestamp < cutoff,
            ).delete(synchronize_session=False)

        if deleted:
            logger.info(f"Deleted {deleted} items older than {days} days")
        return deleted

    # ------------------------------------------------------------------
    # Tags on items
    # ------------------------------------------------------------------

    def add_tag(self, item_id: str, tag: str) -> None:
        """Associate a tag with an item, existing associations are kept as is"""
        with self.session_scope() as session:
            session.execute(
                sqlite_insert(TagDB)
                .values(item_id=item_id, tag=tag)
                .on_conflict_do_nothing(index_elements=['item_id', 'tag'])
            )

        logger.debug(f"Tagged {item_id[:8]} with {tag!r}")

    def remove_tag(self, item_id: str, tag: str) -> None:
        """Remove a tag association, missing associations are ignored"""
        with self.session_scope() as session:
            session.query(TagDB).filter(
                TagDB.item_id == item_id, TagDB.tag == tag
            ).delete(synchronize_session=False)

        logger.debug(f"Untagged {item_id[:8]} from {tag!r}")

    def get_tags_for_item(self, item_id: str) -> Set[str]:
        with self.session_scope() as session:
            return self._load_tags(session, [item_id]).get(item_id, set())

    # ------------------------------------------------------------------
    # Tag catalog
    # ------------------------------------------------------------------

    def list_tag_definitions(self) -> List[TagDefinition]:
        """Get all tag definitions ordered by name"""
        with self.session_scope() as session:
            rows = session.query(TagDefinitionDB).order_by(TagDefinitionDB.name).all()
            return [TagDefinition(name=r.name, color=r.color, is_system=bool(r.is_system))
                    for r in rows]

    def create_tag_definition(self, name: str, color: Optional[str] = None) -> None:
        """
        Create a custom tag definition

        Raises:
            StorageError: If a definition with that name already exists
        """
        with self.session_scope() as session:
            session.add(TagDefinitionDB(name=name, color=color, is_system=False))

        logger.info(f"Created custom tag: {name}")

    def recolor_tag(self, name: str, color: str) -> None:
        """Change the color of any tag definition, system or custom"""
        with self.session_scope() as session:
            session.query(TagDefinitionDB).filter(
                TagDefinitionDB.name == name
            ).update({TagDefinitionDB.color: color}, synchronize_session=False)

        logger.debug(f"Recolored tag {name} -> {color}")

    def delete_tag_definition(self, name: str) -> None:
        """
        Delete a custom tag definition

        Requests to delete a system tag are ignored: system tags can only be
        recolored. Tag associations on items are not touched.
        """
        with self.session_scope() as session:
            definition = session.query(TagDefinitionDB).filter(
                TagDefinitionDB.name == name
            ).first()

            if definition is None:
                return

            if definition.is_system:
                logger.warning(f"Refusing to delete system tag: {name}")
                return

            session.delete(definition)

        logger.info(f"Deleted custom tag: {name}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, pattern: str, use_regex: bool = False) -> List[ClipboardItem]:
        """
        Search item content

        Plain searches are case-sensitive substring matches run in the
        database. Regex searches load every item and filter in memory; an
        invalid pattern yields no results instead of an error.

        Args:
            pattern: Substring or regular expression
            use_regex: Treat pattern as a regular expression

        Returns:
            Matching items in list_all order
        """
        if use_regex:
            try:
                compiled = compile_pattern(pattern)
            except PatternError as e:
                logger.debug(f"Regex search returned no results: {e}")
                return []

            return [item for item in self.list_all() if compiled.search(item.content)]

        with self.session_scope() as session:
            rows = self._ordered(
                session.query(ClipboardItemDB).filter(
                    func.instr(ClipboardItemDB.content, pattern) > 0
                )
            ).all()
            return self._to_items(session, rows)

    def get_by_tag(self, tag: str) -> List[ClipboardItem]:
        """Get items carrying exactly this tag, in list_all order"""
        with self.session_scope() as session:
            rows = self._ordered(
                session.query(ClipboardItemDB)
                .join(TagDB, TagDB.item_id == ClipboardItemDB.id)
                .filter(TagDB.tag == tag)
                .distinct()
            ).all()
            return self._to_items(session, rows)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _ordered(query):
        return query.order_by(ClipboardItemDB.is_pinned.desc(), ClipboardItemDB.timestamp.desc(),
                              ClipboardItemDB.id)

    @staticmethod
    def _load_tags(session: Session, item_ids: List[str]) -> Dict[str, Set[str]]:
        tags: Dict[str, Set[str]] = {}
        for start in range(0, len(item_ids), _TAG_LOOKUP_CHUNK):
            chunk = item_ids[start:start + _TAG_LOOKUP_CHUNK]
            rows = session.query(TagDB.item_id, TagDB.tag).filter(TagDB.item_id.in_(chunk)).all()
            for item_id, tag in rows:
                tags.setdefault(item_id, set()).add(tag)
        return tags

    def _to_items(self, session: Session, rows: List[ClipboardItemDB]) -> List[ClipboardItem]:
        tags = self._load_tags(session, [row.id for row in rows])
        return [
            ClipboardItem(
                id=row.id,
                content=row.content,
                item_type=ClipboardItemType.parse(row.item_type),
                timestamp=parse_timestamp(row.timestamp),
                is_pinned=bool(row.is_pinned),
                tags=tags.get(row.id, set()),
                application_source=row.application_source,
            )
            for row in rows
        ]
