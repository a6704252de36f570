"""Database management using SQLAlchemy"""

import os
import threading
from typing import Optional
from sqlalchemy import (
    create_engine, event, text, Column, String, Text, Boolean, Integer,
    ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from loguru import logger

from ..clipboard.models import format_timestamp, utc_now
from ...utils.config_manager import app_data_dir

Base = declarative_base()

# Display colors for the classifier vocabulary, seeded once
SYSTEM_TAG_COLORS = {
    'url': '#3B82F6',
    'code': '#8B5CF6',
    'json': '#F59E0B',
    'markdown': '#6366F1',
    'email': '#10B981',
    'phone': '#EC4899',
    'path': '#14B8A6',
}


def _now_text() -> str:
    return format_timestamp(utc_now())


class ClipboardItemDB(Base):
    """Database model for clipboard items"""
    __tablename__ = 'clipboard_items'

    id = Column(String(36), primary_key=True)
    content = Column(Text, nullable=False)
    item_type = Column(String(16), nullable=False)
    timestamp = Column(String(40), nullable=False)  # fixed-width ISO-8601, sortable
    is_pinned = Column(Boolean, nullable=False, default=False)
    application_source = Column(String(255))
    created_at = Column(String(40), nullable=False, default=_now_text)

    __table_args__ = (
        Index('idx_clipboard_timestamp', 'timestamp'),
        Index('idx_clipboard_pinned', 'is_pinned'),
    )


class TagDB(Base):
    """Association between a clipboard item and a tag name"""
    __tablename__ = 'tags'

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(String(36), ForeignKey('clipboard_items.id', ondelete='CASCADE'), nullable=False)
    tag = Column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint('item_id', 'tag', name='uq_tags_item_tag'),
    )


class TagDefinitionDB(Base):
    """Database model for the tag catalog"""
    __tablename__ = 'tag_definitions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    color = Column(String(32))
    is_system = Column(Boolean, nullable=False, default=False)
    created_at = Column(String(40), nullable=False, default=_now_text)


def _enable_foreign_keys(dbapi_connection, connection_record):
    """Turn on SQLite foreign key enforcement so tag rows cascade"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Owns the single SQLite connection and the lock guarding it

    All sessions share one connection (StaticPool), so callers must hold
    ``lock`` for the lifetime of a session. ClipboardRepository does this
    for every operation.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize database manager

        Args:
            db_path: Path to database file, ":memory:" for a private
                in-memory database (defaults to app data directory)
        """
        if db_path is None:
            db_path = str(app_data_dir() / 'clipedia.db')

        self.db_path = db_path
        self.engine = None
        self.SessionLocal = None
        self.lock = threading.RLock()

        self._initialize_database()

    def _initialize_database(self):
        """Initialize database connection, create tables and seed system tags"""
        try:
            url = 'sqlite://' if self.db_path == ':memory:' else f'sqlite:///{self.db_path}'
            self.engine = create_engine(
                url,
                connect_args={'check_same_thread': False},
                poolclass=StaticPool,
            )
            event.listen(self.engine, 'connect', _enable_foreign_keys)

            # Create tables and indexes if they don't exist
            Base.metadata.create_all(bind=self.engine)

            self.SessionLocal = sessionmaker(autoflush=False, bind=self.engine)

            self._seed_system_tags()

            logger.info(f"Database initialized at: {self.db_path}")

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    def _seed_system_tags(self):
        """Insert the system tag definitions that are missing"""
        with self.lock:
            session = self.SessionLocal()
            try:
                existing = {name for (name,) in session.query(TagDefinitionDB.name).all()}
                for name, color in SYSTEM_TAG_COLORS.items():
                    if name not in existing:
                        session.add(TagDefinitionDB(name=name, color=color, is_system=True))
                        logger.debug(f"Seeded system tag: {name}")
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def get_session(self) -> Session:
        """
        Get database session

        Returns:
            SQLAlchemy session
        """
        if self.SessionLocal is None:
            raise RuntimeError("Database not initialized")

        return self.SessionLocal()

    def close(self):
        """Close database connection"""
        if self.engine:
            self.engine.dispose()
            logger.info("Database connection closed")

    def vacuum(self):
        """Optimize database (VACUUM operation)"""
        try:
            with self.lock:
                with self.engine.connect() as conn:
                    conn.execution_options(isolation_level='AUTOCOMMIT').execute(text("VACUUM"))
            logger.info("Database optimized (VACUUM completed)")

        except Exception as e:
            logger.error(f"VACUUM failed: {e}")
            raise

    def get_size(self) -> int:
        """
        Get database file size in bytes

        Returns:
            Size in bytes, 0 for in-memory databases
        """
        if self.db_path != ':memory:' and os.path.exists(self.db_path):
            return os.path.getsize(self.db_path)
        return 0
