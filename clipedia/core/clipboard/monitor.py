"""Clipboard monitoring service: capture, classify and persist changes"""

import threading
from typing import TYPE_CHECKING, Callable, Optional, Set
import pyperclip
from loguru import logger

from .classifier import classify
from .models import ClipboardItem, ClipboardItemType
from ..errors import CaptureError, StorageError

if TYPE_CHECKING:
    from ..storage.repository import ClipboardRepository


class ClipboardMonitor:
    """
    Polls the clipboard and records every external change exactly once

    Deduplication is against the last content seen, not the stored history:
    copying A, B, A records three items, copying A, A records one. While
    paused, changes still update the last-seen value so resuming does not
    replay them.
    """

    def __init__(self, repository: "ClipboardRepository", check_interval: int = 500,
                 enabled: bool = True):
        """
        Initialize clipboard monitor

        Args:
            repository: Store that captured items are written to
            check_interval: Check interval in milliseconds
            enabled: Whether captured changes are persisted initially
        """
        self.repository = repository
        self.check_interval = check_interval / 1000.0  # Convert to seconds
        self._enabled = enabled
        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_content: Optional[str] = None
        self._callbacks: Set[Callable[[ClipboardItem], None]] = set()

        self._lock = threading.RLock()             # lifecycle, callbacks, enabled flag
        self._clipboard_lock = threading.Lock()    # OS clipboard handle
        self._last_content_lock = threading.Lock()

        logger.info(f"ClipboardMonitor initialized with {check_interval}ms interval")

    def add_callback(self, callback: Callable[[ClipboardItem], None]) -> None:
        """
        Add a callback for captured items

        Args:
            callback: Function called with each newly persisted item
        """
        with self._lock:
            self._callbacks.add(callback)
            logger.debug(f"Added callback: {callback.__name__}")

    def remove_callback(self, callback: Callable[[ClipboardItem], None]) -> None:
        """Remove a callback"""
        with self._lock:
            self._callbacks.discard(callback)
            logger.debug(f"Removed callback: {callback.__name__}")

    def start(self) -> None:
        """Start monitoring the clipboard"""
        with self._lock:
            if self._running:
                logger.warning("Monitor already running")
                return

            self._running = True
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._monitor_loop, name='clipboard-monitor',
                                            daemon=True)
            self._thread.start()
            logger.info("Clipboard monitoring started")

    def stop(self) -> None:
        """Stop monitoring the clipboard"""
        with self._lock:
            if not self._running:
                logger.warning("Monitor not running")
                return

            self._running = False
            self._stop_event.set()

        if self._thread:
            self._thread.join(timeout=5.0)
            self._thread = None

        logger.info("Clipboard monitoring stopped")

    def _monitor_loop(self) -> None:
        """Main monitoring loop"""
        logger.debug("Monitor loop started")

        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Error in monitor loop: {e}")

            self._stop_event.wait(self.check_interval)

        logger.debug("Monitor loop ended")

    def poll_once(self) -> Optional[ClipboardItem]:
        """
        Run a single capture cycle

        Returns:
            The persisted item, or None if nothing was recorded
        """
        try:
            content = self._read_clipboard()
        except CaptureError as e:
            logger.debug(f"Skipping capture cycle: {e}")
            return None

        if not self._has_changed(content):
            return None

        if not content.strip():
            return None

        if not self.is_enabled:
            logger.debug("Monitoring paused, change not recorded")
            return None

        item = ClipboardItem.create(content, ClipboardItemType.TEXT)
        item.tags.update(classify(content))

        try:
            self.repository.insert(item)
        except StorageError as e:
            logger.error(f"Failed to persist clipboard item: {e}")
            return None

        logger.info(f"Captured item {item.id[:8]}: {len(content)} chars, tags={sorted(item.tags)}")
        self._notify_callbacks(item)
        return item

    def _read_clipboard(self) -> str:
        """
        Read text from the OS clipboard

        Raises:
            CaptureError: If the clipboard is empty, holds no text or cannot be read
        """
        with self._clipboard_lock:
            try:
                content = pyperclip.paste()
            except pyperclip.PyperclipException as e:
                raise CaptureError(f"Clipboard unreadable: {e}") from e

        if not content:
            raise CaptureError("Clipboard is empty or holds no text")
        return content

    def _has_changed(self, content: str) -> bool:
        """
        Check if clipboard content has changed, recording it as last seen

        Args:
            content: Current clipboard content

        Returns:
            True if content differs from the last seen value
        """
        with self._last_content_lock:
            if content == self._last_content:
                return False
            self._last_content = content
            return True

    def _notify_callbacks(self, item: ClipboardItem) -> None:
        """
        Notify all callbacks of a captured item

        Args:
            item: Newly persisted item
        """
        with self._lock:
            callbacks = self._callbacks.copy()

        for callback in callbacks:
            try:
                callback(item)
            except Exception as e:
                logger.error(f"Error in callback {callback.__name__}: {e}")

    def copy_to_clipboard(self, content: str) -> None:
        """
        Write content to the clipboard without recording it as a new capture

        Raises:
            CaptureError: If the clipboard cannot be written
        """
        with self._clipboard_lock:
            try:
                pyperclip.copy(content)
            except pyperclip.PyperclipException as e:
                logger.error(f"Failed to write clipboard: {e}")
                raise CaptureError(f"Clipboard unwritable: {e}") from e

            # Still under the clipboard lock so no poll can see the write first
            with self._last_content_lock:
                self._last_content = content

        logger.debug(f"Copied {len(content)} chars to clipboard")

    def toggle_monitoring(self) -> bool:
        """
        Pause or resume recording

        Returns:
            The new enabled state
        """
        with self._lock:
            self._enabled = not self._enabled
            enabled = self._enabled

        logger.info(f"Clipboard monitoring {'resumed' if enabled else 'paused'}")
        return enabled

    def set_enabled(self, enabled: bool) -> None:
        """Pause (False) or resume (True) recording"""
        with self._lock:
            self._enabled = enabled

    @property
    def is_enabled(self) -> bool:
        """Check if captured changes are being recorded"""
        with self._lock:
            return self._enabled

    @property
    def is_running(self) -> bool:
        """Check if the polling thread is running"""
        return self._running

    def get_current_content(self) -> Optional[str]:
        """Get current clipboard content"""
        try:
            return self._read_clipboard()
        except CaptureError as e:
            logger.debug(f"No clipboard content: {e}")
            return None
