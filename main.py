"""Clipedia headless application: clipboard capture with periodic maintenance"""

import sys
import signal
import threading
from loguru import logger

from clipedia.core.clipboard import ClipboardMonitor, ClipboardItem
from clipedia.core.storage import DatabaseManager, ClipboardRepository
from clipedia.services import CleanupService
from clipedia.services.cleanup.cleanup_service import (
    HistoryTrimmer, OldDataCleaner, DatabaseOptimizer
)
from clipedia.utils import ConfigManager, app_data_dir


class ClipediaApp:
    """Main application class wiring storage, monitor and cleanup together"""

    def __init__(self):
        """Initialize application"""
        self.config_manager = None
        self.database_manager = None
        self.repository = None
        self.clipboard_monitor = None
        self.cleanup_service = None

        self._shutdown_event = threading.Event()

    def _setup_logging(self):
        """Configure logging"""
        level = self.config_manager.get('logging.level', 'INFO')

        logger.remove()  # Remove default handler

        # Console logging
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"
        )

        # File logging
        if self.config_manager.get('logging.file_logging', True):
            log_dir = app_data_dir() / 'logs'
            log_dir.mkdir(parents=True, exist_ok=True)
            logger.add(
                log_dir / "clipedia_{time:YYYY-MM-DD}.log",
                rotation=self.config_manager.get('logging.rotation', '1 day'),
                retention=self.config_manager.get('logging.retention', '7 days'),
                level="DEBUG",
                format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
            )

    def initialize(self) -> bool:
        """Initialize all components"""
        try:
            self.config_manager = ConfigManager()
            self._setup_logging()

            logger.info("=" * 60)
            logger.info("Clipedia Starting")
            logger.info("=" * 60)

            if not self.config_manager.validate():
                logger.error("Invalid configuration")
                return False

            logger.info("Initializing database...")
            db_path = self.config_manager.get('storage.database_path')
            self.database_manager = DatabaseManager(db_path)
            self.repository = ClipboardRepository(self.database_manager)

            logger.info("Initializing clipboard monitoring...")
            self.clipboard_monitor = ClipboardMonitor(
                self.repository,
                check_interval=self.config_manager.get('clipboard.check_interval', 500),
                enabled=self.config_manager.get('clipboard.monitoring_enabled', True)
            )
            self.clipboard_monitor.add_callback(self._on_item_captured)

            logger.info("Initializing cleanup service...")
            self.cleanup_service = CleanupService(self.config_manager.get('cleanup.cleanup_interval', 3600))

            max_history = self.config_manager.get('clipboard.max_history_size', 1000)
            trimmer = HistoryTrimmer(self.repository, max_history)
            self.cleanup_service.add_task(trimmer.trim, "history_trim")

            retention_days = self.config_manager.get('storage.retention_days', 0)
            cleaner = OldDataCleaner(self.repository, retention_days)
            self.cleanup_service.add_task(cleaner.cleanup, "old_data_cleanup")

            optimizer = DatabaseOptimizer(self.database_manager)
            self.cleanup_service.add_task(optimizer.optimize, "database_optimization")

            logger.info("Application initialized successfully")
            return True

        except Exception as e:
            logger.error(f"Failed to initialize application: {e}")
            return False

    def _on_item_captured(self, item: ClipboardItem):
        """Handle a newly captured clipboard item"""
        tags = ', '.join(sorted(item.tags)) or 'none'
        logger.debug(f"History now holds {self.repository.total_count()} items (last tags: {tags})")

    def start(self):
        """Start services and block until shutdown"""
        self.clipboard_monitor.start()

        if self.config_manager.get('cleanup.enabled', True):
            self.cleanup_service.start()

        logger.info("Application started successfully")
        self._shutdown_event.wait()

    def shutdown(self):
        """Shutdown the application"""
        if self._shutdown_event.is_set():
            return

        logger.info("Shutting down application...")

        try:
            if self.clipboard_monitor and self.clipboard_monitor.is_running:
                self.clipboard_monitor.stop()

            if self.cleanup_service and self.cleanup_service.is_running:
                self.cleanup_service.stop()

            if self.database_manager:
                self.database_manager.close()

            if self.config_manager:
                self.config_manager.save()

            logger.info("Application shutdown complete")

        except Exception as e:
            logger.error(f"Error during shutdown: {e}")

        finally:
            self._shutdown_event.set()


def main():
    """Main entry point"""
    app = ClipediaApp()

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}")
        app.shutdown()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if not app.initialize():
        logger.error("Failed to initialize application")
        sys.exit(1)

    app.start()


if __name__ == "__main__":
    main()
