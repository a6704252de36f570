"""Application services"""

from .cleanup.cleanup_service import CleanupService

__all__ = ['CleanupService']
