"""Clipboard capture and classification"""

from .models import ClipboardItem, ClipboardItemType, TagDefinition
from .classifier import ContentClassifier, classify
from .monitor import ClipboardMonitor

__all__ = ['ClipboardItem', 'ClipboardItemType', 'TagDefinition',
           'ContentClassifier', 'classify', 'ClipboardMonitor']
