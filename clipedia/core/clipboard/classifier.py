"""Heuristic content classification for clipboard text"""

import re
from typing import List, Optional, Sequence, Tuple

# Fixed tag vocabulary produced by the classifier, seeded as system tags
SYSTEM_TAGS = ('url', 'code', 'json', 'markdown', 'email', 'phone', 'path')

MIN_PHONE_DIGITS = 7
MIN_CODE_MATCHES = 2
MIN_LANGUAGE_MATCHES = 2

_URL = re.compile(r'https?://\S+')
_EMAIL = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')
_PHONE = re.compile(r'[+\d]?[\d\s\-()]+')
_PATH = re.compile(r'[A-Za-z]:[\\/]|[/~]')

_MARKDOWN_PATTERNS = [
    re.compile(r'^#{1,6}\s'),                  # heading
    re.compile(r'\*\*[^*]+\*\*'),              # bold
    re.compile(r'\*[^*]+\*'),                  # italic
    re.compile(r'\[.+\]\(.+\)'),               # link
    re.compile(r'^[*\-]\s'),                   # list item
    re.compile(r'```'),                        # fenced code block
]

_CODE_PATTERNS = [
    re.compile(r'(function|const|let|var|class|def|import|export)'),
    re.compile(r'(if|else|for|while|return)'),
    re.compile(r'[{}\[\]();]'),
    re.compile(r'(public|private|protected|static)'),
]


def _compile_all(patterns: Sequence[str]) -> List[re.Pattern]:
    return [re.compile(p) for p in patterns]


# Priority order matters: the first language reaching the threshold wins.
_LANGUAGE_PATTERNS: List[Tuple[str, List[re.Pattern]]] = [
    ('rust', _compile_all([r'fn\s+\w+', r'let\s+mut', r'impl\s+', r'use\s+\w+::'])),
    ('javascript', _compile_all([r'const\s+\w+\s*=', r'=>\s*\{', r'function\s+\w+\(', r'\.then\('])),
    ('typescript', _compile_all([r':\s*(string|number|boolean)', r'interface\s+\w+', r'type\s+\w+\s*='])),
    ('python', _compile_all([r'def\s+\w+\(', r'import\s+\w+', r':\s*$', r'if\s+__name__'])),
    ('java', _compile_all([r'public\s+class', r'private\s+\w+', r'@Override', r'new\s+\w+\('])),
    ('go', _compile_all([r'func\s+\w+\(', r'package\s+\w+', r':=', r'go\s+func'])),
    ('cpp', _compile_all([r'#include\s*<', r'std::', r'nullptr', r'template\s*<'])),
    ('csharp', _compile_all([r'using\s+System', r'namespace\s+\w+', r'public\s+override'])),
]

LANGUAGE_PRIORITY = tuple(name for name, _ in _LANGUAGE_PATTERNS)


def _count_matches(patterns: Sequence[re.Pattern], content: str) -> int:
    return sum(1 for pattern in patterns if pattern.search(content))


class ContentClassifier:
    """
    Assigns tags to clipboard text using literal pattern rules.

    Every rule is independent, so content may receive several tags. The
    classifier is pure and never raises: content matching no rule simply
    gets no tags.
    """

    @classmethod
    def classify(cls, content: str) -> List[str]:
        """
        Classify content

        Args:
            content: Clipboard text

        Returns:
            Tags in detection order, without duplicates
        """
        tags = []

        if cls.is_url(content):
            tags.append('url')
        if cls.is_email(content):
            tags.append('email')
        if cls.is_phone(content):
            tags.append('phone')
        if cls.is_path(content):
            tags.append('path')
        if cls.is_json(content):
            tags.append('json')
        if cls.is_markdown(content):
            tags.append('markdown')
        if cls.is_code(content):
            tags.append('code')

            language = cls.detect_language(content)
            if language:
                tags.append(f'code:{language}')

        return tags

    @staticmethod
    def is_url(content: str) -> bool:
        return _URL.fullmatch(content.strip()) is not None

    @staticmethod
    def is_email(content: str) -> bool:
        return _EMAIL.fullmatch(content.strip()) is not None

    @staticmethod
    def is_phone(content: str) -> bool:
        cleaned = content.strip()
        if _PHONE.fullmatch(cleaned) is None:
            return False
        return sum(1 for ch in cleaned if ch.isdigit()) >= MIN_PHONE_DIGITS

    @staticmethod
    def is_path(content: str) -> bool:
        return _PATH.match(content.strip()) is not None

    @staticmethod
    def is_json(content: str) -> bool:
        """Structural guess only, the content is not parsed"""
        trimmed = content.strip()
        return ((trimmed.startswith('{') and trimmed.endswith('}'))
                or (trimmed.startswith('[') and trimmed.endswith(']')))

    @staticmethod
    def is_markdown(content: str) -> bool:
        return any(pattern.search(content) for pattern in _MARKDOWN_PATTERNS)

    @staticmethod
    def is_code(content: str) -> bool:
        return _count_matches(_CODE_PATTERNS, content) >= MIN_CODE_MATCHES

    @staticmethod
    def detect_language(content: str) -> Optional[str]:
        """
        Pick a programming language for code content

        Languages are tried in fixed priority order and the first one with
        enough idiom matches wins, regardless of how many matches later
        languages would have.

        Returns:
            Language name or None
        """
        for language, patterns in _LANGUAGE_PATTERNS:
            if _count_matches(patterns, content) >= MIN_LANGUAGE_MATCHES:
                return language
        return None


def classify(content: str) -> List[str]:
    """Classify clipboard text, see ContentClassifier.classify"""
    return ContentClassifier.classify(content)
