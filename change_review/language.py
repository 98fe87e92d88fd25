"""
Language tags for presentation — derived from file extensions.

The tag only drives syntax highlighting in consumers; the review engine
never looks at it.
"""

import os
from collections import Counter

DEFAULT_LANGUAGE = "plaintext"


# ── Extension → Language mapping ──

EXTENSION_MAP = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".rb": "ruby",
    ".cs": "csharp",
    ".cpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".hpp": "cpp",
    ".swift": "swift",
    ".kt": "kotlin",
    ".php": "php",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".md": "markdown",
    ".html": "html",
    ".css": "css",
    ".sh": "bash",
}

_LANGUAGE_NAMES = {
    "javascript": "JavaScript",
    "typescript": "TypeScript",
    "csharp": "C#",
    "cpp": "C++",
    "php": "PHP",
    "json": "JSON",
    "yaml": "YAML",
    "html": "HTML",
    "css": "CSS",
    "plaintext": "Plain text",
}


def detect_language(file_path: str) -> str:
    """Return the language tag for *file_path*, ``"plaintext"`` if unknown."""
    _, ext = os.path.splitext(file_path)
    return EXTENSION_MAP.get(ext.lower(), DEFAULT_LANGUAGE)


def get_language_name(language: str) -> str:
    """Human-readable name for a language key."""
    return _LANGUAGE_NAMES.get(language, language.capitalize())


def detect_language_from_files(file_paths: list[str]) -> str | None:
    """Most common language among *file_paths*, or None if none is known."""
    counts: Counter = Counter()
    for path in file_paths:
        lang = detect_language(path)
        if lang != DEFAULT_LANGUAGE:
            counts[lang] += 1
    if not counts:
        return None
    return counts.most_common(1)[0][0]
