"""
File utility functions.
"""

import re
from pathlib import Path

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')


def ensure_dir(path: str | Path) -> Path:
    """Ensure directory exists, creating if necessary."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_text(path: str | Path) -> str:
    """Read text file content."""
    return Path(path).read_text(encoding="utf-8")


def write_text(path: str | Path, content: str) -> None:
    """Write text to file, creating parent directories if needed."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")


def safe_filename(name: str) -> str:
    """
    Turn a workflow display name into a file name stem.

    Whitespace runs become a single underscore, as do path separators and
    characters that Windows refuses in file names.

    Example:
        >>> safe_filename("Create AVI Load Balancer")
        'Create_AVI_Load_Balancer'
    """
    stem = re.sub(r"\s+", "_", name.strip())
    stem = _UNSAFE_FILENAME_CHARS.sub("_", stem)
    return stem or "workflow"
