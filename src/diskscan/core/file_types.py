"""File type classification by extension."""

from __future__ import annotations

import os

OTHER = "other"

_TYPES_BY_EXTENSION: dict[str, str] = {}

for _file_type, _extensions in (
    ("video", ("mp4", "mov", "avi", "mkv", "wmv", "flv", "webm")),
    ("audio", ("mp3", "wav", "aac", "flac", "ogg", "m4a")),
    ("image", ("jpg", "jpeg", "png", "gif", "bmp", "svg", "webp", "heic")),
    ("code", ("swift", "rs", "js", "ts", "py", "rb", "go", "java", "c", "cpp", "h")),
    ("archive", ("zip", "tar", "gz", "rar", "7z", "dmg", "iso")),
    ("application", ("app", "exe", "dll", "so", "dylib")),
    ("system", ("plist", "kext")),
    ("cache", ("cache", "tmp", "log")),
    ("document", ("pdf", "doc", "docx", "txt", "md", "rtf", "xls", "xlsx")),
):
    for _ext in _extensions:
        _TYPES_BY_EXTENSION[_ext] = _file_type


def detect_file_type(path: str) -> str:
    """Classify a path by its lowercase final extension.

    Names without an extension (including dot-files like ``.bashrc``)
    and unknown extensions classify as ``other``.
    """
    ext = os.path.splitext(path)[1][1:].lower()
    return _TYPES_BY_EXTENSION.get(ext, OTHER)
