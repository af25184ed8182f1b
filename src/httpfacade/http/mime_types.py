"""
=============================================================================
MIME TYPE TABLE
=============================================================================

One table, two consumers:

    1. Short names used by request.is_() and request.accepts()
       "html" → text/html, "json" → application/json, ...

    2. File extensions used by uploaded-file validation
       ".svg" → image/svg+xml, and back again image/svg+xml → "svg"

Keeping both lookups on the same data means `is_("json")` and
`accepts("json")` can never disagree about what "json" means.

=============================================================================
MEDIA TYPE ANATOMY
=============================================================================

    application/vnd.api+json; charset=utf-8
    ─────┬───── ──────┬───── ──────┬──────
         │            │            │
       type        subtype     parameters (ignored for matching)
                       │
                 "+json" is the structured syntax suffix

=============================================================================
"""

from pathlib import Path
from typing import Optional


MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT
    # -------------------------------------------------------------------------
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGES
    # -------------------------------------------------------------------------
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".bmp": "image/bmp",

    # -------------------------------------------------------------------------
    # FONTS, AUDIO, VIDEO
    # -------------------------------------------------------------------------
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",

    # -------------------------------------------------------------------------
    # DOCUMENTS AND ARCHIVES
    # -------------------------------------------------------------------------
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    ".7z": "application/x-7z-compressed",
    ".wasm": "application/wasm",
    ".yaml": "text/yaml",
    ".yml": "text/yaml",
}

# Short names that are not file extensions.
SHORT_NAMES = {
    "text": "text/plain",
    "urlencoded": "application/x-www-form-urlencoded",
    "form": "application/x-www-form-urlencoded",
    "multipart": "multipart/*",
}

# Preferred extension when several map to the same type (.htm vs .html).
_PREFERRED_EXTENSIONS = {
    "text/html": "html",
    "text/javascript": "js",
    "image/jpeg": "jpg",
    "text/yaml": "yaml",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def lookup(name: str) -> Optional[str]:
    """
    Expand a short name to a full media type.

    Anything already containing a slash is returned lower-cased as is,
    so callers can mix "html" and "application/xml" freely.

    Examples:
        >>> lookup("html")
        'text/html'
        >>> lookup("urlencoded")
        'application/x-www-form-urlencoded'
        >>> lookup("text/*")
        'text/*'
        >>> lookup("nope") is None
        True
    """
    if not name:
        return None

    name = name.strip().lower()
    if "/" in name:
        return name
    if name in SHORT_NAMES:
        return SHORT_NAMES[name]
    return MIME_TYPES.get("." + name.lstrip("."))


def base_type(content_type: Optional[str]) -> str:
    """
    Strip parameters and normalize case.

        "Application/JSON; charset=utf-8" → "application/json"
    """
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def get_mime_type(path: str | Path, default: Optional[str] = None) -> str:
    """
    Get the media type for a file name based on its extension.

    Args:
        path: File path or bare file name.
        default: Returned for unknown extensions
                 (application/octet-stream when not given).
    """
    if isinstance(path, str):
        path = Path(path)

    return MIME_TYPES.get(path.suffix.lower(), default or DEFAULT_MIME_TYPE)


def extension_for(mime_type: Optional[str]) -> Optional[str]:
    """
    Reverse lookup: media type → extension without the dot.

    Returns None when the type is unknown.
    """
    wanted = base_type(mime_type)
    if not wanted:
        return None
    if wanted in _PREFERRED_EXTENSIONS:
        return _PREFERRED_EXTENSIONS[wanted]

    for extension, mime in MIME_TYPES.items():
        if mime == wanted:
            return extension[1:]
    return None
