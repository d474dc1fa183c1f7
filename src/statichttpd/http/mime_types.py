"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

The Content-Type header tells the browser how to interpret the bytes we
send. The same bytes rendered as text/html and as text/plain look very
different, and an image sent as text/plain shows up as garbage.

We infer the type from the file extension:

    /css/site.css      →  extension "css"   →  text/css
    /img/logo.png      →  extension "png"   →  image/png
    /notes.README      →  extension "README" → (no match) → text/plain

=============================================================================
LOOKUP RULES
=============================================================================

- Keys are lowercase extensions WITHOUT the leading dot.
- Lookup is an exact, case-sensitive match: "PNG" does not hit "png".
- A miss falls back to text/plain and logs a warning. It never turns
  into an error response.

=============================================================================
"""

import logging
from types import MappingProxyType


logger = logging.getLogger(__name__)


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================

MIME_TYPES = MappingProxyType({
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "mjs": "text/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "webp": "image/webp",
    "avif": "image/avif",
    "bmp": "image/bmp",

    # -------------------------------------------------------------------------
    # FONT TYPES
    # -------------------------------------------------------------------------
    "woff": "font/woff",
    "woff2": "font/woff2",
    "ttf": "font/ttf",
    "otf": "font/otf",

    # -------------------------------------------------------------------------
    # AUDIO / VIDEO
    # -------------------------------------------------------------------------
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "mp4": "video/mp4",
    "webm": "video/webm",

    # -------------------------------------------------------------------------
    # DOCUMENTS / ARCHIVES / OTHER
    # -------------------------------------------------------------------------
    "pdf": "application/pdf",
    "zip": "application/zip",
    "tar": "application/x-tar",
    "gz": "application/gzip",
    "wasm": "application/wasm",
    "map": "application/json",
})

# Fallback for unknown extensions
DEFAULT_MIME_TYPE = "text/plain"


def extension(resource: str) -> str:
    """
    Extract the extension of the final path segment.

    Returns the text after the last "." of the last segment, or "" when
    there is none:

        >>> extension("/css/site.css")
        'css'
        >>> extension("/archive.tar.gz")
        'gz'
        >>> extension("/v1.2/README")
        ''
    """
    try:
        segment = resource.rsplit("/", 1)[-1]
    except (AttributeError, TypeError):
        # Not text at all; treat as "no extension"
        return ""

    if "." not in segment:
        return ""
    return segment.rsplit(".", 1)[1]


def mime_type(ext: str) -> str:
    """
    Map an extension (no dot) to a MIME type.

    Unknown extensions degrade to text/plain with a warning.
    """
    mime = MIME_TYPES.get(ext)
    if mime is None:
        logger.warning(f"No MIME type for extension {ext!r}, using {DEFAULT_MIME_TYPE}")
        return DEFAULT_MIME_TYPE
    return mime


def get_mime_type(resource: str) -> str:
    """Convenience: extension() followed by mime_type()."""
    return mime_type(extension(resource))
