"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions to the MIME type sent in the Content-Type header.

The browser uses Content-Type to decide what to do with the body:

    index.html   text/html               → rendered as a page
    logo.png     image/png               → displayed as an image
    song.mp3     audio/mpeg              → handed to the audio player
    app.js       application/javascript  → executed as a script
    blob.bin     application/octet-stream → downloaded

Lookup is by extension only, case-insensitive (".JPG" == ".jpg"). Anything
not in the table is served as application/octet-stream, so the lookup can
never fail.

=============================================================================
"""

from pathlib import PurePosixPath
from typing import Optional


# =============================================================================
# MIME TYPE TABLE
# =============================================================================
#
# Keys are lowercase extensions including the dot.
#
# =============================================================================

MIME_TYPES = {
    # Documents
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".txt": "text/plain",

    # Images
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",

    # Audio
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".midi": "audio/midi",
    ".mid": "audio/midi",
}

# "I don't know what this is, treat it as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: str, default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    Args:
        path: File path or name. Only the final suffix is considered.
        default: Returned for unknown extensions instead of
                 application/octet-stream.

    Returns:
        The MIME type string. Never raises.

    Examples:
        >>> get_mime_type("css/site.css")
        'text/css'

        >>> get_mime_type("PHOTO.JPG")
        'image/jpeg'

        >>> get_mime_type("Makefile")
        'application/octet-stream'
    """
    extension = PurePosixPath(path).suffix.lower()
    return MIME_TYPES.get(extension, default or DEFAULT_MIME_TYPE)
