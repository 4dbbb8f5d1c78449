"""
=============================================================================
PATH SANITIZATION
=============================================================================

Turns the untrusted request-target from the request line into a path that
is safe to join onto the content root.

=============================================================================
DIRECTORY TRAVERSAL
=============================================================================

The classic attack against a file server:

    GET /../../etc/passwd HTTP/1.1

Naively joined onto the content root:

    templates/ + ../../etc/passwd  →  /etc/passwd     (!!)

The defence is purely lexical. We normalize the path first, collapsing
"." and ".." segments and redundant slashes, and then look at what is
left:

    ┌────────────────────────────┬──────────────────┬─────────────────┐
    │  Input (leading / removed) │  normpath()      │  Result         │
    ├────────────────────────────┼──────────────────┼─────────────────┤
    │  img/logo.png              │  img/logo.png    │  img/logo.png   │
    │  img//./logo.png           │  img/logo.png    │  img/logo.png   │
    │  img/../index.html         │  index.html      │  index.html     │
    │  ../../etc/passwd          │  ../../etc/passwd│  "" (rejected)  │
    │  a/../../secret            │  ../secret       │  "" (rejected)  │
    │  /etc/passwd               │  /etc/passwd     │  "" (rejected)  │
    └────────────────────────────┴──────────────────┴─────────────────┘

Normalization never touches the filesystem, so this runs before any stat()
or open() is attempted.

=============================================================================
"""

import posixpath
from urllib.parse import unquote

# Rejection signal: sanitize_path() returns this instead of a path.
REJECTED = ""

_PARENT = ".."


def sanitize_path(raw_path: str) -> str:
    """
    Normalize a relative path and reject anything that escapes the root.

    The caller is expected to have stripped the leading "/" already.

    Args:
        raw_path: Untrusted relative path.

    Returns:
        The normalized path, or REJECTED ("") if it is unsafe. Accepted
        results are fixed points: sanitize_path(sanitize_path(p)) equals
        sanitize_path(p).
    """
    if "\x00" in raw_path:
        return REJECTED

    clean = posixpath.normpath(raw_path)

    if posixpath.isabs(clean):
        return REJECTED

    if clean == _PARENT or clean.startswith(_PARENT + "/"):
        return REJECTED

    return clean


def target_to_relative_path(target: str, index_file: str) -> str:
    """
    Reduce a request-target to the relative path handed to sanitize_path().

        /img/logo.png?v=2    →  img/logo.png
        /my%20song.mp3       →  my song.mp3
        /                    →  index.html
        (empty)              →  index.html

    Query string and fragment are dropped, percent-escapes are decoded
    (so "%2e%2e/" is caught as "../" by the sanitizer), and every leading
    slash is stripped.
    """
    path = target.split("?", 1)[0].split("#", 1)[0]

    # Decided on the raw text: "/%2F" is a path, not the root
    if path in ("", "/"):
        return index_file

    return unquote(path).lstrip("/")
