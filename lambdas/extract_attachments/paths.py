"""
Key derivation for source emails and extracted attachments.
"""

import posixpath

DEFAULT_ATTACHMENTS_PREFIX = "attachments/"
ROOT_MARKER = "/"

# Parent paths that all mean "top of the bucket"
_ROOT_ALIASES = frozenset({"", ".", "root"})


def directory_marker(object_key: str) -> str:
    """
    Normalized parent path of a source email key.

    "inbox/sub/msg.eml" -> "inbox/sub"; a key at the top of the bucket or
    under a "root" folder -> "/".
    """
    parent = posixpath.normpath(posixpath.dirname(object_key))
    # normpath keeps a leading "//"; any run of leading slashes is one root
    if parent.startswith("//"):
        parent = ROOT_MARKER + parent.lstrip("/")
    if parent in _ROOT_ALIASES:
        return ROOT_MARKER
    return parent


def destination_key(filename: str, prefix: str = DEFAULT_ATTACHMENTS_PREFIX) -> str:
    """
    Key an attachment is stored under.

    No sanitization and no collision handling: attachments sharing a
    filename overwrite each other.
    """
    return f"{prefix}{filename}"
