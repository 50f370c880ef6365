"""
Attachment Filter

Decides which attachments are extracted, by filename extension only.
"""

from typing import Collection, Final

# Documents and e-books
ALLOWED_EXTENSIONS: Final[frozenset[str]] = frozenset({".pdf", ".epub"})


def file_extension(filename: str) -> str:
    """
    Extension of the last path element, including the dot.

    Everything from the final "." of the last path element, so ".pdf"
    yields ".pdf", "report." yields "." and "report" yields "".
    """
    name = filename.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot == -1:
        return ""
    return name[dot:]


def qualifies(
    filename: str,
    allowed_extensions: Collection[str] = ALLOWED_EXTENSIONS,
) -> bool:
    """
    Check whether an attachment should be extracted.

    Comparison is case-insensitive: "report.PDF" qualifies.
    """
    if not filename:
        return False
    return file_extension(filename).lower() in allowed_extensions
