"""
Frontmatter handling for adfmark.

Drafts may start with a small metadata header delimited by ``---`` lines.
The header is never compiled; it is split off before the body is parsed.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"


def _find_closing_delimiter(lines: List[str]) -> Optional[int]:
    for index in range(1, len(lines)):
        if lines[index].strip() == FRONTMATTER_DELIMITER:
            return index
    return None


def _parse_value(value: str) -> Any:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        value = value[1:-1]
    if value in ("", "null"):
        return None
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def parse_frontmatter_fields(header_lines: List[str]) -> Dict[str, Any]:
    """
    Parse ``key: value`` header lines.

    Blank lines, ``#`` comments and lines without a colon are skipped.

    Args:
        header_lines: Lines between the opening and closing delimiters

    Returns:
        Dictionary of header fields
    """
    fields: Dict[str, Any] = {}
    for line in header_lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        fields[key.strip()] = _parse_value(value.strip())
    return fields


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """
    Split a draft into its frontmatter fields and its body.

    An opening delimiter without a matching closing one means the input has
    no frontmatter at all: the whole text is returned as body.

    Args:
        text: Raw input text

    Returns:
        Tuple of (fields, body). Body is returned unchanged.
    """
    lines = text.split("\n")
    if lines[0].strip() != FRONTMATTER_DELIMITER:
        return {}, text

    closing = _find_closing_delimiter(lines)
    if closing is None:
        logger.warning("Frontmatter opened with '---' but never closed, treating whole input as body")
        return {}, text

    fields = parse_frontmatter_fields(lines[1:closing])
    return fields, "\n".join(lines[closing + 1 :])


def strip_frontmatter(text: str) -> str:
    """Remove a leading frontmatter block and return the body."""
    _, body = split_frontmatter(text)
    if not body.strip():
        logger.warning("No content after stripping frontmatter. The document body is empty.")
    return body
