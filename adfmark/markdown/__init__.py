"""
adfmark Markdown Compiler v1.0

Compiles a constrained markdown dialect into Atlassian Document Format
(ADF) trees for Jira and Confluence, and validates ADF documents.

This module provides:
- Frontmatter stripping
- Block-level element parsing
- Inline element parsing
- ADF node tree representation
- Structural validation of arbitrary ADF documents
- Mention placeholder resolution

Usage:
    from adfmark.markdown import MarkdownParser, markdown_to_adf, validate_document

    # Jira issue description
    adf = markdown_to_adf("## Summary\n\nFixes PROJ-123 for @jane@example.com")

    # Confluence page
    parser = MarkdownParser(target="confluence")
    adf = parser.parse_to_adf("##! Action items\n\n- one\n- two")

    # Validation
    result = validate_document(adf)
    assert result.valid

Dialect:
- ``## heading`` (``##!`` for the accent color on Confluence)
- ``**bold**``, ``*italic*``, ``code``, ``[text](url)``
- ``{status:TEXT:color}`` status badges
- ``@user@example.com`` mentions and ``PROJ-123`` issue cards (Jira)
- ``{pageCard:url}`` inline cards (Confluence)
- ``:::context``, ``:::callout``, ``:::metadata``, ``:::toc`` blocks
- fenced code, lists, pipe tables, block quotes, rules
"""

from .ast_nodes import *
from .block_parser import BlockParser
from .frontmatter import split_frontmatter, strip_frontmatter
from .inline_parser import InlineParser, merge_adjacent_text_nodes
from .mentions import UnresolvedMentionError, find_mention_emails, resolve_mentions
from .parser import MarkdownParser, markdown_to_adf, markdown_to_json, parse_markdown
from .styles import CONFLUENCE_STYLE, JIRA_STYLE, STYLES, TargetStyle, get_style
from .validator import DocumentValidator, ValidationResult, validate_document

__version__ = "1.0.0"
__all__ = [
    "MarkdownParser",
    "parse_markdown",
    "markdown_to_adf",
    "markdown_to_json",
    "BlockParser",
    "InlineParser",
    "merge_adjacent_text_nodes",
    "split_frontmatter",
    "strip_frontmatter",
    "TargetStyle",
    "JIRA_STYLE",
    "CONFLUENCE_STYLE",
    "STYLES",
    "get_style",
    "DocumentValidator",
    "ValidationResult",
    "validate_document",
    "UnresolvedMentionError",
    "find_mention_emails",
    "resolve_mentions",
    # Nodes
    "ADFDocument",
    "ADFParagraph",
    "ADFHeading",
    "ADFBulletList",
    "ADFOrderedList",
    "ADFListItem",
    "ADFTable",
    "ADFTableRow",
    "ADFTableHeader",
    "ADFTableCell",
    "ADFCodeBlock",
    "ADFBlockQuote",
    "ADFRule",
    "ADFExtension",
    "ADFText",
    "ADFHardBreak",
    "ADFStatus",
    "ADFMention",
    "ADFInlineCard",
    "ADFMark",
    "MarkType",
    "NodeType",
]
