"""
Main Markdown Parser for adfmark

This module provides the main MarkdownParser class that orchestrates
frontmatter stripping, block parsing, inline parsing and document assembly.
"""

import logging
import os
from typing import Any, Dict, Optional

from ..utils import jsonDumps
from .ast_nodes import ADFDocument, ADFNode, NodeType
from .block_parser import BlockParser
from .frontmatter import strip_frontmatter
from .inline_parser import InlineParser
from .styles import TargetStyle, get_style

logger = logging.getLogger(__name__)

BASE_URL_ENV = "ATLASSIAN_BASE_URL"

INLINE_NODE_TYPES = frozenset(
    {NodeType.TEXT, NodeType.HARD_BREAK, NodeType.STATUS, NodeType.MENTION, NodeType.INLINE_CARD}
)


class MarkdownParser:
    """
    Main Markdown parser that coordinates all compilation stages.

    1. Frontmatter stripping: drop the leading ``---`` header
    2. Block Parsing: classify runs of lines into block nodes
    3. Inline Parsing: done by the block parser for every text-bearing line
    4. Assembly: wrap the blocks in the versioned ``doc`` root
    """

    def __init__(self, target: str = "jira", options: Optional[Dict[str, Any]] = None):
        """
        Initialize the Markdown parser.

        Args:
            target: Target platform name ("jira" or "confluence")
            options: Optional parser configuration (``issue_base_url``, ``style``).
                ``issue_base_url`` defaults to the ATLASSIAN_BASE_URL environment variable.
        """
        self.options = options or {}

        style = self.options.get("style")
        if isinstance(style, TargetStyle):
            self.style = style
        else:
            overrides = {}
            base_url = self.options.get("issue_base_url") or os.environ.get(BASE_URL_ENV)
            if base_url:
                overrides["issue_base_url"] = base_url
            self.style = get_style(target, **overrides)

        self.inline_parser = InlineParser(self.style)

        # Statistics and debugging
        self.parse_stats: Dict[str, int] = {}
        self._reset_stats()

    def parse(self, markdown_text: str) -> ADFDocument:
        """
        Parse Markdown text into a document tree.

        Args:
            markdown_text: The Markdown text to parse

        Returns:
            ADFDocument representing the compiled document

        Raises:
            ValueError: If input is not a string
        """
        if not isinstance(markdown_text, str):
            raise ValueError("Input must be a string")

        self._reset_stats()

        body = strip_frontmatter(markdown_text.replace("\r\n", "\n"))
        lines = body.split("\n")
        blocks = BlockParser(lines, self.style, self.inline_parser).parse()

        document = ADFDocument(self.style.version)
        document.extend(blocks)

        self.parse_stats["lines_processed"] = len(lines)
        self._collect_stats(document)
        logger.debug(f"Compiled {self.parse_stats['blocks_parsed']} blocks for target {self.style.name}")
        return document

    def parse_to_adf(self, markdown_text: str) -> Dict[str, Any]:
        """
        Parse Markdown text and return the JSON-ready document dictionary.

        Args:
            markdown_text: The Markdown text to parse

        Returns:
            Dictionary ``{"version": 1, "type": "doc", "content": [...]}``
        """
        return self.parse(markdown_text).to_dict()

    def parse_to_json(self, markdown_text: str, **dumpOptions) -> str:
        """
        Parse Markdown text and serialize the document to JSON.

        Args:
            markdown_text: The Markdown text to parse
            **dumpOptions: Passed to ``jsonDumps`` (e.g. ``indent=2``)

        Returns:
            JSON string
        """
        dumpOptions.setdefault("sort_keys", False)
        return jsonDumps(self.parse_to_adf(markdown_text), **dumpOptions)

    def _collect_stats(self, node: ADFNode, depth: int = 0) -> None:
        if node.node_type in INLINE_NODE_TYPES:
            self.parse_stats["inline_elements_parsed"] += 1
        elif node.node_type != NodeType.DOCUMENT:
            self.parse_stats["blocks_parsed"] += 1
        self.parse_stats["max_depth"] = max(self.parse_stats["max_depth"], depth)

        for child in node.children:
            self._collect_stats(child, depth + 1)

    def _reset_stats(self) -> None:
        """Reset parsing statistics."""
        self.parse_stats = {
            "lines_processed": 0,
            "blocks_parsed": 0,
            "inline_elements_parsed": 0,
            "max_depth": 0,
        }

    def get_stats(self) -> Dict[str, int]:
        """
        Get parsing statistics from the last parse operation.

        Returns:
            Dictionary containing parsing statistics
        """
        return self.parse_stats.copy()


# Convenience functions for quick parsing


def parse_markdown(text: str, target: str = "jira", **options) -> ADFDocument:
    """
    Parse Markdown text into a document tree.

    Args:
        text: Markdown text to parse
        target: Target platform name
        **options: Parser options

    Returns:
        ADFDocument representing the compiled document
    """
    return MarkdownParser(target, options).parse(text)


def markdown_to_adf(text: str, target: str = "jira", **options) -> Dict[str, Any]:
    """
    Convert Markdown text to an ADF dictionary.

    Args:
        text: Markdown text to convert
        target: Target platform name
        **options: Parser options

    Returns:
        JSON-ready document dictionary
    """
    return MarkdownParser(target, options).parse_to_adf(text)


def markdown_to_json(text: str, target: str = "jira", **options) -> str:
    """
    Convert Markdown text to serialized ADF JSON.

    Args:
        text: Markdown text to convert
        target: Target platform name
        **options: Parser options

    Returns:
        Compact JSON string
    """
    return MarkdownParser(target, options).parse_to_json(text)
