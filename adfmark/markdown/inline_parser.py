"""
Inline Parser for adfmark

This module turns a single logical line of text into an ordered list of
inline nodes: plain and marked text, status badges, user mentions and
inline cards.
"""

import re
from typing import Callable, List, Optional, Tuple

from .ast_nodes import (
    ADFHardBreak,
    ADFInlineCard,
    ADFMark,
    ADFMention,
    ADFNode,
    ADFStatus,
    ADFText,
)
from .styles import JIRA_STYLE, TargetStyle

MENTION_PLACEHOLDER_PREFIX = "__EMAIL__:"

InlineMatcher = Callable[[str, int], Tuple[Optional[ADFNode], int]]


def merge_adjacent_text_nodes(nodes: List[ADFNode]) -> List[ADFNode]:
    """
    Merge runs of adjacent unmarked text nodes into single nodes.

    The input list and its nodes are left untouched, so merging an already
    merged list yields an equivalent list.
    """
    merged: List[ADFNode] = []
    for node in nodes:
        last = merged[-1] if merged else None
        if (
            isinstance(last, ADFText)
            and isinstance(node, ADFText)
            and not last.marks
            and not node.marks
        ):
            merged[-1] = ADFText(last.text + node.text)
        else:
            merged.append(node)
    return merged


class InlineParser:
    """
    Parser for inline elements.

    Patterns are tried greedily at the current position in a fixed priority
    order; the first one that matches consumes its text. Anything unmatched
    falls back to plain text, so parsing always terminates and never drops
    characters.
    """

    def __init__(self, style: TargetStyle = JIRA_STYLE):
        self.style = style
        self._compile_patterns()
        self._matchers = self._build_matchers()

    def _compile_patterns(self) -> None:
        """Compile regex patterns used for inline parsing."""
        self.mention_pattern = re.compile(r"@([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")
        self.status_pattern = re.compile(r"\{status:([^:}]+):(\w+)\}")
        self.page_card_pattern = re.compile(r"\{pageCard:([^}]+)\}")
        self.bold_pattern = re.compile(r"\*\*([^*]+)\*\*")
        self.italic_pattern = re.compile(r"\*([^*]+)\*")
        self.code_pattern = re.compile(r"`([^`]+)`")
        self.link_pattern = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
        self.issue_key_pattern = re.compile(r"[A-Z][A-Z0-9]+-\d+")

        # Plain text runs stop at any character that may start another construct
        special_chars = r"*`\[{"
        if self.style.mentions:
            special_chars += "@"
        if self.style.issue_keys:
            special_chars += "A-Z"
        self.plain_pattern = re.compile(f"[^{special_chars}]+")

    def _build_matchers(self) -> List[InlineMatcher]:
        """Assemble the priority-ordered matcher list for the target."""
        matchers: List[InlineMatcher] = []
        if self.style.mentions:
            matchers.append(self._try_parse_mention)
        matchers.append(self._try_parse_status)
        if self.style.page_cards:
            matchers.append(self._try_parse_page_card)
        matchers.extend(
            [
                self._try_parse_bold,
                self._try_parse_italic,
                self._try_parse_code,
                self._try_parse_link,
            ]
        )
        if self.style.issue_keys:
            matchers.append(self._try_parse_issue_key)
        matchers.append(self._parse_text)
        return matchers

    def parse_inline_content(self, content: str) -> List[ADFNode]:
        """
        Parse inline content and return list of inline nodes.

        Args:
            content: One logical line with block prefixes already removed

        Returns:
            List of inline nodes covering the whole input
        """
        nodes: List[ADFNode] = []
        pos = 0

        while pos < len(content):
            for matcher in self._matchers:
                node, new_pos = matcher(content, pos)
                if node is not None:
                    nodes.append(node)
                    pos = new_pos
                    break
            else:
                # Nothing matched, consume a single character as text
                nodes.append(ADFText(content[pos]))
                pos += 1

        return merge_adjacent_text_nodes(nodes)

    def parse_lines(self, lines: List[str]) -> List[ADFNode]:
        """Parse several source lines, separated by hard breaks."""
        nodes: List[ADFNode] = []
        for index, line in enumerate(lines):
            if index > 0:
                nodes.append(ADFHardBreak())
            nodes.extend(self.parse_inline_content(line))
        return nodes

    def _try_parse_mention(self, content: str, pos: int) -> Tuple[Optional[ADFMention], int]:
        """Mentions are emitted with an email placeholder, resolved before publishing."""
        match = self.mention_pattern.match(content, pos)
        if not match:
            return None, pos
        email = match.group(1)
        return ADFMention(f"{MENTION_PLACEHOLDER_PREFIX}{email}", f"@{email}"), match.end()

    def _try_parse_status(self, content: str, pos: int) -> Tuple[Optional[ADFStatus], int]:
        match = self.status_pattern.match(content, pos)
        if not match:
            return None, pos
        return ADFStatus(match.group(1), match.group(2), self.style.status_style), match.end()

    def _try_parse_page_card(self, content: str, pos: int) -> Tuple[Optional[ADFInlineCard], int]:
        match = self.page_card_pattern.match(content, pos)
        if not match:
            return None, pos
        return ADFInlineCard(match.group(1)), match.end()

    def _try_parse_marked(
        self, pattern: re.Pattern[str], mark: ADFMark, content: str, pos: int
    ) -> Tuple[Optional[ADFText], int]:
        match = pattern.match(content, pos)
        if not match:
            return None, pos
        return ADFText(match.group(1), [mark]), match.end()

    def _try_parse_bold(self, content: str, pos: int) -> Tuple[Optional[ADFText], int]:
        return self._try_parse_marked(self.bold_pattern, ADFMark.strong(), content, pos)

    def _try_parse_italic(self, content: str, pos: int) -> Tuple[Optional[ADFText], int]:
        return self._try_parse_marked(self.italic_pattern, ADFMark.em(), content, pos)

    def _try_parse_code(self, content: str, pos: int) -> Tuple[Optional[ADFText], int]:
        return self._try_parse_marked(self.code_pattern, ADFMark.code(), content, pos)

    def _try_parse_link(self, content: str, pos: int) -> Tuple[Optional[ADFText], int]:
        match = self.link_pattern.match(content, pos)
        if not match:
            return None, pos
        return ADFText(match.group(1), [ADFMark.link(match.group(2))]), match.end()

    def _try_parse_issue_key(self, content: str, pos: int) -> Tuple[Optional[ADFInlineCard], int]:
        match = self.issue_key_pattern.match(content, pos)
        if not match:
            return None, pos
        return ADFInlineCard(self.style.issue_url(match.group(0))), match.end()

    def _parse_text(self, content: str, pos: int) -> Tuple[Optional[ADFText], int]:
        """Parse a run of plain characters up to the next special character."""
        match = self.plain_pattern.match(content, pos)
        if not match:
            return None, pos
        return ADFText(match.group(0)), match.end()
