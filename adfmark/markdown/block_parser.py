"""
Block Parser for adfmark

This module walks the input line by line and builds block nodes: headings,
paragraphs, code blocks, lists, tables, block quotes, rules and the
``:::name`` admonition blocks of each target platform.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from .ast_nodes import (
    ADFBlockQuote,
    ADFBulletList,
    ADFCodeBlock,
    ADFExtension,
    ADFHeading,
    ADFListItem,
    ADFMark,
    ADFNode,
    ADFOrderedList,
    ADFParagraph,
    ADFRule,
    ADFStatus,
    ADFTable,
    ADFTableCell,
    ADFTableHeader,
    ADFTableRow,
    ADFText,
    new_local_id,
)
from .inline_parser import InlineParser
from .styles import HEADER_BACKGROUND, JIRA_STYLE, WHITE, TargetStyle

logger = logging.getLogger(__name__)

# Block kinds, in the order they are checked at every line
CODE_FENCE = "code_fence"
ADMONITION = "admonition"
RULE = "rule"
BLOCK_QUOTE = "block_quote"
HEADING = "heading"
TABLE = "table"
BULLET_LIST = "bullet_list"
ORDERED_LIST = "ordered_list"
BLANK = "blank"
PARAGRAPH = "paragraph"

ADMONITION_CLOSE = ":::"
# Deeper `>` markers are kept as literal text
MAX_QUOTE_DEPTH = 32
TOC_EXTENSION_TYPE = "com.atlassian.confluence.macro.core"

BlockResult = Tuple[Optional[ADFNode], int]


class BlockParser:
    """
    Parser for block-level elements.

    Works on a list of source lines and returns the list of block nodes.
    The parser holds no state shared between documents, so block quotes are
    handled by running a fresh parser over the dequoted lines, one level
    deeper, up to MAX_QUOTE_DEPTH.
    """

    def __init__(
        self,
        lines: List[str],
        style: TargetStyle = JIRA_STYLE,
        inline_parser: Optional[InlineParser] = None,
        depth: int = 0,
    ):
        self.lines = lines
        self.depth = depth
        self.style = style
        self.inline_parser = inline_parser or InlineParser(style)
        self._compile_patterns()

        # Admonition registry: name -> (builder, has_body)
        registry: Dict[str, Tuple[Callable[[Dict[str, str], List[str]], Optional[ADFNode]], bool]] = {
            "context": (self._build_context_block, True),
            "metadata": (self._build_metadata_table, False),
            "toc": (self._build_toc_macro, False),
            "callout": (self._build_callout_box, True),
        }
        self.admonitions = {name: entry for name, entry in registry.items() if name in style.admonitions}

    def _compile_patterns(self) -> None:
        """Compile regex patterns used for block classification."""
        self.fence_open_pattern = re.compile(r"^```([\w+#.-]*)\s*$")
        self.fence_close_pattern = re.compile(r"^```\s*$")
        self.admonition_pattern = re.compile(r"^\s*:::(\w+)(.*)$")
        self.admonition_attr_pattern = re.compile(r'(\w+)=(?:"([^"]*)"|([^\s"]+))')
        self.rule_pattern = re.compile(r"^\s*(-{3,}|\*{3,}|_{3,})\s*$")
        self.quote_pattern = re.compile(r"^>")
        self.dequote_pattern = re.compile(r"^> ?")

        min_level, max_level = self.style.min_heading_level, self.style.max_heading_level
        accent = re.escape(self.style.accent_marker) if self.style.accent_marker else None
        accent_group = f"({accent})?" if accent else "()"
        self.heading_pattern = re.compile(rf"^(#{{{min_level},{max_level}}}){accent_group}\s+(\S.*)$")

        self.table_row_pattern = re.compile(r"^\s*\|.*\|\s*$")
        self.table_separator_pattern = re.compile(r"^\s*\|(\s*:?-+:?\s*\|)+\s*$")

        indent = r"\s*" if self.style.indented_list_markers else ""
        self.bullet_pattern = re.compile(rf"^{indent}[-*]\s+(.*)$")
        self.ordered_pattern = re.compile(rf"^{indent}\d+\.\s+(.*)$")
        self.continuation_pattern = re.compile(r"^\s+\S")

    def parse(self) -> List[ADFNode]:
        """
        Parse lines into block nodes.

        Returns:
            List of block nodes in source order.
        """
        blocks: List[ADFNode] = []
        index = 0

        while index < len(self.lines):
            block, index = self._parse_block(index)
            if block is not None:
                blocks.append(block)

        return blocks

    def _classify(self, index: int) -> str:
        """Determine which kind of block starts at the given line."""
        line = self.lines[index]

        if self.fence_open_pattern.match(line):
            return CODE_FENCE
        if self._admonition_at(line) is not None:
            return ADMONITION
        if self.rule_pattern.match(line):
            return RULE
        if self.depth < MAX_QUOTE_DEPTH and self.quote_pattern.match(line):
            return BLOCK_QUOTE
        if self._heading_at(line) is not None:
            return HEADING
        if self._is_table_start(index):
            return TABLE
        if self.bullet_pattern.match(line):
            return BULLET_LIST
        if self.ordered_pattern.match(line):
            return ORDERED_LIST
        if not line.strip():
            return BLANK
        return PARAGRAPH

    def _parse_block(self, index: int) -> BlockResult:
        """Parse a single block element starting at the given line."""
        kind = self._classify(index)

        if kind == CODE_FENCE:
            return self._parse_fenced_code_block(index)
        if kind == ADMONITION:
            return self._parse_admonition(index)
        if kind == RULE:
            return ADFRule(), index + 1
        if kind == BLOCK_QUOTE:
            return self._parse_block_quote(index)
        if kind == HEADING:
            return self._parse_heading(index)
        if kind == TABLE:
            return self._parse_table(index)
        if kind == BULLET_LIST:
            return self._parse_list(index, ordered=False)
        if kind == ORDERED_LIST:
            return self._parse_list(index, ordered=True)
        if kind == BLANK:
            return None, index + 1

        # Default to paragraph
        return self._parse_paragraph(index)

    # Node factories

    def _local_id_attrs(self, base: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Static attributes plus a fresh localId when the target uses them."""
        attrs = dict(base or {})
        if self.style.local_ids:
            attrs["localId"] = new_local_id()
        return attrs

    def _paragraph(self, inline_nodes: List[ADFNode]) -> ADFParagraph:
        paragraph = ADFParagraph(self._local_id_attrs())
        paragraph.extend(inline_nodes)
        return paragraph

    def _text_paragraph(self, text: str) -> ADFParagraph:
        """Paragraph from one inline-parsed line; blank text gives an empty paragraph."""
        if not text.strip():
            return self._paragraph([])
        return self._paragraph(self.inline_parser.parse_inline_content(text))

    def _table(self) -> ADFTable:
        # Tables carry an identifier on every target
        return ADFTable({**self.style.table_attrs, "localId": new_local_id()})

    def _table_row(self) -> ADFTableRow:
        return ADFTableRow(self._local_id_attrs())

    def _single_cell_table(self, content: List[ADFNode]) -> ADFTable:
        cell = ADFTableCell(self._local_id_attrs(self.style.cell_attrs))
        cell.extend(content)
        row = self._table_row()
        row.add_child(cell)
        table = self._table()
        table.add_child(row)
        return table

    # Code blocks

    def _parse_fenced_code_block(self, index: int) -> BlockResult:
        """Parse a fenced code block. Unterminated fences run to end of input."""
        match = self.fence_open_pattern.match(self.lines[index])
        language = (match.group(1) or None) if match else None
        index += 1

        code_lines: List[str] = []
        while index < len(self.lines) and not self.fence_close_pattern.match(self.lines[index]):
            code_lines.append(self.lines[index])
            index += 1

        # Skip closing fence
        index += 1
        return ADFCodeBlock("\n".join(code_lines), language), index

    # Admonitions

    def _admonition_at(self, line: str) -> Optional[Tuple[str, str]]:
        match = self.admonition_pattern.match(line)
        if not match or match.group(1) not in self.admonitions:
            return None
        return match.group(1), match.group(2)

    def _parse_admonition_attrs(self, text: str) -> Dict[str, str]:
        """Parse ``key="value"`` and ``key=value`` pairs from an opening marker line."""
        attrs: Dict[str, str] = {}
        for match in self.admonition_attr_pattern.finditer(text):
            key, quoted, bare = match.group(1), match.group(2), match.group(3)
            attrs[key] = quoted if quoted is not None else bare.rstrip(":")
        return attrs

    def _split_paragraphs(self, lines: List[str]) -> List[str]:
        """Partition lines on blank lines, collapsing each chunk to one line."""
        paragraphs: List[str] = []
        chunk: List[str] = []
        for line in lines + [""]:
            if line.strip():
                chunk.append(line.strip())
            elif chunk:
                paragraphs.append(" ".join(chunk))
                chunk = []
        return paragraphs

    def _parse_admonition(self, index: int) -> BlockResult:
        """Parse a ``:::name`` block. Unterminated bodies run to end of input."""
        marker = self.lines[index]
        found = self._admonition_at(marker)
        if found is None:
            return self._parse_paragraph(index)
        name, rest = found
        builder, has_body = self.admonitions[name]
        attrs = self._parse_admonition_attrs(rest)
        index += 1

        body: List[str] = []
        if has_body:
            while index < len(self.lines) and self.lines[index].strip() != ADMONITION_CLOSE:
                body.append(self.lines[index])
                index += 1
            # Skip closing marker
            index += 1

        node = builder(attrs, body)
        if node is None:
            logger.warning(f"Malformed :::{name} block, keeping it as text: {marker.strip()}")
            return self._text_paragraph(marker.strip()), index

        logger.debug(f"Parsed :::{name} block with attrs {attrs}")
        return node, index

    def _badge_paragraph(self, text: str, color: str) -> ADFParagraph:
        return self._paragraph([ADFStatus(text, color, self.style.status_style), ADFText(" ")])

    def _build_context_block(self, attrs: Dict[str, str], body: List[str]) -> ADFNode:
        """Single-cell table led by a purple CONTEXT badge."""
        content: List[ADFNode] = [self._badge_paragraph("CONTEXT", attrs.get("color", "purple"))]
        content.extend(self._text_paragraph(text) for text in self._split_paragraphs(body))
        return self._single_cell_table(content)

    def _build_callout_box(self, attrs: Dict[str, str], body: List[str]) -> ADFNode:
        """Single-cell table led by a badge carrying the callout title."""
        content: List[ADFNode] = [self._badge_paragraph(attrs.get("title", "NOTE"), attrs.get("color", "blue"))]
        content.extend(self._text_paragraph(text) for text in self._split_paragraphs(body))
        return self._single_cell_table(content)

    def _build_metadata_table(self, attrs: Dict[str, str], body: List[str]) -> Optional[ADFNode]:
        """Owner / last update key-value table, or None when neither field is set."""
        if not attrs.get("owner") and not attrs.get("date"):
            return None
        table = self._table()
        for key, label in (("owner", "Content Owner"), ("date", "Last Update")):
            value = attrs.get(key)
            if not value:
                continue
            header = ADFTableHeader(self._local_id_attrs({**self.style.cell_attrs, "background": HEADER_BACKGROUND}))
            header.add_child(self._paragraph([ADFText(label, [ADFMark.text_color(WHITE)])]))
            cell = ADFTableCell(self._local_id_attrs(self.style.cell_attrs))
            cell.add_child(self._text_paragraph(value))
            row = self._table_row()
            row.add_child(header)
            row.add_child(cell)
            table.add_child(row)
        return table

    def _build_toc_macro(self, attrs: Dict[str, str], body: List[str]) -> ADFNode:
        """Table of contents macro; ``maxLevel`` defaults to 2."""
        max_level = attrs.get("maxLevel", "2")
        if not max_level.isdigit():
            logger.warning(f"Invalid toc maxLevel '{max_level}', using 2")
            max_level = "2"
        parameters = {
            "macroParams": {"maxLevel": {"value": str(int(max_level))}},
            "macroMetadata": {
                "macroId": {"value": new_local_id()},
                "schemaVersion": {"value": "1"},
                "title": "Table of Contents",
            },
        }
        return ADFExtension(TOC_EXTENSION_TYPE, "toc", parameters)

    # Block quotes

    def _parse_block_quote(self, index: int) -> BlockResult:
        """Parse a block quote by recursively parsing its dequoted lines."""
        quoted: List[str] = []
        while index < len(self.lines) and self.quote_pattern.match(self.lines[index]):
            quoted.append(self.dequote_pattern.sub("", self.lines[index], count=1))
            index += 1

        block_quote = ADFBlockQuote()
        nested = BlockParser(quoted, self.style, self.inline_parser, self.depth + 1).parse()
        block_quote.extend(nested if nested else [self._paragraph([])])
        return block_quote, index

    # Headings

    def _heading_at(self, line: str) -> Optional[Tuple[int, bool, str]]:
        match = self.heading_pattern.match(line)
        if not match:
            return None
        level = len(match.group(1))
        accent = bool(match.group(2))
        if accent and level not in self.style.accent_levels:
            return None
        return level, accent, match.group(3).strip()

    def _parse_heading(self, index: int) -> BlockResult:
        found = self._heading_at(self.lines[index])
        if found is None:
            return self._parse_paragraph(index)
        level, accent, text = found

        marks = [ADFMark.text_color(self.style.heading_color(level, accent))]
        if self.style.is_heading_bold(level):
            marks.insert(0, ADFMark.strong())

        heading = ADFHeading(level, self._local_id_attrs())
        heading.add_child(ADFText(text, marks))
        return heading, index + 1

    # Tables

    def _is_table_start(self, index: int) -> bool:
        """A table needs a pipe-delimited header followed by a separator line."""
        if index + 1 >= len(self.lines):
            return False
        return bool(
            self.table_row_pattern.match(self.lines[index])
            and self.table_separator_pattern.match(self.lines[index + 1])
        )

    def _split_row(self, line: str) -> List[str]:
        """Split a table row, dropping the empty fields outside the bounding pipes."""
        return [cell.strip() for cell in line.strip().split("|")[1:-1]]

    def _parse_table(self, index: int) -> BlockResult:
        headers = self._split_row(self.lines[index])
        index += 2

        table = self._table()
        header_row = self._table_row()
        for text in headers:
            cell = ADFTableHeader(self._local_id_attrs(self.style.cell_attrs))
            cell.add_child(self._paragraph([ADFText(text, [ADFMark.strong()])] if text else []))
            header_row.add_child(cell)
        table.add_child(header_row)

        while index < len(self.lines) and self.table_row_pattern.match(self.lines[index]):
            row = self._table_row()
            for text in self._split_row(self.lines[index]):
                cell = ADFTableCell(self._local_id_attrs(self.style.cell_attrs))
                cell.add_child(self._text_paragraph(text))
                row.add_child(cell)
            table.add_child(row)
            index += 1

        return table, index

    # Lists

    def _parse_list(self, index: int, ordered: bool) -> BlockResult:
        """Parse a list; indented lines continue the previous item's text."""
        item_pattern = self.ordered_pattern if ordered else self.bullet_pattern
        items: List[List[str]] = []

        while index < len(self.lines):
            line = self.lines[index]
            match = item_pattern.match(line)
            if match:
                items.append([match.group(1)])
            elif items and self.continuation_pattern.match(line):
                items[-1].append(line.strip())
            else:
                break
            index += 1

        list_node = ADFOrderedList(self._local_id_attrs()) if ordered else ADFBulletList(self._local_id_attrs())
        for item in items:
            list_item = ADFListItem(self._local_id_attrs())
            list_item.add_child(self._text_paragraph(" ".join(item)))
            list_node.add_child(list_item)
        return list_node, index

    # Paragraphs

    def _parse_paragraph(self, index: int) -> BlockResult:
        """Collect lines until a blank line or another block, joined with hard breaks."""
        paragraph_lines = [self.lines[index]]
        index += 1
        while index < len(self.lines) and self._classify(index) == PARAGRAPH:
            paragraph_lines.append(self.lines[index])
            index += 1

        return self._paragraph(self.inline_parser.parse_lines(paragraph_lines)), index
