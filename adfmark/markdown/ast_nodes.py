"""
ADF Node Classes for adfmark

This module defines the node classes that represent the structure of a
compiled document in the Atlassian Document Format (ADF) data model.
Every node knows how to serialize itself into the JSON-ready dictionary
shape expected by the target platforms.
"""

import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional


class NodeType(Enum):
    """Enumeration of all node types produced by the compiler."""

    DOCUMENT = "doc"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    TABLE = "table"
    TABLE_ROW = "tableRow"
    TABLE_HEADER = "tableHeader"
    TABLE_CELL = "tableCell"
    CODE_BLOCK = "codeBlock"
    BLOCK_QUOTE = "blockquote"
    RULE = "rule"
    EXTENSION = "extension"
    TEXT = "text"
    HARD_BREAK = "hardBreak"
    STATUS = "status"
    MENTION = "mention"
    INLINE_CARD = "inlineCard"


class MarkType(Enum):
    """Types of marks that can be applied to a text node."""

    STRONG = "strong"
    EM = "em"
    CODE = "code"
    LINK = "link"
    TEXT_COLOR = "textColor"


def new_local_id() -> str:
    """Mint a fresh random identifier for status badges and tables."""
    return str(uuid.uuid4())


class ADFMark:
    """Inline style applied to a text node."""

    def __init__(self, mark_type: MarkType, attrs: Optional[Dict[str, Any]] = None):
        self.mark_type = mark_type
        self.attrs = attrs

    @classmethod
    def strong(cls) -> "ADFMark":
        return cls(MarkType.STRONG)

    @classmethod
    def em(cls) -> "ADFMark":
        return cls(MarkType.EM)

    @classmethod
    def code(cls) -> "ADFMark":
        return cls(MarkType.CODE)

    @classmethod
    def link(cls, href: str) -> "ADFMark":
        return cls(MarkType.LINK, {"href": href})

    @classmethod
    def text_color(cls, color: str) -> "ADFMark":
        return cls(MarkType.TEXT_COLOR, {"color": color})

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.mark_type.value}
        if self.attrs is not None:
            result["attrs"] = dict(self.attrs)
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ADFMark):
            return NotImplemented
        return self.mark_type == other.mark_type and self.attrs == other.attrs

    def __repr__(self) -> str:
        return f"ADFMark(type={self.mark_type.value}, attrs={self.attrs})"


class ADFNode(ABC):
    """Base class for all document nodes."""

    def __init__(self, node_type: NodeType, attrs: Optional[Dict[str, Any]] = None):
        self.node_type = node_type
        self.attrs: Dict[str, Any] = dict(attrs) if attrs else {}
        self.children: List["ADFNode"] = []

    def add_child(self, child: "ADFNode") -> None:
        """Add a child node."""
        self.children.append(child)

    def extend(self, children: List["ADFNode"]) -> None:
        """Add several child nodes, keeping their order."""
        self.children.extend(children)

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert node to its ADF dictionary representation."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.node_type.value})"


class ADFContainer(ADFNode):
    """Node holding an ordered ``content`` array (possibly empty)."""

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.node_type.value}
        if self.attrs:
            result["attrs"] = dict(self.attrs)
        result["content"] = [child.to_dict() for child in self.children]
        return result


class ADFLeaf(ADFNode):
    """Node without content, serialized as type plus optional attrs."""

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.node_type.value}
        if self.attrs:
            result["attrs"] = dict(self.attrs)
        return result


class ADFDocument(ADFNode):
    """Root document node containing all block nodes."""

    def __init__(self, version: int = 1):
        super().__init__(NodeType.DOCUMENT)
        self.version = version

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "type": self.node_type.value,
            "content": [child.to_dict() for child in self.children],
        }


class ADFParagraph(ADFContainer):
    """Paragraph node containing inline nodes."""

    def __init__(self, attrs: Optional[Dict[str, Any]] = None):
        super().__init__(NodeType.PARAGRAPH, attrs)


class ADFHeading(ADFContainer):
    """Heading node with level (1-6)."""

    def __init__(self, level: int, attrs: Optional[Dict[str, Any]] = None):
        if not 1 <= level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {level}")
        super().__init__(NodeType.HEADING, {"level": level, **(attrs or {})})
        self.level = level


class ADFBulletList(ADFContainer):
    def __init__(self, attrs: Optional[Dict[str, Any]] = None):
        super().__init__(NodeType.BULLET_LIST, attrs)


class ADFOrderedList(ADFContainer):
    """Ordered list; the start value is always recorded as 1."""

    def __init__(self, attrs: Optional[Dict[str, Any]] = None):
        super().__init__(NodeType.ORDERED_LIST, {**(attrs or {}), "order": 1})


class ADFListItem(ADFContainer):
    def __init__(self, attrs: Optional[Dict[str, Any]] = None):
        super().__init__(NodeType.LIST_ITEM, attrs)


class ADFTable(ADFContainer):
    def __init__(self, attrs: Optional[Dict[str, Any]] = None):
        super().__init__(NodeType.TABLE, attrs)


class ADFTableRow(ADFContainer):
    def __init__(self, attrs: Optional[Dict[str, Any]] = None):
        super().__init__(NodeType.TABLE_ROW, attrs)


class ADFCell(ADFContainer):
    """Table cell base. Always serializes ``attrs``, even when empty."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "attrs": dict(self.attrs),
            "content": [child.to_dict() for child in self.children],
        }


class ADFTableHeader(ADFCell):
    def __init__(self, attrs: Optional[Dict[str, Any]] = None):
        super().__init__(NodeType.TABLE_HEADER, attrs)


class ADFTableCell(ADFCell):
    def __init__(self, attrs: Optional[Dict[str, Any]] = None):
        super().__init__(NodeType.TABLE_CELL, attrs)


class ADFCodeBlock(ADFNode):
    """Code block with optional language, payload kept verbatim."""

    def __init__(self, content: str, language: Optional[str] = None):
        super().__init__(NodeType.CODE_BLOCK, {"language": language} if language else None)
        self.content = content
        self.language = language

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.node_type.value}
        if self.attrs:
            result["attrs"] = dict(self.attrs)
        # Empty text nodes are not allowed, so an empty block has no text child
        result["content"] = [ADFText(self.content).to_dict()] if self.content else []
        return result


class ADFBlockQuote(ADFContainer):
    def __init__(self):
        super().__init__(NodeType.BLOCK_QUOTE)


class ADFRule(ADFLeaf):
    def __init__(self):
        super().__init__(NodeType.RULE)


class ADFExtension(ADFLeaf):
    """Platform macro (e.g. table of contents)."""

    def __init__(self, extension_type: str, extension_key: str, parameters: Dict[str, Any], layout: str = "default"):
        super().__init__(
            NodeType.EXTENSION,
            {
                "layout": layout,
                "extensionType": extension_type,
                "extensionKey": extension_key,
                "parameters": parameters,
                "localId": new_local_id(),
            },
        )
        self.extension_key = extension_key


class ADFText(ADFNode):
    """Text node with optional marks."""

    def __init__(self, text: str, marks: Optional[List[ADFMark]] = None):
        super().__init__(NodeType.TEXT)
        self.text = text
        self.marks: List[ADFMark] = list(marks) if marks else []

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.node_type.value, "text": self.text}
        if self.marks:
            result["marks"] = [mark.to_dict() for mark in self.marks]
        return result

    def __repr__(self) -> str:
        return f"ADFText(text={self.text!r}, marks={self.marks})"


class ADFHardBreak(ADFLeaf):
    def __init__(self):
        super().__init__(NodeType.HARD_BREAK)


class ADFStatus(ADFLeaf):
    """Status badge. Carries a process-unique ``localId``."""

    def __init__(self, text: str, color: str, style: str = ""):
        super().__init__(
            NodeType.STATUS,
            {"text": text, "color": color, "localId": new_local_id(), "style": style},
        )
        self.text = text
        self.color = color


class ADFMention(ADFLeaf):
    """User mention; ``mention_id`` may still be an unresolved placeholder."""

    def __init__(self, mention_id: str, text: str, access_level: str = ""):
        super().__init__(NodeType.MENTION, {"id": mention_id, "text": text, "accessLevel": access_level})
        self.mention_id = mention_id


class ADFInlineCard(ADFLeaf):
    def __init__(self, url: str):
        super().__init__(NodeType.INLINE_CARD, {"url": url})
        self.url = url
