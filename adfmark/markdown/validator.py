"""
Structural validator for ADF documents.

Checks arbitrary candidate documents (compiler output, hand-edited files,
documents downloaded from a platform) against the invariants of the data
model before they are sent anywhere. All checks run independently and
every violation is reported; nothing is short-circuited once the
top-level shape is sound.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1

KNOWN_NODE_TYPES: FrozenSet[str] = frozenset(
    {
        "doc",
        "paragraph",
        "heading",
        "text",
        "bulletList",
        "orderedList",
        "listItem",
        "table",
        "tableRow",
        "tableCell",
        "tableHeader",
        "codeBlock",
        "blockquote",
        "rule",
        "hardBreak",
        "panel",
        "expand",
        "nestedExpand",
        "status",
        "emoji",
        "mention",
        "date",
        "inlineCard",
        "blockCard",
        "embedCard",
        "mediaGroup",
        "mediaSingle",
        "media",
        "layoutSection",
        "layoutColumn",
        "taskList",
        "taskItem",
        "decisionList",
        "decisionItem",
        "extension",
        "bodiedExtension",
        "inlineExtension",
        "placeholder",
        "unsupportedBlock",
        "unsupportedInline",
    }
)

KNOWN_MARK_TYPES: FrozenSet[str] = frozenset(
    {
        "strong",
        "em",
        "code",
        "link",
        "textColor",
        "backgroundColor",
        "strike",
        "underline",
        "subsup",
        "alignment",
        "indentation",
        "annotation",
        "border",
        "breakout",
        "dataConsumer",
        "fragment",
    }
)


@dataclass
class ValidationResult:
    """Outcome of validating one document.

    Attributes:
        valid: True when no violation was found
        errors: Human-readable violations, in discovery order
        node_count: Number of recognized nodes reachable through ``content``
    """

    valid: bool
    errors: List[str] = field(default_factory=list)
    node_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        if self.valid:
            return {"valid": True, "errors": [], "node_count": self.node_count}
        return {"valid": False, "errors": list(self.errors)}


def _describe_type(value: Any) -> str:
    """Name of a value's JSON type, for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class _WalkState:
    def __init__(self) -> None:
        self.node_count = 0
        self.status_ids: Set[str] = set()


class DocumentValidator:
    """Walks a candidate document and accumulates violations."""

    def __init__(
        self,
        expected_version: int = DOCUMENT_VERSION,
        node_types: FrozenSet[str] = KNOWN_NODE_TYPES,
        mark_types: FrozenSet[str] = KNOWN_MARK_TYPES,
    ):
        self.expected_version = expected_version
        self.node_types = node_types
        self.mark_types = mark_types

    def validate(self, candidate: Any) -> ValidationResult:
        """
        Validate a candidate document.

        Args:
            candidate: JSON text, or an already decoded JSON value

        Returns:
            ValidationResult with every violation found
        """
        if isinstance(candidate, (str, bytes, bytearray)):
            try:
                candidate = json.loads(candidate)
            except ValueError as e:
                return ValidationResult(False, [f"Invalid JSON syntax: {e}"])

        if not isinstance(candidate, dict):
            return ValidationResult(False, [f"Document root must be an object (got: {_describe_type(candidate)})"])

        errors: List[str] = []
        self._check_root(candidate, errors)

        state = _WalkState()
        content = candidate.get("content")
        if isinstance(content, list):
            state.node_count = 1
            self._walk_content(content, "content", errors, state)

        result = ValidationResult(not errors, errors, state.node_count)
        logger.debug(f"Validated document: valid={result.valid}, {len(errors)} errors, {state.node_count} nodes")
        return result

    def _check_root(self, root: Dict[str, Any], errors: List[str]) -> None:
        version = root.get("version")
        if type(version) is not int or version != self.expected_version:
            shown = "null" if version is None else json.dumps(version)
            errors.append(f"Missing or invalid 'version' (expected {self.expected_version}, got: {shown})")

        doc_type = root.get("type")
        if doc_type != "doc":
            shown = "null" if doc_type is None else json.dumps(doc_type)
            errors.append(f"Missing or invalid 'type' (expected 'doc', got: {shown})")

        if "content" not in root:
            errors.append("Missing 'content' array")
        elif not isinstance(root["content"], list):
            errors.append(f"'content' must be an array (got: {_describe_type(root['content'])})")

    def _walk_content(self, content: List[Any], path: str, errors: List[str], state: "_WalkState") -> None:
        """Check every node below a content array, depth first in document order."""
        stack: List[Tuple[Any, str]] = []
        self._push_children(stack, content, path)
        while stack:
            node, node_path = stack.pop()
            children = self._check_node(node, node_path, errors, state)
            self._push_children(stack, children, f"{node_path}.content")

    @staticmethod
    def _push_children(stack: List[Tuple[Any, str]], children: List[Any], path: str) -> None:
        # Reversed so the first child is popped first
        for index in range(len(children) - 1, -1, -1):
            stack.append((children[index], f"{path}[{index}]"))

    def _check_node(self, node: Any, path: str, errors: List[str], state: "_WalkState") -> List[Any]:
        """Check one node and return its children."""
        if not isinstance(node, dict):
            errors.append(f"Node at {path} must be an object (got: {_describe_type(node)})")
            return []

        node_type = node.get("type")
        if node_type is not None:
            if isinstance(node_type, str) and node_type in self.node_types:
                state.node_count += 1
            else:
                errors.append(f"Unknown node type '{node_type}' at {path}")

        if node_type == "status":
            self._check_status(node, path, errors, state)

        marks = node.get("marks")
        if marks is not None:
            self._check_marks(marks, path, errors)

        content = node.get("content", [])
        if not isinstance(content, list):
            errors.append(f"'content' at {path} must be an array (got: {_describe_type(content)})")
            return []
        return content

    def _check_status(self, node: Dict[str, Any], path: str, errors: List[str], state: "_WalkState") -> None:
        attrs = node.get("attrs")
        local_id = attrs.get("localId") if isinstance(attrs, dict) else None
        if not isinstance(local_id, str) or not local_id:
            errors.append(f"Status node at {path} missing localId")
            return
        if local_id in state.status_ids:
            errors.append(f"Status node at {path} reuses localId '{local_id}'")
        state.status_ids.add(local_id)

    def _check_marks(self, marks: Any, path: str, errors: List[str]) -> None:
        if not isinstance(marks, list):
            errors.append(f"'marks' at {path} must be an array (got: {_describe_type(marks)})")
            return
        for index, mark in enumerate(marks):
            mark_type = mark.get("type") if isinstance(mark, dict) else None
            if not isinstance(mark_type, str) or mark_type not in self.mark_types:
                errors.append(f"Unknown mark type '{mark_type}' at {path}.marks[{index}]")


def validate_document(candidate: Any, expected_version: Optional[int] = None) -> ValidationResult:
    """
    Validate a candidate ADF document.

    Args:
        candidate: JSON text, or an already decoded JSON value
        expected_version: Required root version (default 1)

    Returns:
        ValidationResult
    """
    validator = DocumentValidator(DOCUMENT_VERSION if expected_version is None else expected_version)
    return validator.validate(candidate)
