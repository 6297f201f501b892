"""
Target platform styles for adfmark.

Both target platforms share one grammar. Everything that differs between
them (heading colors, admonition vocabulary, inline extensions, per-node
identifiers, table attributes) lives in a small ``TargetStyle`` table.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional

GREY = "#97a0af"
BLUE = "#0747a6"
GREEN = "#003300"
HEADER_BACKGROUND = "#42526e"
WHITE = "#FFFFFF"

DEFAULT_ISSUE_BASE_URL = "https://atlassian.net"


@dataclass(frozen=True)
class TargetStyle:
    """Styling constants for one target platform.

    Attributes:
        name: Target name ("jira" or "confluence")
        version: Document version written into the root node
        min_heading_level: Smallest ``#`` run recognized as a heading
        max_heading_level: Largest ``#`` run recognized as a heading
        heading_colors: Heading level to text color table
        unbolded_heading_levels: Levels rendered without the strong mark
        accent_marker: Character after the ``#`` run selecting the accent color
        accent_levels: Levels for which the accent marker is recognized
        accent_color: Color used for accented headings
        admonitions: Names of ``:::name`` blocks this target understands
        mentions: Whether ``@user@example.com`` becomes a mention node
        issue_keys: Whether bare ``PROJ-123`` keys become inline cards
        page_cards: Whether ``{pageCard:url}`` becomes an inline card
        local_ids: Whether paragraphs, headings, lists and cells get a localId
        status_style: ``style`` attribute of status badges
        table_attrs: Static attributes of table nodes
        cell_attrs: Static attributes of table header/data cells
        indented_list_markers: Whether list markers may be preceded by whitespace
        issue_base_url: Site URL used to build issue links
    """

    name: str
    version: int = 1
    min_heading_level: int = 1
    max_heading_level: int = 6
    heading_colors: Mapping[int, str] = field(default_factory=dict)
    unbolded_heading_levels: FrozenSet[int] = frozenset()
    accent_marker: Optional[str] = None
    accent_levels: FrozenSet[int] = frozenset()
    accent_color: str = BLUE
    admonitions: FrozenSet[str] = frozenset()
    mentions: bool = False
    issue_keys: bool = False
    page_cards: bool = False
    local_ids: bool = False
    status_style: str = ""
    table_attrs: Mapping[str, Any] = field(default_factory=dict)
    cell_attrs: Mapping[str, Any] = field(default_factory=dict)
    indented_list_markers: bool = False
    issue_base_url: str = DEFAULT_ISSUE_BASE_URL

    def heading_color(self, level: int, accent: bool = False) -> str:
        """Resolve the display color for a heading."""
        if accent:
            return self.accent_color
        return self.heading_colors.get(level, GREY)

    def is_heading_bold(self, level: int) -> bool:
        return level not in self.unbolded_heading_levels

    def issue_url(self, key: str) -> str:
        return f"{self.issue_base_url.rstrip('/')}/browse/{key}"


JIRA_STYLE = TargetStyle(
    name="jira",
    min_heading_level=2,
    max_heading_level=4,
    heading_colors={2: GREY, 3: GREY, 4: BLUE},
    admonitions=frozenset({"context"}),
    mentions=True,
    issue_keys=True,
    status_style="",
    table_attrs={"isNumberColumnEnabled": False, "layout": "align-start"},
    cell_attrs={},
    indented_list_markers=True,
)

CONFLUENCE_STYLE = TargetStyle(
    name="confluence",
    min_heading_level=1,
    max_heading_level=5,
    heading_colors={1: GREY, 2: GREY, 3: GREEN, 4: GREY, 5: GREY},
    unbolded_heading_levels=frozenset({5}),
    accent_marker="!",
    accent_levels=frozenset({2, 3, 4}),
    accent_color=BLUE,
    admonitions=frozenset({"metadata", "toc", "callout"}),
    page_cards=True,
    local_ids=True,
    status_style="bold",
    table_attrs={"layout": "default"},
    cell_attrs={"colspan": 1, "rowspan": 1},
)

STYLES: Dict[str, TargetStyle] = {
    JIRA_STYLE.name: JIRA_STYLE,
    CONFLUENCE_STYLE.name: CONFLUENCE_STYLE,
}


def get_style(name: str, **overrides: Any) -> TargetStyle:
    """
    Look up the style table for a target platform.

    Args:
        name: Target name
        **overrides: Field values replacing the built-in ones (e.g. issue_base_url)

    Returns:
        TargetStyle for the target

    Raises:
        ValueError: If the target is unknown
    """
    style = STYLES.get(name.lower())
    if style is None:
        raise ValueError(f"Unknown target '{name}', expected one of: {', '.join(sorted(STYLES))}")
    if overrides:
        style = dataclasses.replace(style, **overrides)
    return style
