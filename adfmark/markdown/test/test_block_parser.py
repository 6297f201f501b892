"""
Tests for the block parser.

This module tests block classification, the per-target heading styles,
tables, lists, block quotes and the ``:::name`` admonition blocks.
"""

import unittest

from adfmark.markdown import CONFLUENCE_STYLE, JIRA_STYLE, BlockParser
from adfmark.markdown.block_parser import MAX_QUOTE_DEPTH
from adfmark.markdown.styles import BLUE, GREEN, GREY, HEADER_BACKGROUND, WHITE


def parse_blocks(text, style=JIRA_STYLE):
    """Parse text and return the block dictionaries."""
    return [block.to_dict() for block in BlockParser(text.split("\n"), style).parse()]


def texts_of(node):
    """Collect the text of every text node below a dictionary node."""
    found = []
    if node.get("type") == "text":
        found.append(node["text"])
    for child in node.get("content", []):
        found.extend(texts_of(child))
    return found


class TestHeadings(unittest.TestCase):
    """Test heading levels and colors per target."""

    def test_jira_level_two(self):
        blocks = parse_blocks("## Title")
        self.assertEqual(
            blocks,
            [
                {
                    "type": "heading",
                    "attrs": {"level": 2},
                    "content": [
                        {
                            "type": "text",
                            "text": "Title",
                            "marks": [{"type": "strong"}, {"type": "textColor", "attrs": {"color": GREY}}],
                        }
                    ],
                }
            ],
        )

    def test_jira_level_four_is_blue(self):
        heading = parse_blocks("#### Details")[0]
        self.assertEqual(heading["attrs"]["level"], 4)
        self.assertEqual(heading["content"][0]["marks"][1]["attrs"]["color"], BLUE)

    def test_jira_out_of_range_levels_are_paragraphs(self):
        self.assertEqual(parse_blocks("# Top")[0]["type"], "paragraph")
        self.assertEqual(parse_blocks("##### Deep")[0]["type"], "paragraph")

    def test_heading_needs_text(self):
        self.assertEqual(parse_blocks("##")[0]["type"], "paragraph")

    def test_confluence_colors(self):
        def color_of(text):
            return parse_blocks(text, CONFLUENCE_STYLE)[0]["content"][0]["marks"][1]["attrs"]["color"]

        self.assertEqual(color_of("# One"), GREY)
        self.assertEqual(color_of("### Three"), GREEN)
        self.assertEqual(color_of("#### Four"), GREY)

    def test_confluence_accent_marker(self):
        heading = parse_blocks("##! Action items", CONFLUENCE_STYLE)[0]
        self.assertEqual(heading["attrs"]["level"], 2)
        self.assertEqual(heading["content"][0]["text"], "Action items")
        self.assertEqual(heading["content"][0]["marks"][1]["attrs"]["color"], BLUE)

    def test_confluence_accent_not_allowed_on_level_one(self):
        self.assertEqual(parse_blocks("#! Nope", CONFLUENCE_STYLE)[0]["type"], "paragraph")

    def test_confluence_level_five_is_not_bold(self):
        heading = parse_blocks("##### Fine print", CONFLUENCE_STYLE)[0]
        self.assertEqual(heading["content"][0]["marks"], [{"type": "textColor", "attrs": {"color": GREY}}])

    def test_confluence_headings_have_local_ids(self):
        heading = parse_blocks("## Title", CONFLUENCE_STYLE)[0]
        self.assertIn("localId", heading["attrs"])


class TestCodeBlocksAndRules(unittest.TestCase):
    def test_fenced_code_with_language(self):
        blocks = parse_blocks("```py\nx=1\n```")
        self.assertEqual(
            blocks, [{"type": "codeBlock", "attrs": {"language": "py"}, "content": [{"type": "text", "text": "x=1"}]}]
        )

    def test_code_is_verbatim(self):
        blocks = parse_blocks("```\n## not a heading\n  - **raw**\n```")
        self.assertEqual(blocks[0]["content"][0]["text"], "## not a heading\n  - **raw**")
        self.assertNotIn("attrs", blocks[0])

    def test_unterminated_fence_runs_to_end(self):
        blocks = parse_blocks("```sh\necho hi\n\n## still code")
        self.assertEqual(len(blocks), 1)
        self.assertEqual(blocks[0]["content"][0]["text"], "echo hi\n\n## still code")

    def test_empty_code_block_has_no_text_node(self):
        self.assertEqual(parse_blocks("```\n```"), [{"type": "codeBlock", "content": []}])

    def test_rules(self):
        for marker in ("---", "***", "___", "-----"):
            with self.subTest(marker=marker):
                self.assertEqual(parse_blocks(marker), [{"type": "rule"}])


class TestParagraphs(unittest.TestCase):
    def test_lines_are_joined_with_hard_breaks(self):
        paragraph = parse_blocks("line one\nline two")[0]
        self.assertEqual(
            paragraph["content"],
            [{"type": "text", "text": "line one"}, {"type": "hardBreak"}, {"type": "text", "text": "line two"}],
        )

    def test_blank_line_separates_paragraphs(self):
        blocks = parse_blocks("first\n\n\nsecond")
        self.assertEqual([block["type"] for block in blocks], ["paragraph", "paragraph"])

    def test_paragraph_stops_at_other_block(self):
        blocks = parse_blocks("intro\n## Heading\n- item")
        self.assertEqual([block["type"] for block in blocks], ["paragraph", "heading", "bulletList"])

    def test_blank_input_yields_no_blocks(self):
        self.assertEqual(parse_blocks("\n  \n"), [])

    def test_unknown_admonition_is_text(self):
        blocks = parse_blocks(":::callout\nbody\n:::")
        self.assertEqual([block["type"] for block in blocks], ["paragraph"])
        self.assertEqual(texts_of(blocks[0]), [":::callout", "body", ":::"])


class TestDispatchFallbacks(unittest.TestCase):
    def test_heading_parse_on_plain_line(self):
        block, index = BlockParser(["plain"])._parse_heading(0)
        self.assertEqual(block.to_dict(), {"type": "paragraph", "content": [{"type": "text", "text": "plain"}]})
        self.assertEqual(index, 1)

    def test_admonition_parse_on_plain_line(self):
        block, index = BlockParser(["plain"], CONFLUENCE_STYLE)._parse_admonition(0)
        self.assertEqual(block.to_dict()["type"], "paragraph")
        self.assertEqual(index, 1)


class TestBlockQuotes(unittest.TestCase):
    def test_quote_contains_blocks(self):
        quote = parse_blocks("> ## Heading\n> text")[0]
        self.assertEqual(quote["type"], "blockquote")
        self.assertEqual([child["type"] for child in quote["content"]], ["heading", "paragraph"])

    def test_nested_quotes(self):
        quote = parse_blocks("> > deep")[0]
        inner = quote["content"][0]
        self.assertEqual(inner["type"], "blockquote")
        self.assertEqual(texts_of(inner), ["deep"])

    def test_empty_quote_has_empty_paragraph(self):
        self.assertEqual(parse_blocks(">"), [{"type": "blockquote", "content": [{"type": "paragraph", "content": []}]}])

    def test_quote_ends_at_unquoted_line(self):
        blocks = parse_blocks("> quoted\nplain")
        self.assertEqual([block["type"] for block in blocks], ["blockquote", "paragraph"])

    def test_quote_depth_is_capped(self):
        node = parse_blocks(">" * 1000 + " x")[0]
        depth = 0
        while node["type"] == "blockquote":
            self.assertEqual(len(node["content"]), 1)
            node = node["content"][0]
            depth += 1
        self.assertEqual(depth, MAX_QUOTE_DEPTH)
        self.assertEqual(node["type"], "paragraph")
        self.assertEqual(texts_of(node), [">" * (1000 - MAX_QUOTE_DEPTH) + " x"])


class TestTables(unittest.TestCase):
    def test_simple_table(self):
        table = parse_blocks("| a | b |\n|---|---|\n| 1 | 2 |")[0]
        self.assertEqual(table["type"], "table")
        self.assertEqual(len(table["content"]), 2)
        header, data = table["content"]
        self.assertEqual([cell["type"] for cell in header["content"]], ["tableHeader", "tableHeader"])
        self.assertEqual([cell["type"] for cell in data["content"]], ["tableCell", "tableCell"])
        for cell in header["content"]:
            self.assertEqual(cell["content"][0]["content"][0]["marks"], [{"type": "strong"}])
        self.assertEqual(texts_of(data), ["1", "2"])

    def test_jira_table_attrs(self):
        table = parse_blocks("| a |\n| - |")[0]
        self.assertEqual(table["attrs"]["isNumberColumnEnabled"], False)
        self.assertEqual(table["attrs"]["layout"], "align-start")
        self.assertTrue(table["attrs"]["localId"])
        self.assertEqual(table["content"][0]["content"][0]["attrs"], {})

    def test_confluence_cell_attrs(self):
        table = parse_blocks("| a |\n|:-:|\n| b |", CONFLUENCE_STYLE)[0]
        self.assertEqual(table["attrs"]["layout"], "default")
        cell = table["content"][1]["content"][0]
        self.assertEqual(cell["attrs"]["colspan"], 1)
        self.assertEqual(cell["attrs"]["rowspan"], 1)
        self.assertIn("localId", cell["attrs"])

    def test_header_only_table(self):
        blocks = parse_blocks("| a | b |\n|---|---|")
        self.assertEqual(len(blocks), 1)
        self.assertEqual(len(blocks[0]["content"]), 1)

    def test_pipe_line_without_separator_is_paragraph(self):
        blocks = parse_blocks("| a | b |")
        self.assertEqual([block["type"] for block in blocks], ["paragraph"])

    def test_empty_header_cell(self):
        table = parse_blocks("| | b |\n|---|---|")[0]
        self.assertEqual(table["content"][0]["content"][0]["content"], [{"type": "paragraph", "content": []}])

    def test_data_cells_are_inline_parsed(self):
        table = parse_blocks("| k |\n|---|\n| **v** |")[0]
        text = table["content"][1]["content"][0]["content"][0]["content"][0]
        self.assertEqual(text["marks"], [{"type": "strong"}])

    def test_table_ends_at_non_row(self):
        blocks = parse_blocks("| a |\n|---|\n| 1 |\nafter")
        self.assertEqual([block["type"] for block in blocks], ["table", "paragraph"])
        self.assertEqual(len(blocks[0]["content"]), 2)


class TestLists(unittest.TestCase):
    def test_bullet_list(self):
        def item(text):
            return {"type": "listItem", "content": [{"type": "paragraph", "content": [{"type": "text", "text": text}]}]}

        blocks = parse_blocks("- a\n- b")
        self.assertEqual(blocks, [{"type": "bulletList", "content": [item("a"), item("b")]}])

    def test_star_markers(self):
        self.assertEqual(len(parse_blocks("* a\n* b")[0]["content"]), 2)

    def test_ordered_list(self):
        ordered = parse_blocks("1. first\n2. second\n10. tenth")[0]
        self.assertEqual(ordered["type"], "orderedList")
        self.assertEqual(ordered["attrs"], {"order": 1})
        self.assertEqual(texts_of(ordered), ["first", "second", "tenth"])

    def test_continuation_lines(self):
        bullet = parse_blocks("- first\n  continued here\n- second")[0]
        self.assertEqual(texts_of(bullet), ["first continued here", "second"])

    def test_jira_accepts_indented_markers(self):
        bullet = parse_blocks("- a\n  - b")[0]
        self.assertEqual(texts_of(bullet), ["a", "b"])

    def test_confluence_indented_marker_continues_item(self):
        bullet = parse_blocks("- a\n  - b", CONFLUENCE_STYLE)[0]
        self.assertEqual(texts_of(bullet), ["a - b"])

    def test_confluence_list_nodes_have_local_ids(self):
        bullet = parse_blocks("- a", CONFLUENCE_STYLE)[0]
        self.assertIn("localId", bullet["attrs"])
        self.assertIn("localId", bullet["content"][0]["attrs"])

    def test_list_item_inline_marks(self):
        bullet = parse_blocks("- **done** {status:OK:green}")[0]
        paragraph = bullet["content"][0]["content"][0]
        self.assertEqual([node["type"] for node in paragraph["content"]], ["text", "text", "status"])


class TestJiraContextBlock(unittest.TestCase):
    def test_context_block(self):
        table = parse_blocks(":::context\nFirst line\nsecond line\n\nNext paragraph\n:::")[0]
        self.assertEqual(table["type"], "table")
        self.assertEqual(len(table["content"]), 1)
        cell = table["content"][0]["content"][0]
        self.assertEqual(cell["type"], "tableCell")

        badge, first, second = cell["content"]
        self.assertEqual(badge["content"][0]["type"], "status")
        self.assertEqual(badge["content"][0]["attrs"]["text"], "CONTEXT")
        self.assertEqual(badge["content"][0]["attrs"]["color"], "purple")
        self.assertEqual(badge["content"][1], {"type": "text", "text": " "})
        self.assertEqual(texts_of(first), ["First line second line"])
        self.assertEqual(texts_of(second), ["Next paragraph"])

    def test_context_block_followed_by_content(self):
        blocks = parse_blocks(":::context\nbody\n:::\nafter")
        self.assertEqual([block["type"] for block in blocks], ["table", "paragraph"])

    def test_unterminated_context_runs_to_end(self):
        blocks = parse_blocks(":::context\nbody\n## not a heading")
        self.assertEqual(len(blocks), 1)


class TestConfluenceAdmonitions(unittest.TestCase):
    def test_callout_with_title_and_color(self):
        table = parse_blocks(':::callout title="Heads up" color=red\nBe careful.\n:::', CONFLUENCE_STYLE)[0]
        cell = table["content"][0]["content"][0]
        status = cell["content"][0]["content"][0]
        self.assertEqual(status["attrs"]["text"], "Heads up")
        self.assertEqual(status["attrs"]["color"], "red")
        self.assertEqual(status["attrs"]["style"], "bold")
        self.assertEqual(texts_of(cell["content"][1]), ["Be careful."])

    def test_callout_defaults(self):
        table = parse_blocks(":::callout\ntext\n:::", CONFLUENCE_STYLE)[0]
        status = table["content"][0]["content"][0]["content"][0]["content"][0]
        self.assertEqual(status["attrs"]["text"], "NOTE")
        self.assertEqual(status["attrs"]["color"], "blue")

    def test_metadata_table(self):
        table = parse_blocks(':::metadata owner="Jane Doe" date=2024-05-01', CONFLUENCE_STYLE)[0]
        self.assertEqual(len(table["content"]), 2)
        header, value = table["content"][0]["content"]
        self.assertEqual(header["type"], "tableHeader")
        self.assertEqual(header["attrs"]["background"], HEADER_BACKGROUND)
        label = header["content"][0]["content"][0]
        self.assertEqual(label["text"], "Content Owner")
        self.assertEqual(label["marks"], [{"type": "textColor", "attrs": {"color": WHITE}}])
        self.assertEqual(texts_of(value), ["Jane Doe"])
        self.assertEqual(texts_of(table["content"][1]), ["Last Update", "2024-05-01"])

    def test_metadata_skips_missing_fields(self):
        table = parse_blocks(":::metadata owner=jane:", CONFLUENCE_STYLE)[0]
        self.assertEqual(len(table["content"]), 1)
        self.assertEqual(texts_of(table), ["Content Owner", "jane"])

    def test_metadata_without_fields_is_text(self):
        for line in (":::metadata :::", ':::metadata owner="" date=""'):
            with self.subTest(line=line):
                with self.assertLogs("adfmark.markdown.block_parser", level="WARNING"):
                    blocks = parse_blocks(line, CONFLUENCE_STYLE)
                self.assertEqual([block["type"] for block in blocks], ["paragraph"])
                self.assertEqual(texts_of(blocks[0]), [line])

    def test_metadata_has_no_body(self):
        blocks = parse_blocks(":::metadata owner=jane\nplain text", CONFLUENCE_STYLE)
        self.assertEqual([block["type"] for block in blocks], ["table", "paragraph"])

    def test_toc_macro(self):
        extension = parse_blocks(":::toc maxLevel=3", CONFLUENCE_STYLE)[0]
        self.assertEqual(extension["type"], "extension")
        self.assertEqual(extension["attrs"]["extensionKey"], "toc")
        self.assertEqual(extension["attrs"]["parameters"]["macroParams"]["maxLevel"], {"value": "3"})

    def test_toc_invalid_level_falls_back(self):
        extension = parse_blocks(":::toc maxLevel=deep", CONFLUENCE_STYLE)[0]
        self.assertEqual(extension["attrs"]["parameters"]["macroParams"]["maxLevel"], {"value": "2"})

    def test_context_is_not_a_confluence_block(self):
        blocks = parse_blocks(":::context", CONFLUENCE_STYLE)
        self.assertEqual(blocks[0]["type"], "paragraph")


if __name__ == "__main__":
    unittest.main()
