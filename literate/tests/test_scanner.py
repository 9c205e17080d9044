"""
Unit tests for scanner.py

Tests segment boundaries, documentation-block cleaning and hidden regions.
"""

import unittest
from pathlib import Path

from literate.build_config import HideConfig
from literate.config import HIDE_SCOPE_ENCLOSING_BLOCK
from literate.errors import StructuralParseError
from literate.models import SegmentKind
from literate.scanner import clean_doc_body, has_trailing_hide, reassemble, scan

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def kinds(segments):
    return [s.kind for s in segments]


def visible_code(segments):
    return [s.text for s in segments if s.kind is SegmentKind.CODE]


class TestRoundTrip(unittest.TestCase):
    """Concatenated raw segment text reproduces the input."""

    def test_fixture_files_round_trip(self):
        for path in sorted(FIXTURES_DIR.rglob("*.doc.cs")):
            with self.subTest(path=path.name):
                text = path.read_text(encoding="utf-8")
                self.assertEqual(reassemble(scan(text)), text)

    def test_mixed_line_endings_round_trip(self):
        text = "/** Title */\r\nfoo();\r\n\r\n/**\n * Body\n */  \nbar(); // hide\n"
        self.assertEqual(reassemble(scan(text)), text)

    def test_text_after_closer_round_trips(self):
        text = "/** Lead */ var x = 1;\nvar y = 2;"
        segments = scan(text)
        self.assertEqual(reassemble(segments), text)
        self.assertEqual(kinds(segments), [SegmentKind.PROSE, SegmentKind.CODE, SegmentKind.CODE])
        self.assertEqual(segments[1].text, " var x = 1;")


class TestDocumentationBlocks(unittest.TestCase):
    """Test extraction of documentation block bodies."""

    def test_single_line_block(self):
        segments = scan("/** Example. */\n")
        self.assertEqual(len(segments), 1)
        self.assertEqual(segments[0].text, "Example.")
        self.assertEqual((segments[0].line, segments[0].end_line), (1, 1))

    def test_multi_line_block_strips_stars(self):
        text = (
            "\t/**=== Working with certificates\n"
            "\t *\n"
            "\t * ==== Server Certificates\n"
            "     *   indented text\n"
            "\t */\n"
        )
        segments = scan(text)
        self.assertEqual(len(segments), 1)
        self.assertEqual(
            segments[0].text,
            "=== Working with certificates\n\n==== Server Certificates\n  indented text",
        )
        self.assertEqual(segments[0].end_line, 5)

    def test_star_without_space_is_stripped(self):
        self.assertEqual(clean_doc_body(["", "        *====", "        "]), "====")

    def test_empty_block(self):
        segments = scan("/**/\ncode();\n")
        self.assertEqual(segments[0].kind, SegmentKind.PROSE)
        self.assertEqual(segments[0].text, "")
        self.assertEqual(visible_code(segments), ["code();"])

    def test_opener_must_start_line(self):
        segments = scan('var s = "/** not docs */";\n')
        self.assertEqual(kinds(segments), [SegmentKind.CODE])

    def test_unterminated_block_raises_at_opener(self):
        with self.assertRaises(StructuralParseError) as ctx:
            scan("code();\n/**\n * never closed\n")
        self.assertEqual(ctx.exception.line, 2)

    def test_directive_lines(self):
        segments = scan("#if !DOTNETCORE\nfoo();\n#endif\n")
        self.assertEqual(
            kinds(segments),
            [SegmentKind.DIRECTIVE, SegmentKind.CODE, SegmentKind.DIRECTIVE],
        )


class TestHiddenRegions(unittest.TestCase):
    """Test hide/show markers and implicit region termination."""

    def test_explicit_region_until_resume_marker(self):
        text = "/** Example. */\n// hide\ndoCall(); // hidden-marker\n// show\n/** Done. */\n"
        segments = scan(text)
        self.assertEqual(visible_code(segments), [])
        self.assertEqual(
            kinds(segments),
            [SegmentKind.PROSE, SegmentKind.HIDDEN, SegmentKind.HIDDEN,
             SegmentKind.HIDDEN, SegmentKind.PROSE],
        )

    def test_trailing_hide_marker_hides_one_line(self):
        segments = scan("setup(); // hide\nshown();\n")
        self.assertEqual(visible_code(segments), ["shown();"])

    def test_has_trailing_hide(self):
        hide = HideConfig()
        self.assertTrue(has_trailing_hide("x(); //hide", hide))
        self.assertFalse(has_trailing_hide("// hide", hide))
        self.assertFalse(has_trailing_hide("x(); // <1> hide the thing", hide))

    def test_next_declaration_ends_at_balancing_brace(self):
        text = (
            "\t\t//hide\n"
            "\t\t[IntegrationOnly]\n"
            "\t\tpublic class Tests : Base\n"
            "\t\t{\n"
            "\t\t\tpublic Tests() { }\n"
            "\t\t}\n"
            "\t\tpublic class Visible { }\n"
        )
        segments = scan(text)
        self.assertEqual(visible_code(segments), ["\t\tpublic class Visible { }"])

    def test_next_declaration_ends_at_statement(self):
        text = "// hide\nprivate int secret;\nprivate int shown;\n"
        self.assertEqual(visible_code(scan(text)), ["private int shown;"])

    def test_enclosing_block_scope(self):
        text = (
            "public class A\n"
            "{\n"
            "    // hide\n"
            "    private int x;\n"
            "    private int y;\n"
            "}\n"
            "shown();\n"
        )
        hide = HideConfig(scope=HIDE_SCOPE_ENCLOSING_BLOCK)
        self.assertEqual(
            visible_code(scan(text, hide)),
            ["public class A", "{", "}", "shown();"],
        )

    def test_braces_in_strings_are_ignored(self):
        text = '// hide\nvar s = "{";\nvisible();\n'
        self.assertEqual(visible_code(scan(text)), ["visible();"])

    def test_conditional_branches_counted_once(self):
        text = (
            "// hide\n"
            "#if A\n"
            "public void M(int x) {\n"
            "#else\n"
            "public void M() {\n"
            "#endif\n"
            "    x();\n"
            "}\n"
            "public void Visible() { }\n"
        )
        segments = scan(text)
        self.assertEqual(visible_code(segments), ["public void Visible() { }"])
        self.assertEqual(segments[-1].kind, SegmentKind.CODE)

    def test_declaration_ending_in_branch_closes_at_endif(self):
        text = (
            "// hide\n"
            "#if A\n"
            "private int a;\n"
            "#else\n"
            "private long a;\n"
            "#endif\n"
            "shown();\n"
        )
        self.assertEqual(visible_code(scan(text)), ["shown();"])

    def test_unequal_branch_depths_raise(self):
        text = "// hide\n#if A\nvoid M() {\n#else\nvoid M();\n#endif\n}\nshown();\n"
        with self.assertRaises(StructuralParseError) as ctx:
            scan(text)
        self.assertEqual(ctx.exception.line, 6)

    def test_branch_of_outer_conditional_inside_region_raises(self):
        text = "#if A\n// hide\nvoid M() {\n#else\nvoid N() {\n#endif\n}\n"
        with self.assertRaises(StructuralParseError) as ctx:
            scan(text)
        self.assertEqual(ctx.exception.line, 4)

    def test_doc_block_inside_open_braces_raises(self):
        text = "// hide\npublic class A\n{\n/** inside */\n}\n"
        with self.assertRaises(StructuralParseError) as ctx:
            scan(text)
        self.assertEqual(ctx.exception.line, 4)

    def test_nested_hide_marker_raises(self):
        with self.assertRaises(StructuralParseError):
            scan("// hide\n// hide\nx();\n")

    def test_resume_without_region_raises(self):
        with self.assertRaises(StructuralParseError):
            scan("x();\n// show\n")

    def test_custom_markers(self):
        hide = HideConfig(markers=("begin-hidden",), resume_markers=("end-hidden",))
        text = "// begin-hidden\nsecret();\n// end-hidden\nshown();\n"
        self.assertEqual(visible_code(scan(text, hide)), ["shown();"])


if __name__ == "__main__":
    unittest.main()
