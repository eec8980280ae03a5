"""Tests for pi.mdterm.lists -- points, indentation and nested-list repair."""

from __future__ import annotations

from pi.mdterm.lists import (
    BULLET_MARKER,
    fix_nested_lists,
    format_list,
    indent_lines,
    indentify,
    is_pointed_line,
    section,
)

TAB = "    "


def _items(*texts: str) -> str:
    return "".join("\n" + BULLET_MARKER + text for text in texts)


# ---------------------------------------------------------------------------
# format_list
# ---------------------------------------------------------------------------


class TestFormatList:
    def test_bullets(self) -> None:
        assert format_list(_items("a", "b"), False, TAB) == "* a\n* b"

    def test_numbers(self) -> None:
        assert format_list(_items("a", "b", "c"), True, TAB) == "1. a\n2. b\n3. c"

    def test_continuation_lines_are_padded(self) -> None:
        assert format_list(_items("a\nmore"), False, TAB) == "* a\n  more"

    def test_continuation_in_ordered_list(self) -> None:
        assert format_list(_items("a", "b\nmore"), True, TAB) == "1. a\n2. b\n   more"

    def test_pointed_lines_are_left_alone(self) -> None:
        body = _items("a\n" + TAB + "* sub")
        assert format_list(body, False, TAB) == "* a\n" + TAB + "* sub"

    def test_pointed_lines_keep_their_numbers(self) -> None:
        body = _items("a\n" + TAB + "1. sub", "b")
        assert format_list(body, True, TAB) == "1. a\n" + TAB + "1. sub\n2. b"

    def test_blank_lines_are_dropped(self) -> None:
        assert format_list(_items("a\n\nb"), False, TAB) == "* a\n  b"


# ---------------------------------------------------------------------------
# indentation helpers
# ---------------------------------------------------------------------------


class TestIndentation:
    def test_indent_lines_skips_empty_lines(self) -> None:
        assert indent_lines(TAB, "a\n\nb") == TAB + "a\n\n" + TAB + "b"

    def test_indentify_includes_empty_lines(self) -> None:
        assert indentify("\t", "a\n\nb") == "\ta\n\t\n\tb"

    def test_indentify_empty_text(self) -> None:
        assert indentify(TAB, "") == ""

    def test_section(self) -> None:
        assert section("x") == "x\n\n"


class TestIsPointedLine:
    def test_bullet(self) -> None:
        assert is_pointed_line("* a", TAB)

    def test_indented_number(self) -> None:
        assert is_pointed_line(TAB + TAB + "12. a", TAB)

    def test_partial_indent_is_not_pointed(self) -> None:
        assert not is_pointed_line("  * a", TAB)

    def test_dash_is_not_a_point(self) -> None:
        assert not is_pointed_line("- a", TAB)

    def test_plain_text(self) -> None:
        assert not is_pointed_line("text", TAB)


# ---------------------------------------------------------------------------
# fix_nested_lists
# ---------------------------------------------------------------------------


class TestFixNestedLists:
    def test_glued_sub_point_moves_to_own_line(self) -> None:
        body = TAB + "* ul item" + TAB + "* ul item"
        assert fix_nested_lists(body, TAB) == TAB + "* ul item\n" + TAB + TAB + "* ul item"

    def test_numbered_sub_point(self) -> None:
        body = TAB + "1. ol item" + TAB + "1. ol item"
        assert fix_nested_lists(body, TAB) == TAB + "1. ol item\n" + TAB + TAB + "1. ol item"

    def test_up_to_two_spaces_stay_with_parent(self) -> None:
        body = "* a  " + TAB + "* b"
        assert fix_nested_lists(body, TAB) == "* a  \n" + TAB + TAB + "* b"

    def test_three_spaces_are_not_joined(self) -> None:
        body = "* a   " + TAB + "* b"
        assert fix_nested_lists(body, TAB) == body

    def test_lines_without_sub_points_are_unchanged(self) -> None:
        body = TAB + "* a\n" + TAB + "* b"
        assert fix_nested_lists(body, TAB) == body

    def test_tab_indent(self) -> None:
        body = "\t* a\t* b"
        assert fix_nested_lists(body, "\t") == "\t* a\n\t\t* b"
