"""Tests for the line-oriented block parser."""

from helpdesk.markup import RULES, parse, render_markdown
from helpdesk.markup.nodes import (
    Break,
    Heading,
    OrderedList,
    Paragraph,
    StepHeading,
    Strong,
    Text,
    UnorderedList,
)


def test_empty_documents():
    assert parse("") == ()
    assert parse(None) == ()
    assert render_markdown("") == ""


def test_rule_order():
    assert [rule.name for rule in RULES] == [
        "heading",
        "step_heading",
        "unordered_item",
        "ordered_item",
        "blank",
        "paragraph",
    ]


def test_paragraph_with_strong():
    assert parse("Hello **world**") == (
        Paragraph((Text("Hello "), Strong((Text("world"),)))),
    )


def test_heading_levels_are_clamped():
    assert parse("# Title") == (Heading(1, (Text("Title"),)),)
    assert parse("###### Deep") == (Heading(3, (Text("Deep"),)),)
    assert render_markdown("#### Deep") == "<h3>Deep</h3>"


def test_seven_hashes_is_a_paragraph():
    assert isinstance(parse("####### too deep")[0], Paragraph)


def test_consecutive_items_share_one_list():
    blocks = parse("- a\n• b\n- c")

    assert blocks == (
        UnorderedList(((Text("a"),), (Text("b"),), (Text("c"),))),
    )
    assert render_markdown("- a\n- b") == "<ul><li>a</li><li>b</li></ul>"


def test_list_kind_change_closes_previous_list():
    blocks = parse("- a\n1. b")

    assert [type(b) for b in blocks] == [UnorderedList, OrderedList]


def test_blank_between_ordered_items_is_absorbed():
    assert render_markdown("1. one\n\n2. two") == "<ol><li>one</li><li>two</li></ol>"


def test_blank_after_unordered_list_is_a_break():
    blocks = parse("- a\n- b\n\nPara")

    assert [type(b) for b in blocks] == [UnorderedList, Break, Paragraph]
    assert render_markdown("- a\n- b\n\nPara") == (
        "<ul><li>a</li><li>b</li></ul><br><p>Para</p>"
    )


def test_blank_before_paragraph_ends_ordered_list():
    blocks = parse("1. one\n\nThanks")

    assert [type(b) for b in blocks] == [OrderedList, Break, Paragraph]


def test_ordered_list_keeps_first_number():
    assert parse("3. three\n4. four")[0].start == 3
    assert render_markdown("3. three\n4. four") == (
        '<ol start="3"><li>three</li><li>four</li></ol>'
    )


def test_step_heading():
    assert parse("1. Install the client:") == (StepHeading(1, "Install the client"),)
    assert render_markdown("2. Connect:") == '<h4 class="step">2. Connect</h4>'


def test_step_heading_is_not_styled():
    assert render_markdown("1. **Bold**:") == '<h4 class="step">1. **Bold**</h4>'


def test_leading_blank_lines_are_dropped():
    assert render_markdown("\n\nHello") == "<p>Hello</p>"


def test_blank_lines_between_paragraphs():
    assert render_markdown("a\n\nb") == "<p>a</p><br><p>b</p>"
    assert render_markdown("a\n\n\nb") == "<p>a</p><br><br><p>b</p>"


def test_crlf_and_indentation_are_normalized():
    assert render_markdown("  - a\r\n  - b\r\n") == "<ul><li>a</li><li>b</li></ul><br>"


def test_mock_vpn_reply_structure():
    text = "\n".join(
        [
            "**VPN Setup (Quick):**",
            "1. Install your VPN client.",
            "2. Import the config file (or login).",
            "",
            "_Tell me your OS._",
        ]
    )

    html = render_markdown(text)

    assert html.startswith("<p><strong>VPN Setup (Quick):</strong></p><ol>")
    assert "<li>Install your VPN client.</li>" in html
    assert html.endswith("</ol><br><p><em>Tell me your OS.</em></p>")
