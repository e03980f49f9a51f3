"""Tests for the structural scanner."""

from __future__ import annotations

from spmkit.scanner import (
    CODE,
    COMMENT,
    STRING,
    SourceScanner,
    classify,
    decode_string,
    find_array_block,
    find_closing,
    split_declarations,
)


def test_split_declarations_keeps_nested_commas_together() -> None:
    content = '.package(url: "https://x/y.git", from: "1.0.0"), .package(path: "../z")'

    parts = split_declarations(content)

    assert parts == [
        '.package(url: "https://x/y.git", from: "1.0.0")',
        '.package(path: "../z")',
    ]


def test_split_declarations_handles_empty_and_blank_input() -> None:
    assert split_declarations("") == []
    assert split_declarations("  \n  ") == []
    assert split_declarations(" , ") == []


def test_split_declarations_emits_unterminated_trailing_buffer() -> None:
    parts = split_declarations('.package(path: "a"), .package(url: "b"')

    assert parts == ['.package(path: "a")', '.package(url: "b"']


def test_split_declarations_ignores_commas_in_strings_and_comments() -> None:
    content = '"a,b", // first, second\n "c"'

    assert split_declarations(content) == ['"a,b"', '"c"']


def test_classify_marks_escaped_quotes_as_one_literal() -> None:
    text = 'x("a\\"b")'
    kinds = classify(text)

    assert kinds[0] == CODE
    assert all(kinds[index] == STRING for index in range(2, len(text) - 1))
    assert kinds[len(text) - 1] == CODE


def test_classify_handles_nested_block_comments() -> None:
    text = "/* outer /* inner */ still */x"
    kinds = classify(text)

    assert all(kind == COMMENT for kind in kinds[:-1])
    assert kinds[-1] == CODE


def test_find_closing_skips_brackets_inside_strings() -> None:
    text = '(")", [1])'

    assert find_closing(text, 0) == len(text) - 1
    assert find_closing(text, 6) == 8


def test_find_closing_returns_none_for_unbalanced_input() -> None:
    assert find_closing("(()", 0) is None
    assert find_closing("([)]", 0) is None
    assert find_closing("abc", 0) is None


def test_find_array_block_prefers_shallowest_label() -> None:
    text = """
    Package(
        targets: [
            .target(name: "A", dependencies: ["inner"])
        ],
        dependencies: [.package(path: "../outer")]
    )
    """

    assert find_array_block(text, "dependencies") == '.package(path: "../outer")'


def test_find_array_block_ignores_labels_in_comments_and_strings() -> None:
    text = """
    // dependencies: ["commented"]
    let note = "dependencies: [\\"quoted\\"]"
    Package(dependencies: ["real"])
    """

    assert find_array_block(text, "dependencies") == '"real"'


def test_find_array_block_returns_none_without_array() -> None:
    assert find_array_block('Package(name: "X")', "dependencies") is None
    assert find_array_block("Package(dependencies: [", "dependencies") is None


def test_arguments_attach_labels() -> None:
    scanner = SourceScanner('.package(url: "https://x/y.git", .upToNextMajor(from: "2.0.0"))')
    call = scanner.parse_call(scanner.whole)
    assert call is not None
    assert call.keyword == "package"

    arguments = scanner.arguments(call.args)

    assert [argument.label for argument in arguments] == ["url", None]
    assert scanner.labeled_string(call.args, "url") == "https://x/y.git"


def test_string_value_requires_a_single_literal() -> None:
    scanner = SourceScanner('"a" + "b"')

    assert scanner.string_value(scanner.whole) is None
    items = scanner.split(scanner.whole)
    assert scanner.string_value(items[0]) is None


def test_decode_string_unescapes() -> None:
    assert decode_string('"a\\"b"') == 'a"b'
    assert decode_string('"tab\\tend"') == "tab\tend"
    assert decode_string('"""multi"""') == "multi"


def test_line_helpers() -> None:
    text = "first\n    second"
    scanner = SourceScanner(text)
    index = text.index("second")

    assert scanner.line_indent(index) == "    "
    assert scanner.starts_line(index) is True
    assert scanner.starts_line(index + 2) is False
