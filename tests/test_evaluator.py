"""Tests for declaration evaluation."""

import pytest
from formula_metadata import EvaluationError
from formula_metadata import evaluate
from formula_metadata.evaluator import parse_declaration
from formula_metadata.evaluator import read_string_literal


def test_parse_double_quoted():
    """Test basic keyword and double-quoted literal."""
    assert parse_declaration('  desc "Library for manipulating PNG images"') == (
        "desc",
        "Library for manipulating PNG images",
        {},
    )


def test_parse_single_quoted():
    """Test single-quoted literal keeps backslashes except \\\\ and \\'."""
    assert parse_declaration(r"desc 'it\'s a\nb'") == ("desc", "it's a\\nb", {})


def test_double_quoted_escapes():
    """Test backslash escapes in double-quoted literals."""
    assert read_string_literal(r'"a\tb"')[0] == "a\tb"
    assert read_string_literal(r'"say \"hi\""')[0] == 'say "hi"'
    assert read_string_literal(r'"back\\slash"')[0] == "back\\slash"
    assert read_string_literal(r'"\x41\101"')[0] == "AA"
    assert read_string_literal(r'"café \u{63 61}"')[0] == "café ca"
    assert read_string_literal(r'"\q"')[0] == "q"


def test_escaped_interpolation_is_literal():
    """Test escaped hash keeps #{ as plain text."""
    assert read_string_literal(r'"\#{version}"')[0] == "#{version}"
    assert read_string_literal("'#{version}'")[0] == "#{version}"


def test_interpolation_rejected():
    """Test interpolation cannot be evaluated."""
    with pytest.raises(ValueError, match="interpolation"):
        read_string_literal('"https://example.org/pkg-#{version}.tar.gz"')


def test_literal_end_index():
    """Test returned index points just past the closing quote."""
    assert read_string_literal('x "ab" y', 2) == ("ab", 6)


def test_unterminated_literal():
    """Test literal missing its closing quote."""
    with pytest.raises(ValueError, match="unterminated"):
        read_string_literal('"abc')
    with pytest.raises(ValueError, match="unterminated"):
        read_string_literal('"abc\\')


def test_trailing_comment_ignored():
    """Test trailing comment after the literal is allowed."""
    assert parse_declaration('sha256 "abc123" # checked upstream') == ("sha256", "abc123", {})


def test_trailing_options_kept_raw():
    """Test keyword options after the literal are returned unevaluated."""
    keyword, value, options = parse_declaration(
        'url "https://github.com/org/repo.git", tag: "v#{1}", revision: "abc", using: :git # pinned'
    )

    assert keyword == "url"
    assert value == "https://github.com/org/repo.git"
    assert options == {"tag": '"v#{1}"', "revision": '"abc"', "using": ":git"}


def test_hash_rocket_options():
    """Test old-style hash options are accepted."""
    _, _, options = parse_declaration('url "https://example.org/a.tgz", :using => :curl')

    assert options == {"using": ":curl"}


def test_trailing_comma_continuation():
    """Test a declaration whose options continued on a dropped line."""
    assert parse_declaration('url "https://github.com/org/repo.git",') == (
        "url",
        "https://github.com/org/repo.git",
        {},
    )


def test_symbol_argument_is_reference():
    """Test symbol arguments carry no value."""
    assert parse_declaration("url :stable") == ("url", None, {})


@pytest.mark.parametrize(
    "line",
    [
        "url stable.url",
        'desc "a" "b"',
        'homepage "a" + "b"',
        'url "a", tag',
        'url "a", tag: ["x"',
        "desc",
    ],
)
def test_malformed_lines_rejected(line):
    """Test anything beyond keyword plus literal is rejected."""
    with pytest.raises(ValueError):
        parse_declaration(line)


def test_evaluate_captures_fields():
    """Test evaluation records every captured field."""
    source = "\n".join(
        [
            '  desc "Library for manipulating PNG images"',
            '  homepage "http://example.org"',
            '  url "http://example.org/pkg-1.0.tar.gz"',
            '  sha256 "abc123"',
        ]
    )

    handle = evaluate("Libpng", source)

    assert handle.identifier == "Libpng"
    assert handle.get("desc") == "Library for manipulating PNG images"
    assert handle.get("homepage") == "http://example.org"
    assert handle.get("url") == "http://example.org/pkg-1.0.tar.gz"
    assert handle.get("sha256") == "abc123"


def test_evaluate_later_declaration_wins():
    """Test later declarations override earlier ones."""
    source = 'url "https://example.org/main.tar.gz"\nsha256 "111"\nurl "https://example.org/resource.tar.gz"\nsha256 "222"'

    handle = evaluate("Foo", source)

    assert handle.get("url") == "https://example.org/resource.tar.gz"
    assert handle.get("sha256") == "222"


def test_evaluate_symbol_keeps_earlier_value():
    """Test a symbol reference does not replace a captured value."""
    handle = evaluate("Foo", 'url "https://example.org/foo.tar.gz"\n    url :stable')

    assert handle.get("url") == "https://example.org/foo.tar.gz"


def test_evaluate_empty_source():
    """Test empty filtered source captures nothing."""
    handle = evaluate("Foo", "")

    assert handle.get("desc") is None
    assert handle.get("url") is None


def test_evaluate_error_has_line_context():
    """Test evaluation errors name the line that failed."""
    source = 'desc "fine"\nurl "https://example.org/#{version}.tar.gz"'

    with pytest.raises(EvaluationError) as exc_info:
        evaluate("Foo", source)

    error = exc_info.value
    assert error.line_number == 2
    assert error.context["identifier"] == "Foo"
    assert error.context["line"] == 'url "https://example.org/#{version}.tar.gz"'
    assert "Foo:2" in error.message
    assert "interpolation" in error.message


def test_evaluate_unknown_keyword_error():
    """Test unrecognized keyword fails with line context."""
    with pytest.raises(EvaluationError, match="Foo:1: undefined declaration 'system'"):
        evaluate("Foo", 'system "make"')


def test_evaluations_with_same_identifier_are_isolated():
    """Test two evaluations of the same identifier keep their own values."""
    first = evaluate("Foo", 'desc "first"\nurl "https://one.example"')
    second = evaluate("Foo", 'desc "second"')

    assert first.get("desc") == "first"
    assert first.get("url") == "https://one.example"
    assert second.get("desc") == "second"
    assert second.get("url") is None


def test_surrogate_escapes_rejected():
    """Test escapes naming surrogate codepoints are invalid."""
    with pytest.raises(ValueError, match="surrogate"):
        read_string_literal(r'"\uD800"')
    with pytest.raises(ValueError, match="surrogate"):
        read_string_literal(r'"\u{41 DFFF}"')
    assert read_string_literal(r'"\uD7FF\u{E000}"')[0] == "\ud7ff\ue000"


def test_hash_keyed_checksum_has_no_value():
    """Test ``sha256 "..." => :tag`` carries nothing to capture."""
    assert parse_declaration('    sha256 "bbb" => :catalina') == ("sha256", None, {})


@pytest.mark.parametrize(
    "line",
    ['url = "https://example.org/api"', "desc ||= summary", "url += path", "sha256 = digest"],
)
def test_assignment_has_no_value(line):
    """Test local assignments are not declarations."""
    keyword, value, options = parse_declaration(line)

    assert value is None
    assert options == {}


def test_evaluate_skips_assignment_and_hash_checksum():
    """Test earlier values survive assignments and hash-keyed checksums."""
    source = 'url "https://x/a.tgz"\nsha256 "aaa"\n    sha256 "bbb" => :catalina\n    url = "https://example.org/api"'

    handle = evaluate("Foo", source)

    assert handle.get("url") == "https://x/a.tgz"
    assert handle.get("sha256") == "aaa"
