"""
Tests for the text normalizer, delimiter sniffer and quote-aware line tokenizer.
"""
import pytest

from survey_import.domain.imports.processors.csv_processor import (
    detect_delimiter,
    normalize_text,
    parse_delimited_line,
)


class TestNormalizeText:
    def test_strips_byte_order_mark(self):
        normalized, lines = normalize_text("\ufefftext,type\nHello,text")
        assert not normalized.startswith("\ufeff")
        assert lines[0] == "text,type"

    def test_normalizes_crlf_and_lone_cr(self):
        normalized, lines = normalize_text("a\r\nb\rc\n")
        assert normalized == "a\nb\nc\n"
        assert lines == ["a", "b", "c"]

    def test_drops_blank_lines(self):
        _, lines = normalize_text("text\n\n   \nQ1\n\t\nQ2")
        assert lines == ["text", "Q1", "Q2"]

    def test_empty_input(self):
        normalized, lines = normalize_text("")
        assert normalized == ""
        assert lines == []


class TestDetectDelimiter:
    def test_semicolon_header(self):
        assert detect_delimiter("text;type;options") == ";"

    def test_comma_header(self):
        assert detect_delimiter("text,type,options") == ","

    def test_tab_header(self):
        assert detect_delimiter("text\ttype\toptions") == "\t"

    def test_tab_wins_ties(self):
        assert detect_delimiter("text\ttype,options") == "\t"

    def test_semicolon_must_strictly_dominate(self):
        assert detect_delimiter("text;type,options") == ","

    def test_defaults_to_comma(self):
        assert detect_delimiter("text") == ","

    def test_ignores_delimiters_inside_quotes(self):
        assert detect_delimiter('"a;b;c;d",text,type') == ","

    def test_doubled_quote_does_not_toggle(self):
        # The "" inside the quoted header keeps the scanner inside quotes
        assert detect_delimiter('"say ""hi"", ok, yes";type;options') == ";"


class TestParseDelimitedLine:
    def test_embedded_delimiter_in_quotes(self):
        assert parse_delimited_line('"a, b",c') == ["a, b", "c"]

    def test_escaped_quotes(self):
        assert parse_delimited_line('"a""b",c') == ['a"b', "c"]

    def test_unquoted_fields_are_trimmed(self):
        assert parse_delimited_line("  a , b  ,c") == ["a", "b", "c"]

    def test_quoted_content_keeps_whitespace(self):
        assert parse_delimited_line('"  padded  ",x') == ["  padded  ", "x"]

    def test_empty_fields_are_preserved(self):
        assert parse_delimited_line("a,,b,") == ["a", "", "b", ""]

    def test_empty_quoted_field(self):
        assert parse_delimited_line('"",x') == ["", "x"]

    def test_custom_delimiter(self):
        assert parse_delimited_line("a;b,c;d", ";") == ["a", "b,c", "d"]

    def test_tab_delimiter(self):
        assert parse_delimited_line('"Q1"\trating\t\ttrue', "\t") == ["Q1", "rating", "", "true"]

    def test_quote_after_leading_space_opens_quoted_field(self):
        assert parse_delimited_line('a, "b, c"') == ["a", "b, c"]

    def test_quote_inside_unquoted_field_is_literal(self):
        assert parse_delimited_line('5" screen,x') == ['5" screen', "x"]

    def test_unterminated_quote_runs_to_end_of_line(self):
        assert parse_delimited_line('"open, field') == ["open, field"]

    @pytest.mark.parametrize("line,expected", [
        ("single", ["single"]),
        ("", [""]),
        ('"only quoted"', ["only quoted"]),
    ])
    def test_single_field_lines(self, line, expected):
        assert parse_delimited_line(line) == expected
