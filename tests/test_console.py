"""
Tests for the console preview command.
"""
import csv
import json
from io import StringIO

from rich.console import Console

from survey_import.console import ImportPreviewConsole, main
from survey_import.domain.imports.orchestrator import parse_import


def test_preview_sample_csv(tmp_path, sample_csv_bytes, capsys):
    path = tmp_path / "survey.csv"
    path.write_bytes(sample_csv_bytes)

    assert main([str(path)]) == 0

    output = capsys.readouterr().out
    assert "Questions (4)" in output
    assert "Column Mappings" in output


def test_json_output(tmp_path, sample_json_bytes, capsys):
    path = tmp_path / "survey.json"
    path.write_bytes(sample_json_bytes)

    assert main([str(path), "--json"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["title"] == "Customer Feedback Survey"
    assert len(data["questions"]) == 3
    assert "invalidRows" in data


def test_fatal_file_exits_with_1(tmp_path, capsys):
    path = tmp_path / "broken.json"
    path.write_text('{"questions": [', encoding="utf-8")

    assert main([str(path)]) == 1
    assert "Import blocked" in capsys.readouterr().out


def test_declared_type_overrides_extension(tmp_path, sample_tsv_bytes):
    path = tmp_path / "export.dat"
    path.write_bytes(sample_tsv_bytes)

    assert main([str(path), "--type", "excel"]) == 0


def test_missing_file_exits_with_2(tmp_path):
    assert main([str(tmp_path / "missing.csv")]) == 2


def test_binary_file_exits_with_2(tmp_path):
    path = tmp_path / "binary.csv"
    path.write_bytes(b"text\n\xff\xfe\xfa\n")

    assert main([str(path)]) == 2


def test_export_invalid_rows(tmp_path):
    path = tmp_path / "survey.csv"
    path.write_text("text,type,options\nPick one,radio,Only\nFine,text,\n,text,\n", encoding="utf-8")
    out_path = tmp_path / "invalid.csv"

    assert main([str(path), "--export-invalid", str(out_path)]) == 0

    with open(out_path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["row", "reason", "text", "type", "options"]
    assert rows[1][:2] == ["2", 'Type "radio" requires at least 2 options']
    assert rows[2] == ["4", "Empty question text", "", "text", ""]


def test_export_skipped_when_nothing_invalid(tmp_path, sample_csv_bytes):
    path = tmp_path / "survey.csv"
    path.write_bytes(sample_csv_bytes)
    out_path = tmp_path / "invalid.csv"

    assert main([str(path), "--export-invalid", str(out_path)]) == 0
    assert not out_path.exists()


BRACKETED_CSV = "text,type\nRate [/b] this,text\n[red]Alert[/red],[b]\n"


def test_bracketed_text_does_not_break_rendering(tmp_path):
    path = tmp_path / "brackets.csv"
    path.write_text(BRACKETED_CSV, encoding="utf-8")

    assert main([str(path)]) == 0


def test_bracketed_text_is_shown_literally():
    buffer = StringIO()
    console = Console(file=buffer, width=200, color_system=None)

    ImportPreviewConsole(console).render(parse_import(BRACKETED_CSV, "csv"))

    output = buffer.getvalue()
    assert "Rate [/b] this" in output
    assert "[red]Alert[/red]" in output
    assert 'Invalid type "[b]"' in output
