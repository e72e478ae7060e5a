"""Tests for the command line scripts."""

import json

import pytest
from openpyxl import load_workbook

from scripts import create_time_report, import_timesheet


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    out = tmp_path / "output"
    monkeypatch.setattr(import_timesheet, "OUTPUT_DIR", out)
    monkeypatch.setattr(create_time_report, "OUTPUT_DIR", out)
    return out


def test_import_timesheet(tmp_path, output_dir):
    text_file = tmp_path / "pasted.txt"
    text_file.write_text("9:00 0:30 17:00 Workshop\n\n8.15 12:00 Review\n", encoding="utf-8")

    output = import_timesheet.main(text_file, "Acme Corp", "2024-03", start_day=4)

    assert output == output_dir / "timesheets" / "acme_corp" / "acme_corp_2024_03.xlsx"
    ws = load_workbook(output)["Timesheet"]
    assert [c.value for c in ws[5]] == ["2024-03-04", "09:00", 30, "17:00", "07:30", "Workshop"]
    assert ws.cell(row=6, column=2).value in ("", None)
    assert ws.cell(row=7, column=2).value == "08:15"
    assert ws.cell(row=7, column=5).value == "03:45"


def test_import_timesheet_clears_existing_days(tmp_path, output_dir, sample_entry):
    existing = tmp_path / "existing.json"
    existing.write_text(json.dumps([sample_entry]), encoding="utf-8")
    text_file = tmp_path / "pasted.txt"
    text_file.write_text("\n", encoding="utf-8")

    output = import_timesheet.main(text_file, "Acme", "2024-03", start_day=4, existing=existing)

    ws = load_workbook(output)["Timesheet"]
    assert ws.cell(row=5, column=2).value in ("", None)


def test_create_time_report(tmp_path, output_dir, sample_entry, capsys):
    export = tmp_path / "export.json"
    export.write_text(
        json.dumps(
            {
                "time_entries": {"Acme": [sample_entry]},
                "invoices": [
                    {"id": "a", "invoice_number": "001", "invoice_date": "2024-03-01",
                     "total": 300, "client_name": "Acme"},
                    {"id": "b", "invoice_number": "001", "invoice_date": "2024-04-01",
                     "total": 100, "client_name": "Acme"},
                ],
            }
        ),
        encoding="utf-8",
    )

    output = create_time_report.main(export)

    assert output == output_dir / "reports" / "time_report_2024.xlsx"
    assert "Invoice number #001 is used 2 times" in capsys.readouterr().out
    roi = load_workbook(output)["ROI"]
    assert [c.value for c in roi[2]] == ["Acme", 8, 400, 50]


def test_create_time_report_missing_file(tmp_path, output_dir):
    with pytest.raises(FileNotFoundError):
        create_time_report.main(tmp_path / "missing.json")
