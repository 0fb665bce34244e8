import csv
import io

from farmledger.features.reports.csv_export import build_csv, format_cell


def test_header_only_when_no_rows():
    assert build_csv([], ["period", "revenue"]) == "period,revenue\n"


def test_cells_follow_header_order():
    rows = [{"revenue": 150.0, "period": "2024-03-01", "ignored": "x"}]
    assert build_csv(rows, ["period", "revenue"]) == "period,revenue\n2024-03-01,150\n"


def test_missing_and_none_cells_are_empty():
    rows = [{"period": "2024-03", "kidsBorn": None}]
    assert build_csv(rows, ["period", "kidsBorn", "kiddings"]) == "period,kidsBorn,kiddings\n2024-03,,\n"


def test_special_characters_survive_a_csv_reader():
    rows = [
        {"buyer": 'Smith, "Big" Farm', "note": "line one\nline two", "total": 12.5},
        {"buyer": "Plain", "note": "", "total": 3},
    ]
    text = build_csv(rows, ["buyer", "note", "total"])
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed == [
        ["buyer", "note", "total"],
        ['Smith, "Big" Farm', "line one\nline two", "12.5"],
        ["Plain", "", "3"],
    ]


def test_format_cell():
    assert format_cell(None) == ""
    assert format_cell(3.0) == 3
    assert format_cell(2.75) == 2.75
    assert format_cell(0) == 0
    assert format_cell("Hay") == "Hay"
