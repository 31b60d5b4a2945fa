from __future__ import annotations

import pytest

from app.parsers.csv_table import NoRecordsError, parse_table, strip_preamble


class TestParseTable:
    def test_uses_first_line_as_header_and_trims_values(self) -> None:
        records = parse_table("Date ; Valeur\n01/03/2024 ; 500 \n02/03/2024;750", ";")

        assert records == [
            {"Date": "01/03/2024", "Valeur": "500"},
            {"Date": "02/03/2024", "Valeur": "750"},
        ]

    def test_extra_cells_are_ignored_and_missing_cells_left_absent(self) -> None:
        records = parse_table("date,value,unit\n2024-03-01,1.5,kWh,extra\n2024-03-02,2.5", ",")

        assert records[0] == {"date": "2024-03-01", "value": "1.5", "unit": "kWh"}
        assert records[1] == {"date": "2024-03-02", "value": "2.5"}
        assert "unit" not in records[1]

    def test_retries_with_alternate_delimiter(self) -> None:
        records = parse_table("date;value\n2024-03-01;1,5", ",")

        assert records == [{"date": "2024-03-01", "value": "1,5"}]

    def test_retries_semicolon_profile_with_comma(self) -> None:
        records = parse_table("Date,Valeur\n01/03/2024,500", ";")

        assert records == [{"Date": "01/03/2024", "Valeur": "500"}]

    def test_quoted_cells_may_contain_the_delimiter(self) -> None:
        records = parse_table('date,value\n2024-03-01,"1,5"', ",")

        assert records[0]["value"] == "1,5"

    def test_blank_lines_and_bom_are_ignored(self) -> None:
        records = parse_table("\ufeffdate,value\n\n2024-03-01,1\n\n2024-03-02,2\n", ",")

        assert [record["date"] for record in records] == ["2024-03-01", "2024-03-02"]

    def test_windows_line_endings(self) -> None:
        records = parse_table("date,value\r\n2024-03-01,1\r\n", ",")

        assert records == [{"date": "2024-03-01", "value": "1"}]

    @pytest.mark.parametrize("text", ["", "\n\n", "date,value", "date,value\n\n"])
    def test_no_data_rows_raises(self, text: str) -> None:
        with pytest.raises(NoRecordsError):
            parse_table(text, ",")


class TestStripPreamble:
    def test_drops_leading_lines(self) -> None:
        text = "Identifiant PRM;123\nPeriode;mars\nDate;Valeur\n01/03/2024;500"

        assert strip_preamble(text, 2) == "Date;Valeur\n01/03/2024;500"

    def test_zero_keeps_text_unchanged(self) -> None:
        assert strip_preamble("a\nb", 0) == "a\nb"
