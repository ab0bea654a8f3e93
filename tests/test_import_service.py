"""Tests for CSV and xlsx bulk import parsing."""

import io
from datetime import date, datetime

import pandas as pd
import pytest

from app.services.import_service import (
    NETWORKING_COLUMNS,
    ImportValidationError,
    application_rows,
    build_template,
    networking_rows,
)

APPLICATIONS_CSV = (
    "Company Name,Position Title,Application Date,Status,Location,Notes\n"
    "Acme Inc,Software Engineer,2024-02-11,Applied,\"New York, NY\",Referral\n"
    "Globex,Data Analyst,2024-02-12,,,\n"
).encode()


class TestApplicationImport:

    def test_rows_are_mapped(self):
        rows = application_rows(APPLICATIONS_CSV)
        assert len(rows) == 2
        assert rows[0]["company_name"] == "Acme Inc"
        assert rows[0]["application_date"] == date(2024, 2, 11)
        assert rows[0]["status"] == "applied"
        assert rows[0]["location"] == "New York, NY"
        assert rows[1]["status"] == "applied"
        assert rows[1]["notes"] is None

    def test_missing_columns(self):
        with pytest.raises(ImportValidationError, match="Missing required columns: Application Date"):
            application_rows(b"Company Name,Position Title\nAcme,Engineer\n")

    def test_bad_row_names_row_number(self):
        content = (
            "Company Name,Position Title,Application Date\n"
            "Acme,Engineer,2024-02-11\n"
            "Globex,Analyst,11/02/2024\n"
        ).encode()
        with pytest.raises(ImportValidationError, match="Row 2"):
            application_rows(content)

    def test_bad_status(self):
        content = b"Company Name,Position Title,Application Date,Status\nAcme,Engineer,2024-02-11,ghosted\n"
        with pytest.raises(ImportValidationError, match="Invalid status"):
            application_rows(content)

    def test_empty_file(self):
        with pytest.raises(ImportValidationError):
            application_rows(b"Company Name,Position Title,Application Date\n")


class TestNetworkingImport:

    def test_rows_are_mapped(self):
        content = (
            "Contact Name,Company,Interaction Type,Interaction Date,Interaction Method,Next Follow Up Date\n"
            "Jane Doe,Initech,Alumni,2024-03-01,Email,2024-03-15\n"
        ).encode()
        rows = networking_rows(content)
        assert rows[0]["contact_name"] == "Jane Doe"
        assert rows[0]["interaction_type"] == "alumni"
        assert rows[0]["interaction_method"] == "email"
        assert rows[0]["next_follow_up_date"] == date(2024, 3, 15)

    def test_defaults_applied(self):
        rows = networking_rows(b"Contact Name,Interaction Date\nJane Doe,2024-03-01\n")
        assert rows[0]["interaction_type"] == "industry_professional"
        assert rows[0]["interaction_method"] == "linkedin"

    def test_unknown_method(self):
        content = b"Contact Name,Interaction Date,Interaction Method\nJane,2024-03-01,carrier pigeon\n"
        with pytest.raises(ImportValidationError, match="interaction method"):
            networking_rows(content)


def _workbook(rows, columns) -> bytes:
    buffer = io.BytesIO()
    pd.DataFrame(rows, columns=columns).to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


class TestSpreadsheetImport:

    def test_xlsx_date_cells_become_iso_dates(self):
        content = _workbook(
            [["Acme Inc", "Engineer", datetime(2024, 2, 11), None]],
            ["Company Name", "Position Title", "Application Date", "Status"],
        )
        rows = application_rows(content, "applications.xlsx")
        assert rows[0]["application_date"] == date(2024, 2, 11)
        assert rows[0]["status"] == "applied"

    def test_xlsx_detected_without_extension(self):
        content = _workbook([["Jane Doe", "2024-03-01"]], ["Contact Name", "Interaction Date"])
        assert networking_rows(content)[0]["contact_name"] == "Jane Doe"

    def test_legacy_xls_rejected(self):
        with pytest.raises(ImportValidationError, match=".xls"):
            application_rows(b"\xd0\xcf\x11\xe0", "applications.xls")

    def test_corrupt_workbook(self):
        with pytest.raises(ImportValidationError, match="Excel"):
            application_rows(b"PK\x03\x04not really a zip", "applications.xlsx")

    def test_templates_list_every_column(self):
        content, media_type, filename = build_template("networking", "csv")
        assert media_type == "text/csv"
        assert filename == "networking-import-template.csv"
        assert content.decode().splitlines()[0].split(",") == list(NETWORKING_COLUMNS)
        assert networking_rows(content)[0]["next_follow_up_date"] == date(2024, 2, 25)
