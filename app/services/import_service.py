"""
Bulk import of job applications and networking interactions.

Accepts CSV exports and Excel (.xlsx) workbooks. Every row is validated
before anything is written; one bad row rejects the whole file with a
message naming the row.
"""

import io
import re
import zipfile
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from app.models.job_application import VALID_STATUSES
from app.models.networking_interaction import INTERACTION_TYPES

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

INTERACTION_METHODS = {'linkedin', 'email', 'event', 'call', 'meeting', 'other'}

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLSX_SIGNATURE = b"PK\x03\x04"

APPLICATION_HEADERS = ['Company Name', 'Position Title', 'Application Date']
APPLICATION_COLUMNS = {
    'Company Name': 'company_name',
    'Position Title': 'position_title',
    'Application Date': 'application_date',
    'Status': 'status',
    'Location': 'location',
    'Application URL': 'job_url',
    'Notes': 'notes',
}
APPLICATION_EXAMPLE = [
    'Acme Inc', 'Software Engineer', '2024-02-11', 'applied', 'New York, NY',
    'https://linkedin.com/jobs/...', 'Applied through company website',
]

NETWORKING_HEADERS = ['Contact Name', 'Interaction Date']
NETWORKING_COLUMNS = {
    'Contact Name': 'contact_name',
    'Company': 'company',
    'Role': 'role',
    'Interaction Type': 'interaction_type',
    'Interaction Date': 'interaction_date',
    'Interaction Method': 'interaction_method',
    'Discussion Points': 'discussion_points',
    'Follow Up Items': 'follow_up_items',
    'Next Steps': 'next_steps',
    'Next Follow Up Date': 'next_follow_up_date',
    'LinkedIn URL': 'linkedin_url',
    'Email': 'email',
    'Phone': 'phone',
    'Notes': 'notes',
}
NETWORKING_EXAMPLE = [
    'John Doe', 'Tech Corp', 'Senior Engineer', 'industry_professional', '2024-02-11',
    'linkedin', 'Discussed career opportunities', 'Send resume', 'Schedule follow-up call',
    '2024-02-25', 'https://linkedin.com/in/johndoe', 'john@example.com', '123-456-7890',
    'Met at tech conference',
]

TEMPLATES = {
    'applications': (APPLICATION_COLUMNS, APPLICATION_EXAMPLE, 'Applications Template'),
    'networking': (NETWORKING_COLUMNS, NETWORKING_EXAMPLE, 'Networking Template'),
}


class ImportValidationError(ValueError):
    """A file or row that cannot be imported"""


def _cell_text(value) -> str:
    """Normalize a spreadsheet cell; date cells become YYYY-MM-DD"""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ''
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _is_excel(content: bytes, filename: Optional[str]) -> bool:
    extension = filename.rsplit('.', 1)[-1].lower() if filename and '.' in filename else ''
    if extension == 'xls':
        raise ImportValidationError("Legacy .xls workbooks are not supported. Save the file as .xlsx or .csv")
    return extension == 'xlsx' or content.startswith(XLSX_SIGNATURE)


def _read_frame(content: bytes, filename: Optional[str]) -> pd.DataFrame:
    if _is_excel(content, filename):
        try:
            return pd.read_excel(io.BytesIO(content), engine="openpyxl", dtype=object)
        except (ValueError, KeyError, zipfile.BadZipFile, InvalidFileException):
            raise ImportValidationError("Could not read the Excel workbook")

    try:
        return pd.read_csv(
            io.BytesIO(content), dtype=str, keep_default_na=False, encoding="utf-8-sig"
        )
    except UnicodeDecodeError:
        raise ImportValidationError("File must be UTF-8 encoded CSV")
    except pd.errors.EmptyDataError:
        raise ImportValidationError("The file is empty")
    except pd.errors.ParserError as e:
        raise ImportValidationError(f"Could not parse CSV: {e}")


def read_rows(
    content: bytes, required_headers: List[str], filename: Optional[str] = None
) -> List[Dict[str, str]]:
    """Rows of a CSV or xlsx file as header -> text dicts; blank rows are dropped"""
    frame = _read_frame(content, filename)
    frame.columns = [str(c).strip() for c in frame.columns]

    missing = [h for h in required_headers if h not in frame.columns]
    if missing:
        raise ImportValidationError(f"Missing required columns: {', '.join(missing)}")

    rows = []
    for record in frame.to_dict(orient="records"):
        row = {header: _cell_text(value) for header, value in record.items() if header}
        if any(row.values()):
            rows.append(row)
    if not rows:
        raise ImportValidationError("The file has no data rows")
    return rows


def _parse_date(value: str, column: str, row_number: int) -> date:
    if not DATE_PATTERN.match(value):
        raise ImportValidationError(
            f"Row {row_number}: Invalid date format for {column}. Use YYYY-MM-DD"
        )
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ImportValidationError(f"Row {row_number}: Invalid date for {column}")


def _optional(value: Optional[str]) -> Optional[str]:
    return value or None


def _map_columns(row: Dict[str, str], columns: Dict[str, str]) -> Dict:
    return {field: _optional(row.get(header)) for header, field in columns.items()}


def application_rows(content: bytes, filename: Optional[str] = None) -> List[Dict]:
    """Parse and validate an applications file into JobApplication field dicts"""
    records = []
    for index, row in enumerate(read_rows(content, APPLICATION_HEADERS, filename), start=1):
        if not row.get('Company Name'):
            raise ImportValidationError(f"Row {index}: Company Name is required")
        if not row.get('Position Title'):
            raise ImportValidationError(f"Row {index}: Position Title is required")
        if not row.get('Application Date'):
            raise ImportValidationError(f"Row {index}: Application Date is required")

        record = _map_columns(row, APPLICATION_COLUMNS)
        record['application_date'] = _parse_date(row['Application Date'], 'Application Date', index)

        status = (record['status'] or 'applied').lower()
        if status not in VALID_STATUSES:
            raise ImportValidationError(
                f"Row {index}: Invalid status \"{record['status']}\". "
                f"Must be one of: {', '.join(sorted(VALID_STATUSES))}"
            )
        record['status'] = status
        records.append(record)
    return records


def networking_rows(content: bytes, filename: Optional[str] = None) -> List[Dict]:
    """Parse and validate a networking file into NetworkingInteraction field dicts"""
    records = []
    for index, row in enumerate(read_rows(content, NETWORKING_HEADERS, filename), start=1):
        if not row.get('Contact Name'):
            raise ImportValidationError(f"Row {index}: Contact Name is required")
        if not row.get('Interaction Date'):
            raise ImportValidationError(f"Row {index}: Interaction Date is required")

        record = _map_columns(row, NETWORKING_COLUMNS)
        record['interaction_date'] = _parse_date(row['Interaction Date'], 'Interaction Date', index)
        if record['next_follow_up_date']:
            record['next_follow_up_date'] = _parse_date(
                record['next_follow_up_date'], 'Next Follow Up Date', index
            )

        interaction_type = (record['interaction_type'] or 'industry_professional').lower()
        if interaction_type not in INTERACTION_TYPES:
            raise ImportValidationError(
                f"Row {index}: Invalid interaction type \"{record['interaction_type']}\". "
                f"Must be one of: {', '.join(sorted(INTERACTION_TYPES))}"
            )
        record['interaction_type'] = interaction_type

        method = (record['interaction_method'] or 'linkedin').lower()
        if method not in INTERACTION_METHODS:
            raise ImportValidationError(
                f"Row {index}: Invalid interaction method \"{record['interaction_method']}\". "
                f"Must be one of: {', '.join(sorted(INTERACTION_METHODS))}"
            )
        record['interaction_method'] = method
        records.append(record)
    return records


def build_template(kind: str, file_format: str = 'xlsx') -> Tuple[bytes, str, str]:
    """
    Import template with every supported column and one example row.

    Returns:
        (content, media type, download filename)
    """
    columns, example, sheet_name = TEMPLATES[kind]
    frame = pd.DataFrame([example], columns=list(columns))

    if file_format == 'csv':
        return frame.to_csv(index=False).encode(), "text/csv", f"{kind}-import-template.csv"

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name=sheet_name)
        sheet = writer.sheets[sheet_name]
        for cell in sheet[1]:
            sheet.column_dimensions[cell.column_letter].width = max(12, len(str(cell.value)) + 4)
    return buffer.getvalue(), XLSX_MEDIA_TYPE, f"{kind}-import-template.xlsx"
