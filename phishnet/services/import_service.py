"""CSV import service for bulk target creation.

Features:
- Parse CSV with a header row (UTF-8, BOM tolerated, blank lines skipped)
- Map header variations onto target fields
- Validate every row using the same rules as TargetCreate
- Per-row fault isolation: a bad row is reported, the rest still import
"""

import csv
import io
import logging

from pydantic import ValidationError

from phishnet.core.errors import ValidationFailedError
from phishnet.schemas.group import ImportResult, ImportRowError, TargetCreate
from phishnet.services import group_service
from phishnet.storage import Storage

logger = logging.getLogger(__name__)

# First data row is line 2 (the header is line 1)
FIRST_DATA_ROW = 2


# =============================================================================
# Column Mapping
# =============================================================================

# Expected CSV columns (case-insensitive, spaces/hyphens normalized).
# Values are the TargetCreate aliases, so row errors name the wire field.
COLUMN_MAPPING = {
    "firstname": "firstName",
    "first_name": "firstName",
    "lastname": "lastName",
    "last_name": "lastName",
    "email": "email",
    "position": "position",
    "title": "position",
}


def normalize_column_name(col: str) -> str:
    """Normalize column name for matching."""
    return col.lower().strip().replace(" ", "_").replace("-", "_")


def map_row(headers: list[str], values: list[str]) -> dict[str, str]:
    """
    Build a target payload from one CSV row.

    Unknown columns are dropped. When two columns map to the same field, the
    first non-blank value wins.
    """
    record: dict[str, str] = {}
    for header, value in zip(headers, values):
        field = COLUMN_MAPPING.get(normalize_column_name(header))
        if field is None:
            continue
        if not record.get(field, "").strip():
            record[field] = value
    return record


# =============================================================================
# CSV Parsing
# =============================================================================

def parse_csv_file(file_content: bytes | str) -> tuple[list[str], list[list[str]]]:
    """
    Parse CSV content into headers and data rows.

    Raises:
        ValidationFailedError: the file is not a well-formed CSV. Nothing is
            imported in that case.
    """
    if isinstance(file_content, bytes):
        try:
            file_content = file_content.decode("utf-8-sig")  # Handle BOM
        except UnicodeDecodeError:
            raise ValidationFailedError(
                "Invalid CSV file", errors=[{"msg": "File must be UTF-8 encoded"}]
            )

    reader = csv.reader(io.StringIO(file_content, newline=""), strict=True)
    try:
        # Only truly empty lines are skipped; a row of empty cells is still a row
        rows = [row for row in reader if row]
    except csv.Error as e:
        raise ValidationFailedError(
            "Invalid CSV file", errors=[{"msg": str(e), "line": reader.line_num}]
        )

    if not rows:
        raise ValidationFailedError(
            "Invalid CSV file", errors=[{"msg": "CSV file has no header row"}]
        )

    headers = [h.strip() for h in rows[0]]
    data_rows = rows[1:]
    for index, row in enumerate(data_rows):
        if len(row) > len(headers):
            raise ValidationFailedError(
                "Invalid CSV file",
                errors=[{
                    "msg": f"Row has {len(row)} fields, header has {len(headers)}",
                    "row": index + FIRST_DATA_ROW,
                }],
            )
    return headers, data_rows


# =============================================================================
# Import
# =============================================================================

def import_targets(
    store: Storage,
    org_id: int,
    group_id: int,
    file_content: bytes | str,
) -> ImportResult:
    """
    Import targets from CSV into a group.

    The group is checked first (404 missing, 403 foreign), then the whole
    file is parsed before any row is written.
    """
    group_service.get_group(store, org_id, group_id)
    headers, rows = parse_csv_file(file_content)

    imported = 0
    errors: list[ImportRowError] = []
    for index, values in enumerate(rows):
        row_number = index + FIRST_DATA_ROW
        try:
            target = TargetCreate.model_validate(map_row(headers, values))
        except ValidationError as e:
            errors.append(ImportRowError(
                row=row_number,
                error=e.errors(include_url=False, include_context=False),
            ))
            continue

        try:
            store.create_target(org_id, group_id, target)
        except Exception:
            logger.exception(
                "Import row %s failed for group %s in org %s", row_number, group_id, org_id
            )
            errors.append(ImportRowError(row=row_number, error="Unknown error"))
            continue
        imported += 1

    logger.info(
        "Imported %s targets into group %s (%s failed)", imported, group_id, len(errors)
    )
    return ImportResult(imported=imported, failed=len(errors), errors=errors or None)
