"""
Pydantic schemas for CSV import and photo upload.
"""

from typing import Optional

from equiptrack.schemas.base import BaseSchema, DateSimple


class ImportRowResponse(BaseSchema):
    line: int
    asset_id: str
    name: str
    category: str
    condition: str
    notes: str = ""
    test_tag_done_date: Optional[DateSimple] = None
    test_tag_next_due: Optional[DateSimple] = None
    qr_code: str = ""
    is_valid: bool
    is_duplicate: bool = False
    errors: list[str] = []


class ImportResponse(BaseSchema):
    """Preview of a parsed file, plus the outcome when it was committed."""

    dry_run: bool
    valid: int
    invalid: int
    rows: list[ImportRowResponse]
    success: int = 0
    failed: int = 0
    errors: list[dict] = []


class UploadResponse(BaseSchema):
    url: str
    path: str
