"""
Wire-level DTOs for the remote extraction service.

``RESPONSE_SCHEMA`` is the JSON schema handed to the provider so it emits
structured output; ``ExtractionResponse`` is the pydantic model the raw
JSON is validated against before it becomes a ``Workbook``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dto.workbook import Sheet, Workbook, stringify_grid

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "sheets": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "sheetName": {
                        "type": "string",
                        "description": (
                            "The name of the worksheet, which should be descriptive "
                            "of its content (e.g., 'Sales Q1', 'Employee List')."
                        ),
                    },
                    "data": {
                        "type": "array",
                        "description": (
                            "A 2D array representing the table. The first inner array "
                            "MUST be the column headers. Subsequent inner arrays are "
                            "the data rows. All cell values should be represented as "
                            "strings."
                        ),
                        "items": {
                            "type": "array",
                            "items": {"type": "string"},
                        },
                    },
                },
                "required": ["sheetName", "data"],
            },
        },
    },
    "required": ["sheets"],
}


class ExtractionRequest(BaseModel):
    """Everything one call to the extraction service needs."""

    instruction: str
    payload: str  # base64, no data-URI prefix
    media_type: str
    response_schema: Dict[str, Any] = Field(default_factory=lambda: RESPONSE_SCHEMA)


class ExtractedSheet(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sheet_name: Optional[str] = Field(default=None, alias="sheetName")
    data: Optional[List[List[str]]] = None

    @field_validator("data", mode="before")
    @classmethod
    def _stringify_cells(cls, value: Any) -> Any:
        return stringify_grid(value)


class ExtractionResponse(BaseModel):
    """Top-level ``{"sheets": [...]}`` payload returned by the service."""

    sheets: List[ExtractedSheet]

    def to_workbook(self) -> Workbook:
        sheets: List[Sheet] = []
        for index, item in enumerate(self.sheets, start=1):
            name = (item.sheet_name or "").strip() or f"Sheet {index}"
            sheets.append(Sheet(name=name, grid=item.data or []))
        return Workbook(sheets=sheets)
