"""
LLM instructions for the document-to-table extraction path.

One instruction set per ``FileKind``.  The JSON schema itself is attached
to the request separately (see ``dto.extraction.RESPONSE_SCHEMA``); these
prompts only describe *what* to extract and how to name the sheets.
"""

from __future__ import annotations

from dto.upload import FileKind


# -------------------------------------------------------------------
# PDF
# -------------------------------------------------------------------

def get_pdf_extraction_prompt() -> str:
    return """Act as an expert data extraction AI. Analyze the attached PDF document, which may be a native file or a scanned image, and convert all of its tabular data into structured JSON. Apply OCR where needed.

1. **Table recognition**
   - Identify every distinct table, including tables with complex layouts, merged cells or unusual formatting.
   - If a table continues across several pages, merge it into a single continuous sheet.
   - Use visual cues such as ruling lines, borders and cell alignment to find table boundaries.
2. **Tables vs. prose**
   - Text laid out in several columns (a newsletter, an article) is NOT a table. Only extract data that is clearly structured as a table.
3. **OCR**
   - The document may be a scan. Read text, numbers and symbols carefully, paying attention to easily confused characters (O and 0, 1 and l).
4. **Data integrity**
   - The first row of each sheet's data must be the column headers.
   - Trim leading/trailing whitespace from every cell and remove stray line breaks or OCR artifacts inside cells.
   - Keep the original row and column structure exactly.
5. **Sheets**
   - Put each distinct table on its own sheet.
   - Give each sheet a concise, descriptive name based on the table's title or content.
6. **Output**
   - Return a single JSON object that strictly conforms to the provided schema: a 'sheets' array whose elements each have a 'sheetName' and 'data' (a 2D array of strings).
"""


# -------------------------------------------------------------------
# Plain text
# -------------------------------------------------------------------

def get_plaintext_extraction_prompt() -> str:
    return """Act as a data analyst. Analyze the attached plain text file and extract any data that is laid out as a table. Values may be separated by commas, tabs, runs of spaces, pipes or other characters; infer the delimiter from the text.

1. **Identify tables:** scan the whole document for data arranged in rows and columns.
2. **Infer headers:** determine the column headers from the text where possible. If there are none, use 'Column 1', 'Column 2', and so on.
3. **Sheet naming:** if several distinct tables are found, put each on its own sheet named 'Table 1', 'Table 2', and so on. If only one table is found, name the sheet 'Extracted Data'.
4. **Cleaning:** trim whitespace from every cell and keep the column count consistent across all rows of a table.
5. **Output:** return a JSON object that strictly conforms to the provided schema. Each sheet is an object with 'sheetName' and 'data' (a 2D array of strings).
"""


def get_extraction_prompt(kind: FileKind) -> str:
    if kind is FileKind.PDF:
        return get_pdf_extraction_prompt()
    if kind is FileKind.PLAINTEXT:
        return get_plaintext_extraction_prompt()
    raise ValueError(f"No extraction prompt for file kind {kind!r}")
