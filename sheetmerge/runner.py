"""
sheetmerge/runner.py — Merge of a single secondary file into the main sheet.

Responsible for:
  - Loading the secondary workbook (cached formula results, never formulas)
  - Mapping its header row and resolving its key column
  - Planning the insertion point once, then appending accepted rows
  - Writing the per-file lines of the merge trace

Raises AppError when the file cannot be read or its header row is invalid;
the engine logs it and moves on to the next file. A missing sheet is not an
error here: it is logged as a warning and the file is skipped.
"""
from __future__ import annotations

from .dedup import KeyTracker
from .errors import AppError, SHEET_NOT_FOUND, SOURCE_READ_FAILED
from .io import SheetView, SpreadsheetDocument
from .log import MergeLog
from .models import FileMergeResult, MergeOptions, UploadedFile
from .parsing import col_index_to_letters, parse_header_row
from .planner import build_plan
from .schema import HeaderMap, build_header_map
from .writer import append_rows


INDENT = "   "


def load_document(uploaded: UploadedFile, keep_formulas: bool = False) -> SpreadsheetDocument:
    """Open an uploaded file from its bytes, or from its path when no bytes are held."""
    name = uploaded.name or uploaded.id
    if uploaded.data:
        return SpreadsheetDocument.from_bytes(uploaded.data, name=name, keep_formulas=keep_formulas)
    if uploaded.path:
        doc = SpreadsheetDocument.from_path(uploaded.path, keep_formulas=keep_formulas)
        doc.name = name
        return doc
    raise AppError(
        SOURCE_READ_FAILED,
        f"No data for file {name}",
        {"name": name, "file_id": uploaded.id},
    )


def merge_secondary(
    main_sheet: SheetView,
    main_map: HeaderMap,
    tracker: KeyTracker,
    uploaded: UploadedFile,
    options: MergeOptions,
    log: MergeLog,
) -> FileMergeResult:
    name = uploaded.name or uploaded.id
    header_row = parse_header_row(uploaded.header_row_index)
    result = FileMergeResult(
        file_id=uploaded.id,
        name=name,
        sheet_name=uploaded.selected_sheet,
        header_row=header_row,
    )

    doc = load_document(uploaded)
    sheet = doc.get_worksheet(uploaded.selected_sheet)
    if sheet is None:
        log.warning(
            f"Sheet '{uploaded.selected_sheet}' not found. "
            f"Available sheets: [{', '.join(doc.sheet_names)}]. Skipping.",
            indent=INDENT,
        )
        result.error_code = SHEET_NOT_FOUND
        result.error_message = f"Sheet '{uploaded.selected_sheet}' not found"
        return result

    source_map = build_header_map(sheet, header_row)
    plan = build_plan(main_sheet, main_map, source_map, tracker)
    result.start_row = plan.start_row
    result.unmatched_columns = list(plan.unmatched)

    log.info(
        f"{INDENT}Header row {header_row}: {len(source_map)} columns, "
        f"{len(plan.targets)} matched to Main File."
    )
    if plan.unmatched and options.include_unmatched:
        log.info(
            f"{INDENT}Unmatched columns are not added to the Main File: "
            f"{', '.join(plan.unmatched)}"
        )

    if tracker.active:
        if plan.dedup:
            log.info(
                f"{INDENT}Key Column '{tracker.key_column}' found at "
                f"{col_index_to_letters(plan.key_column)} (Index {plan.key_column})."
            )
        else:
            log.warning(
                "Key Column not found in Secondary. Appending all (potential duplicates).",
                indent=INDENT,
            )

    outcome = append_rows(main_sheet, sheet, plan, tracker, copy_style=options.copy_style)
    result.rows_appended = outcome.appended
    result.duplicates_skipped = outcome.skipped

    if outcome.appended:
        log.info(
            f"{INDENT}Appended {outcome.appended} rows at rows "
            f"{plan.start_row}-{plan.start_row + outcome.appended - 1}. "
            f"Skipped {outcome.skipped} duplicates."
        )
    else:
        log.info(f"{INDENT}Appended 0 rows. Skipped {outcome.skipped} duplicates.")
    if outcome.empty:
        log.info(f"{INDENT}{outcome.empty} rows had no values in matched columns.")
    return result
