"""
sheetmerge/engine.py — Merge coordinator.

Responsible for:
  - Resolving and loading the main file (fatal on failure)
  - Building the main header map and seeding the duplicate-key tracker
  - Folding every secondary file into the main sheet, in the order given
  - Serialising the result and building the merged preview
  - Emitting optional progress callbacks

merge_workbooks never raises. Main-file failures return success=False with
the trace so far and an "Error:" line; secondary-file failures are logged
and that file is skipped.
"""
from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from .config import MergeSettings
from .dedup import build_key_tracker, main_key_values
from .errors import AppError, MAIN_FILE_NOT_FOUND, MERGE_CANCELLED
from .io import SpreadsheetDocument
from .log import MergeLog, get_logger
from .models import FileMergeResult, MergeOptions, MergeResult, UploadedFile
from .parsing import col_index_to_letters, parse_header_row
from .preview import get_preview_data
from .runner import INDENT, load_document, merge_secondary
from .schema import build_header_map


logger = get_logger(__name__)

ProgressCallback = Callable[[str, Any], None]


def _failure(
    log: MergeLog,
    code: str,
    message: str,
    files: Optional[List[FileMergeResult]] = None,
) -> MergeResult:
    log.error(message)
    return MergeResult(success=False, logs=list(log.lines), files=files or [], error_code=code)


def _file_error(log: MergeLog, uploaded: UploadedFile, code: str, message: str) -> FileMergeResult:
    name = uploaded.name or uploaded.id
    log.error(f"Could not read file {name}: {message}", indent=INDENT)
    return FileMergeResult(
        file_id=uploaded.id,
        name=name,
        sheet_name=uploaded.selected_sheet,
        header_row=uploaded.header_row_index,
        error_code=code,
        error_message=message,
    )


def _select_secondaries(
    files: Sequence[UploadedFile],
    options: MergeOptions,
    log: MergeLog,
) -> List[UploadedFile]:
    """Secondary files in the order of options.secondary_file_ids, each once."""
    by_id = {f.id: f for f in files}
    selected: List[UploadedFile] = []
    seen = set()
    for file_id in options.secondary_file_ids:
        if file_id in seen or file_id == options.main_file_id:
            continue
        seen.add(file_id)
        uploaded = by_id.get(file_id)
        if uploaded is None:
            log.warning(f"Secondary file '{file_id}' not found. Skipping.")
            continue
        selected.append(uploaded)
    return selected


def merge_workbooks(
    files: Sequence[UploadedFile],
    options: MergeOptions,
    settings: Optional[MergeSettings] = None,
    on_progress: Optional[ProgressCallback] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> MergeResult:
    """
    Append the rows of every secondary file onto the main file's selected
    sheet, matching columns by header name and skipping rows whose key
    value is already present.
    """
    settings = settings or MergeSettings()
    log = MergeLog()
    results: List[FileMergeResult] = []

    def _emit(event: str, payload: Any) -> None:
        if on_progress is not None:
            try:
                on_progress(event, payload)
            except Exception:
                logger.debug("progress callback failed for %s", event, exc_info=True)

    log.info("Starting merge process (vertical append)...")

    # ── Main file: any failure here aborts the whole merge ────────────────────
    try:
        options.validate()
        main_file = next((f for f in files if f.id == options.main_file_id), None)
        if main_file is None:
            raise AppError(MAIN_FILE_NOT_FOUND, "Main file not found.", {"file_id": options.main_file_id})
        main_name = main_file.name or main_file.id
        log.info(f"Main file: {main_name} (Sheet: {main_file.selected_sheet})")

        secondaries = _select_secondaries(files, options, log)
        log.info(f"Processing {len(secondaries)} secondary files.")

        if options.match_type == "fuzzy":
            log.warning(
                f"Fuzzy matching (threshold {options.fuzzy_threshold}) is not supported. "
                "Keys are compared exactly."
            )

        main_header_row = parse_header_row(main_file.header_row_index)
        main_doc: SpreadsheetDocument = load_document(main_file, keep_formulas=True)
        main_sheet = main_doc.require_worksheet(main_file.selected_sheet)

        main_map = build_header_map(main_sheet, main_header_row)
        log.info(f"Mapped {len(main_map)} columns in Main File (header row {main_header_row}).")

        tracker = build_key_tracker(options.key, main_map)
        if not tracker.requested:
            log.info("No Key Column selected. Appending ALL rows.")
        elif tracker.active:
            log.info(
                f"Deduplication Active. Key Column: '{tracker.key_column}' "
                f"(Index {tracker.main_column}, column {col_index_to_letters(tracker.main_column)})"
            )
            found = tracker.seed(main_key_values(main_sheet, main_header_row, tracker.main_column))
            log.info(f"Found {found} existing keys in Main File.")
        else:
            log.warning(f"Key Column '{tracker.key_column}' not found in Main File. Appending ALL rows.")
    except AppError as e:
        return _failure(log, e.code, e.message)
    except Exception as e:
        logger.exception("main file stage failed")
        return _failure(log, e.__class__.__name__, str(e) or e.__class__.__name__)

    # ── Secondary files, strictly one after another ───────────────────────────
    for uploaded in secondaries:
        if should_cancel is not None and should_cancel():
            return _failure(
                log,
                MERGE_CANCELLED,
                "Merge cancelled before all files were processed. No output produced.",
                results,
            )

        name = uploaded.name or uploaded.id
        _emit("start", {"file_id": uploaded.id, "name": name, "sheet_name": uploaded.selected_sheet})
        log.info(f"-- Processing File: {name} (Sheet: {uploaded.selected_sheet})")

        try:
            result = merge_secondary(main_sheet, main_map, tracker, uploaded, options, log)
        except AppError as e:
            result = _file_error(log, uploaded, e.code, e.message)
        except Exception as e:
            logger.exception("failed to merge %s", name)
            result = _file_error(log, uploaded, e.__class__.__name__, str(e) or e.__class__.__name__)

        results.append(result)
        _emit("error" if result.error_code else "result", result)

    # ── Output + preview of the merged sheet ──────────────────────────────────
    try:
        output = main_doc.to_bytes()
        preview = get_preview_data(main_doc, main_file.selected_sheet, main_header_row, settings)
    except AppError as e:
        return _failure(log, e.code, e.message, results)
    except Exception as e:
        logger.exception("output stage failed")
        return _failure(log, e.__class__.__name__, str(e) or e.__class__.__name__, results)

    total = sum(r.rows_appended for r in results)
    skipped = sum(r.duplicates_skipped for r in results)
    log.info(f"Total rows appended: {total} (duplicates skipped: {skipped}).")
    log.info(f"Done! File ready for download. Size: {len(output) / 1024:.2f} KB")

    merged = MergeResult(
        success=True,
        logs=list(log.lines),
        output=output,
        merged_headers=preview.headers,
        merged_rows=preview.rows,
        files=results,
    )
    _emit("done", merged)
    return merged
