"""
sheetmerge/session.py — Files taking part in a merge, and their selections.

A MergeSession owns the UploadedFile list between merges: adding a file
loads it once, picks its first sheet and auto-detects the header row;
changing the sheet re-detects; overriding the header row only refreshes the
previews. Exactly one file is the main file while the session has files.

Selections can be saved to JSON and reloaded. Only files added from a path
are saved, since the raw bytes are not persisted.
"""
from __future__ import annotations

import json
import os
import uuid
from typing import Any, Dict, List, Optional

from .config import MergeSettings, load_settings
from .engine import merge_workbooks
from .errors import AppError, DUPLICATE_FILE_ID, FILE_NOT_FOUND, SHEET_NOT_FOUND, SOURCE_READ_FAILED
from .header import detect_header_row, get_raw_top_rows
from .io import SpreadsheetDocument, load_workbook_info
from .models import MergeOptions, MergeResult, UploadedFile
from .parsing import parse_header_row
from .preview import get_preview_data


class MergeSession:
    def __init__(self, settings: Optional[MergeSettings] = None) -> None:
        self.settings = settings or load_settings()
        self.files: List[UploadedFile] = []
        self._docs: Dict[str, SpreadsheetDocument] = {}

    # ---------- Lookup ----------

    def get(self, file_id: str) -> UploadedFile:
        for f in self.files:
            if f.id == file_id:
                return f
        raise AppError(FILE_NOT_FOUND, f"No file with id {file_id!r}", {"file_id": file_id})

    @property
    def main_file(self) -> Optional[UploadedFile]:
        return next((f for f in self.files if f.is_main), None)

    @property
    def secondary_files(self) -> List[UploadedFile]:
        return [f for f in self.files if not f.is_main]

    # ---------- File lifecycle ----------

    def add_file(
        self,
        name: str,
        data: bytes = b"",
        path: str = "",
        file_id: Optional[str] = None,
    ) -> UploadedFile:
        if file_id and any(f.id == file_id for f in self.files):
            raise AppError(
                DUPLICATE_FILE_ID,
                f"A file with id {file_id!r} is already in the session",
                {"file_id": file_id},
            )
        if not data and path:
            try:
                with open(path, "rb") as f:
                    data = f.read()
            except OSError as e:
                raise AppError(SOURCE_READ_FAILED, f"Failed to read file: {e}", {"name": name, "path": path})

        doc, sheet_names = load_workbook_info(data, name=name)
        uploaded = UploadedFile(
            id=file_id or uuid.uuid4().hex,
            name=name,
            data=data,
            path=path,
            is_main=self.main_file is None,
            sheet_names=sheet_names,
            selected_sheet=sheet_names[0] if sheet_names else "",
        )
        self._docs[uploaded.id] = doc
        uploaded.header_row_index = detect_header_row(doc, uploaded.selected_sheet, self.settings)
        self._refresh_previews(uploaded)
        self.files.append(uploaded)
        return uploaded

    def add_path(self, path: str, file_id: Optional[str] = None) -> UploadedFile:
        return self.add_file(os.path.basename(path), path=path, file_id=file_id)

    def remove_file(self, file_id: str) -> None:
        uploaded = self.get(file_id)
        self.files.remove(uploaded)
        self._docs.pop(file_id, None)
        if uploaded.is_main and self.files:
            self.files[0].is_main = True

    def set_main(self, file_id: str) -> None:
        target = self.get(file_id)
        for f in self.files:
            f.is_main = f is target

    def select_sheet(self, file_id: str, sheet_name: str) -> UploadedFile:
        uploaded = self.get(file_id)
        if sheet_name not in uploaded.sheet_names:
            raise AppError(
                SHEET_NOT_FOUND,
                f"Sheet '{sheet_name}' not found in {uploaded.name}",
                {"sheet": sheet_name, "available": list(uploaded.sheet_names)},
            )
        uploaded.selected_sheet = sheet_name
        uploaded.header_row_index = detect_header_row(self._doc(uploaded), sheet_name, self.settings)
        self._refresh_previews(uploaded)
        return uploaded

    def set_header_row(self, file_id: str, header_row: Any) -> UploadedFile:
        uploaded = self.get(file_id)
        uploaded.header_row_index = parse_header_row(header_row)
        self._refresh_previews(uploaded)
        return uploaded

    def _doc(self, uploaded: UploadedFile) -> SpreadsheetDocument:
        doc = self._docs.get(uploaded.id)
        if doc is None:
            doc = SpreadsheetDocument.from_bytes(uploaded.data, name=uploaded.name)
            self._docs[uploaded.id] = doc
        return doc

    def _refresh_previews(self, uploaded: UploadedFile) -> None:
        doc = self._doc(uploaded)
        uploaded.raw_top_rows = get_raw_top_rows(doc, uploaded.selected_sheet, settings=self.settings)
        preview = get_preview_data(doc, uploaded.selected_sheet, uploaded.header_row_index, self.settings)
        uploaded.headers = preview.headers
        uploaded.preview_rows = preview.rows

    # ---------- Merge ----------

    def build_options(self, key_column: str = "", **kwargs: Any) -> MergeOptions:
        main = self.main_file
        return MergeOptions(
            main_file_id=main.id if main else "",
            secondary_file_ids=[f.id for f in self.secondary_files],
            key_column=key_column,
            **kwargs,
        )

    def merge(self, options: Optional[MergeOptions] = None, **kwargs: Any) -> MergeResult:
        opts = options or self.build_options(**kwargs)
        return merge_workbooks(self.files, opts, settings=self.settings)

    # ---------- Serialization ----------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": [
                {
                    "id": f.id,
                    "path": f.path,
                    "is_main": f.is_main,
                    "selected_sheet": f.selected_sheet,
                    "header_row_index": f.header_row_index,
                }
                for f in self.files
                if f.path
            ]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], settings: Optional[MergeSettings] = None) -> "MergeSession":
        session = cls(settings)
        for entry in data.get("files", []):
            uploaded = session.add_path(entry["path"], file_id=entry.get("id"))
            sheet = entry.get("selected_sheet") or uploaded.selected_sheet
            if sheet != uploaded.selected_sheet:
                session.select_sheet(uploaded.id, sheet)
            if "header_row_index" in entry:
                session.set_header_row(uploaded.id, entry["header_row_index"])
            if entry.get("is_main"):
                session.set_main(uploaded.id)
        return session

    def save_json(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_json(cls, path: str, settings: Optional[MergeSettings] = None) -> "MergeSession":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data, settings)
