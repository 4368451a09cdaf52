from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import AppError, BAD_CONFIG


ENV_SETTINGS_PATH = "SHEETMERGE_SETTINGS_PATH"
ENV_HEADER_SCAN_ROWS = "SHEETMERGE_HEADER_SCAN_ROWS"
ENV_PREVIEW_ROWS = "SHEETMERGE_PREVIEW_ROWS"
ENV_LOG_LEVEL = "SHEETMERGE_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class MergeSettings:
    """
    Tunables for header detection and previews.
    Defaults reproduce the fixed 20-row header window and 500-row preview cap.
    """
    header_scan_rows: int = 20
    preview_row_limit: int = 500
    raw_preview_rows: int = 20
    raw_preview_cols: int = 10
    log_level: str = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MergeSettings":
        known = {f.name for f in fields(cls)}
        settings = cls(**{k: v for k, v in data.items() if k in known})
        settings.validate()
        return settings

    def validate(self) -> None:
        for name in ("header_scan_rows", "preview_row_limit", "raw_preview_rows", "raw_preview_cols"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise AppError(BAD_CONFIG, f"{name} must be a positive integer (got {value!r})")
        if str(self.log_level).upper() not in _LOG_LEVELS:
            raise AppError(BAD_CONFIG, f"log_level must be one of {', '.join(_LOG_LEVELS)} (got {self.log_level!r})")
        self.log_level = str(self.log_level).upper()


def resolve_settings_path(project_root: Optional[str] = None) -> str:
    """Resolve the settings file path.

    Priority:
    1) SHEETMERGE_SETTINGS_PATH env var (absolute or relative)
    2) User-home scoped default: ~/.sheetmerge/settings.json
    """
    env = os.getenv(ENV_SETTINGS_PATH)
    if env:
        p = Path(env)
        if not p.is_absolute():
            base = Path(project_root) if project_root else Path.cwd()
            p = base / p
        return str(p)

    return str(Path.home() / ".sheetmerge" / "settings.json")


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw.strip())
    except ValueError:
        raise AppError(BAD_CONFIG, f"{name} must be an integer (got {raw!r})")


def load_settings(path: Optional[str] = None) -> MergeSettings:
    """
    Build MergeSettings from the settings file (if present), then apply
    environment overrides. Raises AppError(BAD_CONFIG) on invalid values.
    """
    data: Dict[str, Any] = {}
    p = Path(path or resolve_settings_path())
    if p.exists():
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise AppError(BAD_CONFIG, f"Could not read settings file: {e}", {"path": str(p)})
        if not isinstance(data, dict):
            raise AppError(BAD_CONFIG, "Settings file must contain a JSON object", {"path": str(p)})

    scan_rows = _env_int(ENV_HEADER_SCAN_ROWS)
    if scan_rows is not None:
        data["header_scan_rows"] = scan_rows
    preview_rows = _env_int(ENV_PREVIEW_ROWS)
    if preview_rows is not None:
        data["preview_row_limit"] = preview_rows
    level = os.getenv(ENV_LOG_LEVEL)
    if level:
        data["log_level"] = level.strip()

    return MergeSettings.from_dict(data)


def save_settings(settings: MergeSettings, path: Optional[str] = None) -> str:
    dest = Path(path or resolve_settings_path())
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
    return str(dest)
