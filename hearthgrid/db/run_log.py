"""Run logging helpers (JSONL)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from hearthgrid.sim.contracts import LogEntry, RunStatus, WorldSnapshot

SCHEMA_VERSION = 1
RUN_LOG_NAME = "run.jsonl"


def create_run_folder(
    base_dir: Path, *, timestamp: str | None = None
) -> tuple[Path, Path]:
    run_id = timestamp or _format_timestamp(datetime.now(timezone.utc))
    run_dir = base_dir / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir, run_dir / RUN_LOG_NAME


def write_header(path: Path, metadata: dict[str, Any]) -> None:
    record: dict[str, Any] = {
        "type": "header",
        "schema_version": SCHEMA_VERSION,
        "metadata": metadata,
    }
    _append_record(path, record)


def append_log_entry(path: Path, entry: LogEntry) -> None:
    record: dict[str, Any] = {
        "type": "log",
        "schema_version": SCHEMA_VERSION,
        "entry": entry.model_dump(mode="json"),
    }
    _append_record(path, record)


def append_snapshot(path: Path, snapshot: WorldSnapshot, *, status: str) -> None:
    record: dict[str, Any] = {
        "type": "snapshot",
        "schema_version": SCHEMA_VERSION,
        "status": status,
        "snapshot": snapshot.model_dump(mode="json"),
    }
    _append_record(path, record)


def read_log_entries(path: Path) -> Iterator[LogEntry]:
    for record in _read_records(path):
        if record.get("type") != "log":
            continue
        entry = record.get("entry")
        if entry is None:
            continue
        yield LogEntry.model_validate(entry)


def read_final_snapshot(path: Path) -> WorldSnapshot | None:
    final = read_final_state(path)
    return final[0] if final else None


def read_final_state(path: Path) -> tuple[WorldSnapshot, RunStatus] | None:
    """Return the last saved snapshot with the run status recorded beside it."""
    final = None
    for record in _read_records(path):
        if record.get("type") == "snapshot" and record.get("snapshot") is not None:
            final = (
                WorldSnapshot.model_validate(record["snapshot"]),
                _parse_status(record.get("status")),
            )
    return final


def latest_run_folder(base_dir: Path) -> Path | None:
    if not base_dir.exists():
        return None
    run_dirs = [path for path in base_dir.iterdir() if path.is_dir()]
    if not run_dirs:
        return None
    return sorted(run_dirs)[-1]


def _read_records(path: Path) -> Iterator[dict[str, Any]]:
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            record = _parse_record(line)
            if record:
                yield record


def _parse_record(line: str) -> dict[str, Any] | None:
    try:
        loaded = json.loads(line)
    except json.JSONDecodeError:
        return None
    return loaded if isinstance(loaded, dict) else None


def _parse_status(value: Any) -> RunStatus:
    try:
        return RunStatus(value)
    except ValueError:
        return RunStatus.IDLE


def _append_record(path: Path, record: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(record))
        handle.write("\n")


def _format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H-%M-%SZ")
