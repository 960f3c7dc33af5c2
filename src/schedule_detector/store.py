"""JSON file store for analysed schedules, one record per person."""

from __future__ import annotations

import json
import time
from pathlib import Path

from pydantic import ValidationError

from schedule_detector import config
from schedule_detector.models import (
    AvailabilityGrid,
    ErrorKind,
    NavSnapshot,
    ProcessingError,
    ProcessingStage,
    ScheduleRecord,
    ScheduleStore,
)


def _store_error(message: str, path: Path, **details) -> ProcessingError:
    return ProcessingError(
        stage=ProcessingStage.STORE,
        error_type=ErrorKind.INPUT_INVALID,
        message=message,
        details={"path": str(path), **details},
    )


def empty_store() -> ScheduleStore:
    return ScheduleStore(version=config.STORE_VERSION, records=[])


def load_store(path: str | Path) -> ScheduleStore | ProcessingError:
    """Read the store; a missing file is an empty store."""
    path = Path(path)
    if not path.exists():
        return empty_store()
    try:
        raw = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        return _store_error(f"Could not read schedule store: {e}", path)

    if not isinstance(raw, dict) or raw.get("version") != config.STORE_VERSION:
        found = raw.get("version") if isinstance(raw, dict) else None
        return _store_error(
            f"Unsupported schedule store version {found!r}; expected {config.STORE_VERSION}",
            path,
            version=found,
        )
    try:
        return ScheduleStore.model_validate(raw)
    except ValidationError as e:
        return _store_error(f"Schedule store is malformed: {e.errors()[0]['msg']}", path)


def save_store(store: ScheduleStore, path: str | Path) -> Path | ProcessingError:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(store.model_dump(mode="json"), indent=2))
        tmp.replace(path)
    except OSError as e:
        return _store_error(f"Could not write schedule store: {e}", path)
    return path


def make_record(
    person: str,
    nav: NavSnapshot,
    availability: AvailabilityGrid,
    file_name: str = "",
) -> ScheduleRecord:
    return ScheduleRecord(
        person=person.strip(),
        file_name=file_name,
        nav=nav,
        availability=availability,
        saved_at=time.time(),
    )


def add_record(store: ScheduleStore, record: ScheduleRecord) -> ScheduleStore:
    """New store with ``record`` replacing any record of the same person."""
    kept = [r for r in store.records if r.person != record.person]
    return store.model_copy(update={"records": kept + [record]})


def remove_record(store: ScheduleStore, person: str) -> ScheduleStore:
    return store.model_copy(update={"records": [r for r in store.records if r.person != person]})


def clear_store(store: ScheduleStore) -> ScheduleStore:
    return store.model_copy(update={"records": []})
