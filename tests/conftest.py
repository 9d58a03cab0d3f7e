# Shared pytest fixtures
from __future__ import annotations

import struct
from collections.abc import Callable
from pathlib import Path

import pytest
import shapefile

from attrtable_reset.logging.init import reset_logging

OLD_FIELDS = [("NAME", "C", 20, 0), ("AREA", "N", 12, 3), ("CODE", "C", 5, 0)]


@pytest.fixture(autouse=True)
def _fresh_logging():
    # The stdout handler binds to the stream current at setup time (capsys)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write_empty_geometry(base: Path) -> Path:
    """Write a point .shp/.shx pair holding zero records."""
    header = (
        struct.pack(">6i", 9994, 0, 0, 0, 0, 0)
        + struct.pack(">i", 50)  # file length in 16-bit words (header only)
        + struct.pack("<2i", 1000, shapefile.POINT)
        + struct.pack("<8d", 0, 0, 0, 0, 0, 0, 0, 0)
    )
    shp = base.with_suffix(".shp")
    shp.write_bytes(header)
    base.with_suffix(".shx").write_bytes(header)
    return shp


def write_point_shapefile(base: Path, count: int, *, old_table: bool = True) -> Path:
    """Write a point shapefile with `count` features and a 3-field attribute table."""
    base.parent.mkdir(parents=True, exist_ok=True)
    if count == 0:
        shp = _write_empty_geometry(base)
        if old_table:
            w = shapefile.Writer(dbf=str(base.with_suffix(".dbf")))
            for name, code, size, decimal in OLD_FIELDS:
                w.field(name, code, size=size, decimal=decimal)
            w.close()
        return shp

    w = shapefile.Writer(str(base), shapeType=shapefile.POINT)
    for name, code, size, decimal in OLD_FIELDS:
        w.field(name, code, size=size, decimal=decimal)
    for i in range(count):
        w.point(float(i), float(i) * 2.0)
        w.record(f"pt{i}", i * 1.5, "X")
    w.close()
    if not old_table:
        base.with_suffix(".dbf").unlink()
    return base.with_suffix(".shp")


@pytest.fixture()
def make_shapefile(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str, count: int, *, old_table: bool = True) -> Path:
        return write_point_shapefile(tmp_path / "data" / name, count, old_table=old_table)
    return _make


class RecordingHost:
    """HostCallbacks fake that records every call.

    cancel_at_percent: request cancellation once a notification at or above
    this percent has been reported.
    """

    def __init__(self, cancel_at_percent: int | None = None) -> None:
        self.progress: list[tuple[str, int]] = []
        self.messages: list[str] = []
        self.errors: list[tuple[str, BaseException]] = []
        self.resets = 0
        self.cancel_checks = 0
        self.cancel_at_percent = cancel_at_percent
        self._cancel = False

    def report_progress(self, label: str, percent: int) -> None:
        self.progress.append((label, percent))
        if self.cancel_at_percent is not None and percent >= self.cancel_at_percent:
            self._cancel = True

    def reset_progress(self) -> None:
        self.resets += 1

    def request_cancel(self) -> None:
        self._cancel = True

    def is_cancel_requested(self) -> bool:
        self.cancel_checks += 1
        return self._cancel

    def show_message(self, text: str) -> None:
        self.messages.append(text)

    def log_error(self, context: str, error: BaseException) -> None:
        self.errors.append((context, error))

    @property
    def percents(self) -> list[int]:
        return [p for _, p in self.progress]


class FakeStore:
    """In-memory attribute store with the AttributeStore surface."""

    def __init__(self, path, schema, truncate=True, encoding="utf-8", fail_on_row: int | None = None, error: BaseException | None = None):
        self.path = path
        self.schema = tuple(schema)
        self.truncate = truncate
        self.encoding = encoding
        self.rows: list[tuple] = []
        self.flush_calls = 0
        self.discarded = False
        self._fail_on_row = fail_on_row
        self._error = error

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def append_row(self, values) -> None:
        if self._fail_on_row is not None and len(self.rows) + 1 == self._fail_on_row:
            raise self._error
        self.rows.append(tuple(values))

    def flush(self) -> None:
        self.flush_calls += 1

    def discard(self) -> None:
        self.discarded = True


class StoreRecorder:
    """store_factory that keeps every FakeStore it creates."""

    def __init__(self, **store_kwargs) -> None:
        self.created: list[FakeStore] = []
        self._store_kwargs = store_kwargs

    def __call__(self, path, schema, truncate=True, encoding="utf-8") -> FakeStore:
        store = FakeStore(path, schema, truncate=truncate, encoding=encoding, **self._store_kwargs)
        self.created.append(store)
        return store

    @property
    def store(self) -> FakeStore:
        assert len(self.created) == 1
        return self.created[0]


@pytest.fixture()
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture()
def store_recorder() -> StoreRecorder:
    return StoreRecorder()
