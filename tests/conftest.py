"""
Shared helpers for the sortfiles tests.
"""

import os
import datetime as dt
from pathlib import Path

import pytest

from sortfiles.config import SortConfig


def utc(year, month, day, hour=12, minute=0):
    return dt.datetime(year, month, day, hour, minute, tzinfo=dt.timezone.utc)


def make_file(path, when: dt.datetime, content: bytes = b"data") -> str:
    """Create 'path' (and its parents) with 'content' and pin its mtime to 'when'."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    ts = when.timestamp()
    os.utime(path, (ts, ts))
    return str(path)


@pytest.fixture
def utc_config(tmp_path):
    """Factory for a UTC, year-month configuration rooted in tmp_path."""
    def _make(**overrides):
        src = tmp_path / "src"
        src.mkdir(exist_ok=True)
        values = dict(source=str(src), target=str(tmp_path / "out"), timezone=dt.timezone.utc)
        values.update(overrides)
        Path(values["target"]).mkdir(exist_ok=True)
        return SortConfig(**values)
    return _make
