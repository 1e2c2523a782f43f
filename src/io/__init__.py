"""I/O utilities for input tables, match snapshots and report artifacts."""

from src.io.snapshotting import build_and_write_snapshot, get_latest_snapshot_path
from src.io.tables import load_directories, load_table

__all__ = ["build_and_write_snapshot", "get_latest_snapshot_path", "load_directories", "load_table"]
