from __future__ import annotations

import logging
import threading
from contextlib import AbstractContextManager, contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Iterator, Protocol

import pandas as pd

from src.io.snapshotting import write_parquet_atomic
from src.matching.models import Match, matches_from_frame, matches_to_frame

logger = logging.getLogger(__name__)


class MatchStore(Protocol):
    def delete_matches_for_student(self, student_id: int) -> int:
        """Remove every match of one student; returns the number removed."""

    def save_match(self, match: Match) -> Match:
        """Insert or replace the match for its (student, scholarship) pair."""

    def find_matches_for_student(self, student_id: int) -> list[Match]:
        """Matches of one student ordered by score, highest first."""

    def find_matches_above_score(self, min_score: float) -> list[Match]:
        """Matches whose score is at least `min_score`."""

    def all_matches(self) -> list[Match]:
        """Every stored match."""

    def transaction(self) -> AbstractContextManager[None]:
        """Group writes so they commit together or not at all."""


def _ordered(matches: list[Match]) -> list[Match]:
    return sorted(matches, key=lambda match: (-match.match_score, match.scholarship_id, match.student_id))


class InMemoryMatchStore:
    """Dict-backed store keyed on (student_id, scholarship_id).

    A re-entrant lock is held for the whole of a transaction, so readers on
    other threads never see a student halfway through regeneration.
    """

    def __init__(self, matches: list[Match] | None = None) -> None:
        self._lock = threading.RLock()
        self._matches: dict[tuple[int, int], Match] = {}
        self._depth = 0
        for match in matches or []:
            self._matches[match.key] = self._stored(match)

    @staticmethod
    def _stored(match: Match) -> Match:
        return replace(match, has_application=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Nested transactions join the outermost one, which alone snapshots and commits."""
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            snapshot = dict(self._matches)
            self._depth = 1
            try:
                yield
                self._depth = 0
                self._commit()
            except Exception:
                self._matches = snapshot
                logger.warning("Match store transaction rolled back (%d matches restored).", len(snapshot))
                raise
            finally:
                self._depth = 0

    def _commit(self) -> None:
        """Hook for persistent subclasses; called when the outermost write completes."""

    def delete_matches_for_student(self, student_id: int) -> int:
        with self.transaction():
            keys = [key for key in self._matches if key[0] == student_id]
            for key in keys:
                del self._matches[key]
            return len(keys)

    def save_match(self, match: Match) -> Match:
        stored = self._stored(match)
        with self.transaction():
            self._matches[stored.key] = stored
        return stored

    def find_matches_for_student(self, student_id: int) -> list[Match]:
        with self._lock:
            selected = [match for key, match in self._matches.items() if key[0] == student_id]
        return [replace(match) for match in _ordered(selected)]

    def find_matches_above_score(self, min_score: float) -> list[Match]:
        with self._lock:
            selected = [match for match in self._matches.values() if match.match_score >= min_score]
        return [replace(match) for match in _ordered(selected)]

    def all_matches(self) -> list[Match]:
        with self._lock:
            selected = list(self._matches.values())
        return [replace(match) for match in _ordered(selected)]

    def to_frame(self) -> pd.DataFrame:
        return matches_to_frame(self.all_matches())


class ParquetMatchStore(InMemoryMatchStore):
    """In-memory store mirrored to a single parquet file.

    The file is rewritten atomically when the outermost transaction commits,
    or after each write made outside a transaction.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        existing: list[Match] = []
        if path.exists():
            existing = matches_from_frame(pd.read_parquet(path))
            logger.info("Loaded %d matches from %s", len(existing), path)
        super().__init__(existing)

    def _commit(self) -> None:
        write_parquet_atomic(self.to_frame(), self.path)
