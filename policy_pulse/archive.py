from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Iterable, List, Union

from .config import ARCHIVE_ITEM_LIMIT, WINDOW_DAYS
from .exceptions import ArchiveError
from .models import ArchiveRecord, NewsItem

logger = logging.getLogger(__name__)

_DATED_FILE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}\.json$")


class ArchiveStore:
    """
    One JSON file per calendar day, ``<YYYY-MM-DD>.json``.

    Writes replace the day's file atomically; reads return the trailing window
    of days in ascending date order. Files are never deleted.
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    def path_for(self, date: str) -> Path:
        return self.directory / f"{date}.json"

    def archive(self, date: str, items: Iterable[NewsItem]) -> Path:
        """Persist the first ARCHIVE_ITEM_LIMIT items for ``date``, replacing any earlier file."""
        items = list(items)
        record = ArchiveRecord(date=date, items=tuple(items[:ARCHIVE_ITEM_LIMIT]))
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.path_for(date)

        fd, tmp = tempfile.mkstemp(prefix=f".{date}.", suffix=".tmp", dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(record.to_dict(), fh, ensure_ascii=False, indent=2)
            os.replace(tmp, target)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

        logger.info("Archived %d of %d items to %s", len(record.items), len(items), target.name)
        return target

    def dated_files(self) -> List[Path]:
        if not self.directory.is_dir():
            return []
        # ISO dates are zero-padded, so name order is date order
        return sorted(p for p in self.directory.iterdir() if _DATED_FILE_RE.match(p.name))

    def load(self, path: Path) -> ArchiveRecord:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return ArchiveRecord.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise ArchiveError(f"Corrupt archive file: {path} ({e})") from e

    def load_recent_window(self, days: int = WINDOW_DAYS) -> List[ArchiveRecord]:
        """
        Return up to ``days`` most recent records, oldest first.

        A file that cannot be read raises ArchiveError rather than being
        skipped, since a silently shorter window would skew trend analysis.
        """
        files = self.dated_files()[-days:] if days > 0 else []
        return [self.load(p) for p in files]
