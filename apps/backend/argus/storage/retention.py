from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any

from argus.util.logging import get_logger
from argus.util.time import now_utc, parse_iso8601

from .repo import ArgusRepo
from .store import RECORDINGS_KEY

logger = get_logger(__name__)


@dataclass
class RetentionSummary:
    retention_days: int
    cutoff: str | None
    total: int
    kept: int
    deleted: int
    unparsable: int
    skipped: bool

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class RetentionService:
    """Drops recordings older than the configured retention window.

    Meant to run once when the application starts. Recordings whose
    timestamp cannot be parsed are kept and reported.
    """

    def __init__(self, repo: ArgusRepo, clock: Callable[[], dt.datetime] = now_utc) -> None:
        self.repo = repo
        self.clock = clock

    def apply(self) -> RetentionSummary:
        days = self.repo.get_storage_config().retention_days
        if days == 0:
            logger.info("Retention policy is 'keep forever'; nothing to do")
            return RetentionSummary(
                retention_days=0, cutoff=None, total=0, kept=0, deleted=0, unparsable=0, skipped=True
            )

        cutoff = self.clock() - dt.timedelta(days=days)
        raw = self.repo.store.get(RECORDINGS_KEY, [])
        recordings: list[Any] = raw if isinstance(raw, list) else []

        kept: list[Any] = []
        unparsable: list[str] = []
        for item in recordings:
            stamp = parse_iso8601(item.get("timestamp")) if isinstance(item, dict) else None
            if stamp is None:
                unparsable.append(str(item.get("id")) if isinstance(item, dict) else "?")
                kept.append(item)
            elif stamp >= cutoff:
                kept.append(item)

        if unparsable:
            logger.warning("Keeping %s recording(s) with unreadable timestamps: %s", len(unparsable), ", ".join(unparsable))

        deleted = len(recordings) - len(kept)
        if deleted > 0:
            self.repo.store.set(RECORDINGS_KEY, kept)
            logger.info("Retention removed %s recording(s) older than %s days", deleted, days)

        return RetentionSummary(
            retention_days=days,
            cutoff=cutoff.isoformat(),
            total=len(recordings),
            kept=len(kept),
            deleted=deleted,
            unparsable=len(unparsable),
            skipped=False,
        )
