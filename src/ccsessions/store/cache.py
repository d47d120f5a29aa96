"""Modification-time gated cache of derived transcript metadata.

The cache is a single JSON object mapping session id to the fields the
scanner derives. An entry is reused only while its ``modified_ts`` equals
the transcript's current mtime in whole seconds, so unchanged transcripts
are never re-read on refresh. Content edits that keep the mtime are not
noticed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..models import CachedMetadata
from ..parsers.session import scan_session_file

logger = logging.getLogger(__name__)


def mtime_seconds(stat_result) -> int:
    return int(stat_result.st_mtime)


class MetadataCache:
    """Persisted ``id -> CachedMetadata`` map backed by one JSON file."""

    def __init__(self, cache_file: str | Path) -> None:
        self.cache_file = Path(cache_file)

    def load(self) -> dict[str, CachedMetadata]:
        """Read the cache file; a missing or corrupt file yields an empty map."""
        try:
            raw = self.cache_file.read_text(encoding="utf-8")
        except OSError:
            return {}
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            logger.debug("Ignoring corrupt cache file %s", self.cache_file)
            return {}
        if not isinstance(data, dict):
            return {}

        entries = {}
        for session_id, value in data.items():
            if not isinstance(value, dict):
                continue
            try:
                entries[session_id] = CachedMetadata.from_dict(value)
            except (KeyError, TypeError, ValueError):
                continue
        return entries

    def reconcile(
        self,
        transcript_path: Path,
        session_id: str,
        mtime: int,
        cache: dict[str, CachedMetadata],
        new_cache: dict[str, CachedMetadata],
    ) -> CachedMetadata:
        """Return metadata for a transcript, rescanning only when stale.

        A hit is carried over into ``new_cache`` untouched. On a miss or an
        mtime mismatch the transcript is scanned and the fresh entry stored in
        ``new_cache``. An unreadable transcript is recorded as having no title,
        no messages and an empty first message.
        """
        cached = cache.get(session_id)
        if cached is not None and cached.modified_ts == mtime:
            new_cache[session_id] = cached
            return cached

        try:
            title, count, first = scan_session_file(transcript_path)
        except OSError as e:
            logger.debug("Scan failed for %s: %s", transcript_path, e)
            title, count, first = None, 0, ""

        logger.debug("Rescanned %s (%d messages)", session_id, count)
        entry = CachedMetadata(
            custom_name=title,
            message_count=count,
            first_message=first,
            modified_ts=mtime,
        )
        new_cache[session_id] = entry
        return entry

    def persist(self, entries: dict[str, CachedMetadata]) -> bool:
        """Overwrite the cache file with ``entries``.

        Failures are logged and reported as False; they never raise.
        """
        payload = {session_id: meta.to_dict() for session_id, meta in entries.items()}
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            self.cache_file.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not write session cache %s: %s", self.cache_file, e)
            return False
        return True

    def evict(self, session_id: str) -> bool:
        """Drop one entry and persist, if it was cached. Best effort."""
        entries = self.load()
        if entries.pop(session_id, None) is None:
            return False
        return self.persist(entries)
