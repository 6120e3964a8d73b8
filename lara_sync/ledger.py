#!/usr/bin/env python3
"""
Checksum ledger for incremental translation.

The ledger (lara.lock) remembers an MD5 of every source value per file.
Comparing a file against its snapshot tells the engine which keys are new,
updated, unchanged or deleted since the last run. MD5 is used for change
detection only.

lara.lock layout:

    version: 1.0.0
    files:
      <md5(file path)>:
        <ledger key>: <md5(value)>
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .format_handlers import FlatMap, FormatHandler, ParseOptions

logger = logging.getLogger(__name__)

LEDGER_FILE = "lara.lock"
LEDGER_VERSION = "1.0.0"

NEW = "new"
UPDATED = "updated"
UNCHANGED = "unchanged"
DELETED = "deleted"


@dataclass
class ChangeRecord:
    """State of one source key relative to the last snapshot."""
    value: Any
    state: str  # new, updated, unchanged, deleted


def value_hash(value: Any) -> str:
    """MD5 of a string as-is, of anything else as compact JSON."""
    if isinstance(value, str):
        data = value
    else:
        data = json.dumps(value, separators=(',', ':'), ensure_ascii=False)
    return hashlib.md5(data.encode('utf-8')).hexdigest()


class ChecksumLedger:
    """
    Persistent key -> value-hash snapshots, one per source file.

    The file is read once, on first use, and written back synchronously
    whenever a snapshot changes. There is no locking between processes:
    the last writer wins.
    """

    def __init__(self, path: Union[str, Path] = LEDGER_FILE):
        self.path = Path(path)
        self._data: Optional[dict[str, Any]] = None

    def load(self) -> dict[str, Any]:
        """Return the ledger contents, reading (or creating) the file on first call."""
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {'version': LEDGER_VERSION, 'files': {}}
            self.save()
            return self._data

        try:
            loaded = yaml.safe_load(self.path.read_text(encoding='utf-8')) or {}
        except yaml.YAMLError as e:
            logger.warning("Ignoring malformed ledger %s: %s", self.path, e)
            loaded = {}
        if not isinstance(loaded, dict):
            logger.warning("Ignoring malformed ledger %s", self.path)
            loaded = {}
        loaded.setdefault('version', LEDGER_VERSION)
        if not isinstance(loaded.get('files'), dict):
            loaded['files'] = {}
        self._data = loaded
        return self._data

    def save(self) -> None:
        """Write the ledger to disk."""
        data = self.load() if self._data is None else self._data
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            yaml.safe_dump(data, allow_unicode=True, sort_keys=False),
            encoding='utf-8',
        )

    def reset(self) -> None:
        """Forget the cached contents; the next call re-reads the file."""
        self._data = None

    @staticmethod
    def file_id(file_path: str) -> str:
        return hashlib.md5(file_path.encode('utf-8')).hexdigest()

    def snapshot(self, file_path: str) -> dict[str, str]:
        """Stored ledger key -> value hash for a file ({} if unknown)."""
        return dict(self.load()['files'].get(self.file_id(file_path)) or {})

    def calculate_checksum(
        self,
        file_path: str,
        handler: FormatHandler,
        locale: Optional[str] = None,
        identity: Optional[str] = None,
    ) -> dict[str, ChangeRecord]:
        """
        Classify every key of a source file against its last snapshot.

        Args:
            file_path: Source file path
            handler: Handler used to parse the file
            locale: For multi-locale files, the locale subtree to read
            identity: Name the snapshot is stored under (default: file_path).
                Pass a root-relative path so the entry does not depend on
                the working directory.

        Returns:
            Flat key -> ChangeRecord, in file order, followed by records for
            keys that disappeared (keyed by ledger key). {} if the file
            cannot be read.
        """
        try:
            content = Path(file_path).read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read %s: %s", file_path, e)
            return {}

        options = ParseOptions(locale=locale) if locale else None
        values: FlatMap = handler.parse(content, options)
        identity = identity or file_path
        stored = self.snapshot(identity)

        changelog: dict[str, ChangeRecord] = {}
        current: dict[str, str] = {}
        changed = False

        for key, value in values.items():
            ledger_key = handler.ledger_key(key)
            new_hash = value_hash(value)
            current[ledger_key] = new_hash

            if ledger_key not in stored:
                state = NEW
            elif stored[ledger_key] == new_hash:
                state = UNCHANGED
            else:
                state = UPDATED
            changed = changed or state != UNCHANGED
            changelog[key] = ChangeRecord(value=value, state=state)

        for ledger_key in stored:
            if ledger_key not in current:
                changelog.setdefault(ledger_key, ChangeRecord(value=None, state=DELETED))
                changed = True

        if changed:
            self.load()['files'][self.file_id(identity)] = current
            self.save()
            logger.debug("Ledger updated for %s", identity)

        return changelog
