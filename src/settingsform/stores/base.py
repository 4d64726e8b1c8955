from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from ..errors import StoreLoadError, StoreWriteError

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class OptionStore(Protocol):
    """Persistence collaborator holding one composite record per storage key."""

    def load(self, storage_key: str) -> Mapping[str, Any] | None:
        """Return the record stored under *storage_key*, or ``None``."""
        ...

    def ensure_registered(self, storage_key: str) -> None:
        """Declare *storage_key* as form-submittable.  Repeat calls are no-ops."""
        ...

    def save(self, storage_key: str, record: Mapping[str, Any]) -> None:
        """Replace the record stored under *storage_key*."""
        ...


class FileOptionStore(ABC):
    """Base class for stores keeping every record in a single file.

    Subclasses only translate between the file format and a mapping of
    storage key to record.  Writes go to a temporary file that is moved over
    the target so readers never observe a half-written file.
    """

    suffixes: tuple[str, ...] = ()

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.path)!r})"

    @abstractmethod
    def _parse(self, text: str) -> dict[str, Record]:
        pass

    @abstractmethod
    def _dump(self, data: Mapping[str, Record]) -> str:
        pass

    # ------------------------------------------------------------------
    def read_all(self) -> dict[str, Record]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreLoadError(f"cannot read {self.path}: {exc}") from exc
        if not text.strip():
            return {}
        try:
            data = self._parse(text)
        except StoreLoadError:
            raise
        except Exception as exc:
            raise StoreLoadError(f"cannot parse {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreLoadError(f"root of {self.path} must be a mapping")
        return data

    def write_all(self, data: Mapping[str, Record]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as fh:
                fh.write(self._dump(data))
            tmp.replace(self.path)
        except Exception as exc:
            tmp.unlink(missing_ok=True)
            raise StoreWriteError(f"cannot write {self.path}: {exc}") from exc
        logger.debug("wrote %d record(s) to %s", len(data), self.path)

    # ------------------------------------------------------------------
    # OptionStore API
    # ------------------------------------------------------------------
    def load(self, storage_key: str) -> Record | None:
        record = self.read_all().get(storage_key)
        if record is None:
            return None
        if not isinstance(record, Mapping):
            raise StoreLoadError(
                f"record {storage_key!r} in {self.path} is not a mapping"
            )
        return dict(record)

    def ensure_registered(self, storage_key: str) -> None:
        data = self.read_all()
        if storage_key in data:
            return
        data[storage_key] = {}
        self.write_all(data)
        logger.debug("registered record %s in %s", storage_key, self.path)

    def save(self, storage_key: str, record: Mapping[str, Any]) -> None:
        data = self.read_all()
        data[storage_key] = dict(record)
        self.write_all(data)
