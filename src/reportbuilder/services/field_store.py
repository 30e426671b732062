"""Persistence port for user-defined fields.

The registry loads its user fields from a store once and hands the full
list back after every mutation. Stores deal in plain structural data
(camelCase dicts), never in models.
"""

import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import orjson

from reportbuilder.core.exceptions import FieldStoreError
from reportbuilder.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_STORAGE_KEY = "report_builder_user_fields_v2"


class FieldStore(Protocol):
    """Key-value persistence for the user field list."""

    def load(self) -> list[dict[str, Any]]:
        """Return the saved field list (empty if nothing was saved)."""
        ...

    def save(self, fields: list[dict[str, Any]]) -> None:
        """Replace the saved field list."""
        ...


class InMemoryFieldStore:
    """Field store that lives only as long as the process."""

    def __init__(self, fields: list[dict[str, Any]] | None = None) -> None:
        self._fields = [dict(f) for f in fields or []]

    def load(self) -> list[dict[str, Any]]:
        return [dict(f) for f in self._fields]

    def save(self, fields: list[dict[str, Any]]) -> None:
        self._fields = [dict(f) for f in fields]


class JsonFileFieldStore:
    """
    Field store backed by a JSON file.

    The file holds a JSON object mapping storage keys to serialized field
    lists, so several field sets can share one file. A missing or corrupt
    file loads as an empty list.
    """

    def __init__(self, path: Path | str, storage_key: str = DEFAULT_STORAGE_KEY) -> None:
        self.path = Path(path)
        self.storage_key = storage_key

    def _read_document(self) -> dict[str, Any]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning(f"Could not read field store {self.path}: {e}")
            return {}

        try:
            document = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            logger.warning(f"Ignoring corrupt field store {self.path}: {e}")
            return {}

        if not isinstance(document, dict):
            logger.warning(f"Ignoring field store {self.path}: expected a JSON object")
            return {}
        return document

    def load(self) -> list[dict[str, Any]]:
        fields = self._read_document().get(self.storage_key, [])
        if not isinstance(fields, list):
            logger.warning(f"Ignoring field store entry '{self.storage_key}': expected a list")
            return []
        return [f for f in fields if isinstance(f, dict)]

    def save(self, fields: list[dict[str, Any]]) -> None:
        document = self._read_document()
        document[self.storage_key] = fields

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file and swap it in atomically
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(orjson.dumps(document, option=orjson.OPT_INDENT_2))
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise FieldStoreError(f"Could not save user fields to {self.path}", original_error=e) from e

        logger.debug(f"Saved {len(fields)} user fields to {self.path}")
