"""
liveness.store
AUTHOR: carter-vin

Flat-directory record store shared by emitter and checker processes

Contract:
- write: atomic replace (temp file in the same dir -> fsync -> os.replace)
- read: parsed dict, or None when the file was never written
- delete: no-op when absent
- list: names of present records (hidden temp files excluded)

No locking. Each file has exactly one writer role, and os.replace is atomic on
the same filesystem, so a reader sees the old or the new content, never a mix.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from liveness.config import resolve_data_dir
from liveness.errors import StoreError

TEMP_PREFIX = "."
TEMP_SUFFIX = ".tmp"


class RecordStore:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    @classmethod
    def default(cls, explicit: str | Path | None = None) -> "RecordStore":
        return cls(resolve_data_dir(explicit))

    def path_for(self, name: str) -> Path:
        return self.root / name

    def write(self, name: str, payload: dict[str, Any]) -> None:
        """
        Persist payload under name

        Failure semantics:
        - raises StoreError on IO errors; the temp file is cleaned up
        """
        path = self.path_for(name)

        # Deterministic JSON: stable ordering and compact formatting
        content = json.dumps(payload, sort_keys=True, separators=(",", ":")) + "\n"

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.root,
                prefix=TEMP_PREFIX + name + ".",
                suffix=TEMP_SUFFIX,
            )
        except OSError as e:
            raise StoreError("cannot create record", path) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise StoreError("cannot write record", path) from e

    def read(self, name: str) -> dict[str, Any] | None:
        """
        Load a record

        Returns:
        - dict if the file exists and parses to a JSON object
        - None if the file does not exist
        """
        path = self.path_for(name)

        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError("cannot read record", path) from e

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreError("corrupt record", path) from e

        if not isinstance(payload, dict):
            raise StoreError("record is not a JSON object", path)

        return payload

    def delete(self, name: str) -> None:
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StoreError("cannot delete record", path) from e

    def list(self) -> set[str]:
        """
        Names of records currently present

        Missing root means nothing has been written yet.
        """
        try:
            entries = list(os.scandir(self.root))
        except FileNotFoundError:
            return set()
        except OSError as e:
            raise StoreError("cannot list records", self.root) from e

        names: set[str] = set()
        for entry in entries:
            if entry.name.startswith(TEMP_PREFIX):
                continue
            try:
                if entry.is_file():
                    names.add(entry.name)
            except OSError as e:
                raise StoreError("cannot stat record", Path(entry.path)) from e

        return names
