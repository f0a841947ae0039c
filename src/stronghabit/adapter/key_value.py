# SPDX-License-Identifier: MIT

import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import quote, unquote


class KeyValueStore(Protocol):
    """Device-local string store keyed by string identifiers."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def list_keys(self) -> list[str]: ...


class FileKeyValueStore:
    """
    Stores every key in its own file inside a directory.

    Writes go to a temporary file that then replaces the key's file, so a
    crash loses the write but never leaves a partially written value.
    """

    SUFFIX = ".value"

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def __key_path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}{self.SUFFIX}"

    def get(self, key: str) -> Optional[str]:
        path = self.__key_path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        file_descriptor, temp_name = tempfile.mkstemp(
            dir=self.directory, prefix=".tmp-"
        )
        try:
            with os.fdopen(file_descriptor, "w", encoding="utf-8") as temp_file:
                temp_file.write(value)
            os.replace(temp_name, self.__key_path(key))
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self.__key_path(key).unlink(missing_ok=True)

    def list_keys(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            unquote(path.name.removesuffix(self.SUFFIX))
            for path in self.directory.iterdir()
            if path.name.endswith(self.SUFFIX)
        )


class MemoryKeyValueStore:
    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def list_keys(self) -> list[str]:
        return sorted(self._values.keys())
