# SPDX-License-Identifier: MIT

import shutil
from pathlib import Path


class FileStorage:
    """UTF-8 text file access rooted at a single directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, file_name: str) -> Path:
        return self.directory / file_name

    def ensure_directory(self) -> None:
        if not self.directory.is_dir():
            self.directory.mkdir(parents=True, exist_ok=True)

    def list_files(self) -> list[str]:
        return sorted(path.name for path in self.directory.iterdir() if path.is_file())

    def exists(self, file_name: str) -> bool:
        return self.path_for(file_name).is_file()

    def size(self, file_name: str) -> int:
        return self.path_for(file_name).stat().st_size

    def read_text(self, file_name: str) -> str:
        return self.path_for(file_name).read_text(encoding="utf-8")

    def write_text(self, file_name: str, content: str) -> None:
        self.path_for(file_name).write_text(content, encoding="utf-8")

    def delete(self, file_name: str) -> None:
        self.path_for(file_name).unlink(missing_ok=True)

    def copy_in(self, source: Path, file_name: str) -> None:
        shutil.copyfile(source, self.path_for(file_name))
