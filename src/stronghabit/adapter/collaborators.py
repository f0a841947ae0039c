# SPDX-License-Identifier: MIT

import logging
import shutil
from pathlib import Path
from typing import Optional, Protocol

from stronghabit.model.backup import CloudAccount

logger = logging.getLogger(__name__)


class ReminderScheduler(Protocol):
    def schedule(
        self, habit_id: str, title: str, body: str, hour: int, minute: int
    ) -> Optional[str]:
        """Schedule a daily reminder and return a handle for cancelling it."""
        ...

    def cancel(self, notification_id: str) -> None: ...


class Sharer(Protocol):
    def is_available(self) -> bool: ...

    def share(self, path: Path) -> None: ...


class FilePicker(Protocol):
    def pick(self) -> Optional[Path]:
        """Return the chosen file, or None when the user cancelled."""
        ...


class CloudProvider(Protocol):
    def authenticate(self) -> CloudAccount: ...

    def upload(self, path: Path) -> None: ...

    def download_latest(self, destination: Path) -> None:
        """Write the most recent uploaded blob to `destination`."""
        ...


class LoggingReminderScheduler:
    """Records reminders in the log instead of delivering notifications."""

    def schedule(
        self, habit_id: str, title: str, body: str, hour: int, minute: int
    ) -> Optional[str]:
        notification_id = f"habit-reminder-{habit_id}"
        logger.info(
            "scheduled reminder %s for %02d:%02d: %s", notification_id, hour, minute, title
        )
        return notification_id

    def cancel(self, notification_id: str) -> None:
        logger.info("cancelled reminder %s", notification_id)


class FolderSharer:
    """Shares a file by copying it into a destination folder."""

    def __init__(self, destination: Optional[Path]) -> None:
        self.destination = destination

    def is_available(self) -> bool:
        return self.destination is not None and self.destination.is_dir()

    def share(self, path: Path) -> None:
        if self.destination is None:
            raise OSError("no share destination configured")
        shutil.copy(path, self.destination)


class PathFilePicker:
    """Picks a file chosen up front, e.g. from a command line argument."""

    def __init__(self, path: Optional[Path]) -> None:
        self.path = path

    def pick(self) -> Optional[Path]:
        return self.path


class NullCloudProvider:
    """Stand-in provider for when no cloud service is wired up."""

    def authenticate(self) -> CloudAccount:
        return {"user_id": "local", "email": None}

    def upload(self, path: Path) -> None:
        logger.info("no cloud provider available, skipped upload of %s", path.name)

    def download_latest(self, destination: Path) -> None:
        raise OSError("no cloud provider available")


class FolderCloudProvider:
    """
    Uses a folder kept in sync by a desktop client (Dropbox, iCloud Drive,
    Google Drive) as the cloud.
    """

    def __init__(self, folder: Path) -> None:
        self.folder = folder

    def authenticate(self) -> CloudAccount:
        if not self.folder.is_dir():
            raise OSError(f"cloud folder does not exist: {self.folder}")
        return {"user_id": str(self.folder), "email": None}

    def upload(self, path: Path) -> None:
        shutil.copy(path, self.folder / path.name)

    def download_latest(self, destination: Path) -> None:
        candidates = sorted(
            self.folder.glob("*.json"), key=lambda candidate: candidate.stat().st_mtime
        )
        if not candidates:
            raise OSError(f"no backups found in {self.folder}")
        shutil.copyfile(candidates[-1], destination)
