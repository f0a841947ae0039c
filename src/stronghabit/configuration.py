# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Literal, NotRequired, Optional, TypedDict

from yaml import load

try:
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Loader  # type: ignore[assignment]
import platformdirs

APP_NAME = "stronghabit"
APP_VERSION = "1.0.0"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"
LOG_PATH: Path = platformdirs.user_log_path(APP_NAME) / "stronghabit.log"

# These will be set dynamically by load_data_path_configuration()
DATA_PATH: Path = platformdirs.user_data_path(APP_NAME)
DATA_STORE_DIR: Path = DATA_PATH / "store"
BACKUP_DIR: Path = DATA_PATH / "backups"

# Fixed keys in the key-value store
HABITS_KEY = "HABITFLOW_DATA_V1"
AUTO_BACKUP_CONFIG_KEY = "AUTO_BACKUP_CONFIG"
CLOUD_BACKUP_CONFIG_KEY = "CLOUD_BACKUP_CONFIG"
TIMEZONE_PREFERENCE_KEY = "@timezone_preference"
NOTIFICATIONS_KEY = "@settings_notifications"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class Configuration(TypedDict):
    data_path: Optional[str]
    backup_path: Optional[str]
    log_level: LogLevel
    run_auto_backup_on_start: bool
    run_cloud_sync_on_start: NotRequired[bool]
    cloud_folder: NotRequired[Optional[str]]


def load_data_path_configuration() -> None:
    """
    Load the configuration and set the DATA_PATH variables dynamically.

    This must be called after the config file exists and before the
    application context is built.
    """
    global DATA_PATH, DATA_STORE_DIR, BACKUP_DIR

    if not APP_CONFIG_PATH.is_file():
        # Config doesn't exist yet, use defaults
        return

    config: Optional[Configuration] = load(APP_CONFIG_PATH.read_text(), Loader=Loader)
    if config is None:
        return

    data_path_setting = config.get("data_path")
    if data_path_setting is not None:
        DATA_PATH = Path(data_path_setting)
        DATA_STORE_DIR = DATA_PATH / "store"
        BACKUP_DIR = DATA_PATH / "backups"

    backup_path_setting = config.get("backup_path")
    if backup_path_setting is not None:
        BACKUP_DIR = Path(backup_path_setting)
