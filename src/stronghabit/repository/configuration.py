# SPDX-License-Identifier: MIT

from copy import deepcopy
from typing import Optional

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from stronghabit import configuration


def get_default_config() -> configuration.Configuration:
    return {
        "data_path": None,
        "backup_path": None,
        "log_level": "INFO",
        "run_auto_backup_on_start": True,
        "run_cloud_sync_on_start": False,
        "cloud_folder": None,
    }


class ConfigurationRepository:
    def __init__(self) -> None:
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError()
        return self._config

    def __load_data(self) -> None:
        self._config = load(configuration.APP_CONFIG_PATH.read_text(), Loader=Loader)

        if self._config is None:
            self._config = get_default_config()
            self.is_dirty = True
            return

        # Migration: Add fields introduced after the config file was written
        if "backup_path" not in self._config:
            self._config["backup_path"] = None
        if "log_level" not in self._config:
            self._config["log_level"] = "INFO"
        if "run_auto_backup_on_start" not in self._config:
            self._config["run_auto_backup_on_start"] = True
        if "run_cloud_sync_on_start" not in self._config:
            self._config["run_cloud_sync_on_start"] = False
        if "cloud_folder" not in self._config:
            self._config["cloud_folder"] = None

    def __save_data(self, config: configuration.Configuration) -> None:
        configuration.APP_CONFIG_PATH.write_text(dump(config, Dumper=Dumper))

    def flush(self) -> None:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def update_config(
        self,
        data_path: Optional[str] = None,
        remove_data_path: bool = False,
        backup_path: Optional[str] = None,
        remove_backup_path: bool = False,
        log_level: Optional[configuration.LogLevel] = None,
        run_auto_backup_on_start: Optional[bool] = None,
        run_cloud_sync_on_start: Optional[bool] = None,
        cloud_folder: Optional[str] = None,
        remove_cloud_folder: bool = False,
    ) -> None:
        self.is_dirty = True

        if data_path is not None:
            self.config["data_path"] = data_path
        if remove_data_path:
            self.config["data_path"] = None
        if backup_path is not None:
            self.config["backup_path"] = backup_path
        if remove_backup_path:
            self.config["backup_path"] = None
        if log_level is not None:
            self.config["log_level"] = log_level
        if run_auto_backup_on_start is not None:
            self.config["run_auto_backup_on_start"] = run_auto_backup_on_start
        if run_cloud_sync_on_start is not None:
            self.config["run_cloud_sync_on_start"] = run_cloud_sync_on_start
        if cloud_folder is not None:
            self.config["cloud_folder"] = cloud_folder
        if remove_cloud_folder:
            self.config["cloud_folder"] = None
