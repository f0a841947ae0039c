# SPDX-License-Identifier: MIT

import logging

from yaml import dump

try:
    from yaml import CDumper as Dumper
except ImportError:
    from yaml import Dumper  # type: ignore[assignment]

from stronghabit import configuration
from stronghabit.app_context import AppContext, build_app_context
from stronghabit.errors import StrongHabitError
from stronghabit.logger import setup_logging
from stronghabit.repository.configuration import (
    ConfigurationRepository,
    get_default_config,
)

logger = logging.getLogger(__name__)


def initialize() -> AppContext:
    configuration.CONFIG_PATH.mkdir(parents=True, exist_ok=True)
    __ensure_config_files()
    configuration.load_data_path_configuration()
    configuration.DATA_PATH.mkdir(parents=True, exist_ok=True)

    configuration_repository = ConfigurationRepository()
    config = configuration_repository.get_config()
    setup_logging(config["log_level"], configuration.LOG_PATH)

    app_context = build_app_context(configuration_repository)
    app_context.habits.initialize()
    app_context.backups.initialize_backup_system()

    __run_startup_tasks(app_context)

    return app_context


def __ensure_config_files() -> None:
    if not configuration.APP_CONFIG_PATH.is_file():
        configuration.APP_CONFIG_PATH.touch()
        config = get_default_config()
        configuration.APP_CONFIG_PATH.write_text(dump(config, Dumper=Dumper))


def __run_startup_tasks(app_context: AppContext) -> None:
    config = app_context.configuration.get_config()

    if config["run_auto_backup_on_start"]:
        try:
            if app_context.backups.run_auto_backup_if_needed():
                logger.info("automatic backup created on start")
        except StrongHabitError as error:
            logger.warning("automatic backup on start failed: %s", error)

    if config.get("run_cloud_sync_on_start", False):
        try:
            if app_context.cloud.run_cloud_sync_if_needed():
                logger.info("cloud sync completed on start")
        except StrongHabitError as error:
            logger.warning("cloud sync on start failed: %s", error)
