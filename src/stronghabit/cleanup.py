# SPDX-License-Identifier: MIT

import atexit

from stronghabit.app_context import AppContext


def flush(app_context: AppContext) -> None:
    app_context.configuration.flush()


def register_cleanup(app_context: AppContext) -> None:
    atexit.register(flush, app_context)
