################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import sys

from . import supervisor
from .common.constants import DUMP_TRIGGER
from .common.constants import LOG
from .config import ConfigError
from .config import load_config
from .config import MODE_DUMP
from .config import MODE_LAUNCH


def parse_mode(argv):
    """Return (mode, pid, app_args) for the command line arguments after argv[0]."""
    if argv and argv[0] == DUMP_TRIGGER:
        # -XX:OnOutOfMemoryError="<this program> makedump %p"
        if len(argv) != 2 or not argv[1].isdigit():
            raise ValueError(f'Usage: {DUMP_TRIGGER} <pid>')
        return MODE_DUMP, int(argv[1]), []
    return MODE_LAUNCH, None, list(argv)


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    try:
        mode, pid, app_args = parse_mode(argv)
    except ValueError as e:
        LOG.error(str(e))
        sys.exit(1)

    try:
        config = load_config()
    except ConfigError as e:
        LOG.error(f'Invalid configuration: {e}')
        if mode == MODE_DUMP:
            supervisor.terminate(pid)
        sys.exit(1)

    if mode == MODE_DUMP:
        supervisor.DumpHandler(config, pid)
        sys.exit(0)

    supervisor.LaunchHandler(config, app_args)


if __name__ == "__main__":
    main()
