################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
from datetime import datetime
import os
import signal
import sys
import tarfile

from . import archive
from . import cgroup
from . import dump
from . import launcher
from .budget import compute_budget
from .common.constants import LOG
from .common.constants import TIMESTAMP_FORMAT
from .config import MODE_DUMP
from .config import MODE_LAUNCH


def terminate(pid):
    LOG.info(f'Killing process {pid}')
    try:
        os.kill(int(pid), signal.SIGKILL)
    except ProcessLookupError:
        LOG.info(f'Process {pid} already exited')
    except OSError as e:
        LOG.error(f'Failed to kill process {pid}: {e}')


def LaunchHandler(config, app_args=()):
    missing = config.missing(MODE_LAUNCH)
    if missing:
        LOG.error(f'Missing required environment variables: {", ".join(missing)}')
        sys.exit(1)

    try:
        limit = cgroup.read_limit()
        budget = compute_budget(limit.bytes, config.thread_count, config.stack_kib)
    except ValueError as e:
        LOG.error(f'Refusing to launch the JVM: {e}')
        sys.exit(1)

    launcher.launch(budget, config, app_args)


def DumpHandler(config, pid):
    host_id = config.host_id
    timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)

    LOG.critical(f'JVM process {pid} on {host_id} ran out of memory, collecting dumps')

    missing = config.missing(MODE_DUMP)
    if missing:
        LOG.error(f'Missing environment variables {", ".join(missing)}, '
                  'the dump archive will not be uploaded')

    manifest = dump.collect(pid, host_id, config.dump_dir, config.tool_timeout)

    try:
        artifact = archive.bundle(manifest, timestamp, config.dump_dir)
    except (OSError, tarfile.TarError) as e:
        LOG.error(f'Failed to create dump archive: {e}')
        artifact = None

    if artifact and not missing:
        archive.upload(artifact, config.bucket, config.app_tag,
                       endpoint_url=config.endpoint_url,
                       max_attempts=config.upload_max_attempts,
                       timeout=config.upload_timeout)

    terminate(pid)
