################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import collections
import io
import os.path

from .budget import convert_from_bytes
from .budget import convert_to_bytes
from .common.constants import CGROUP_ROOT
from .common.constants import CGROUP_V1_MEMORY_LIMIT
from .common.constants import CGROUP_V2_CONTROLLERS
from .common.constants import CGROUP_V2_MEMORY_MAX
from .common.constants import CGROUP_V2_UNLIMITED
from .common.constants import LOG
from .common.constants import PROC_MEMINFO
from .common.constants import SOURCE_CGROUP_V1
from .common.constants import SOURCE_CGROUP_V2
from .common.constants import SOURCE_HOST_FALLBACK

ResourceLimit = collections.namedtuple('ResourceLimit', ['bytes', 'source'])


def detect_cgroup_version(cgroup_root=CGROUP_ROOT):
    # cgroup v2 has a controllers file at the root of the hierarchy
    if os.path.isfile(os.path.join(cgroup_root, CGROUP_V2_CONTROLLERS)):
        return 2
    return 1


def _read_value(path):
    try:
        with io.open(path, "r") as f:
            return f.read().strip()
    except IOError as e:
        LOG.debug(f'Unable to read {path}: {e}')
    return None


def _parse_positive(value):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def read_host_memory_bytes(meminfo=PROC_MEMINFO):
    """Function that returns the total host memory reported by the kernel.

    Parameters
    ----------
    meminfo : str
        Path of the memory information pseudo-file

    Returns
    -------
    int
        Total memory in bytes, or None when MemTotal can't be read
    """
    try:
        with io.open(meminfo, "r") as f:
            for line in f:
                if line.startswith("MemTotal:"):
                    # MemTotal:       16318412 kB
                    return convert_to_bytes(int(line.split()[1]), 'k')
    except (IOError, IndexError, ValueError) as e:
        LOG.error(f'Failed to read host memory from {meminfo}: {e}')
    return None


def read_limit(cgroup_root=CGROUP_ROOT, meminfo=PROC_MEMINFO):
    """Function that reads the memory ceiling enforced on this container.

    On cgroup v2 the limit is read from memory.max, where "max" means that
    no limit is set. On cgroup v1 the limit is read from
    memory.limit_in_bytes, which reports a huge page-aligned number when no
    limit is set, so any value not below the host memory is treated as
    unbounded. Unbounded, missing or unreadable limits fall back to the total
    host memory.

    Parameters
    ----------
    cgroup_root : str
        Mount point of the cgroup hierarchy
    meminfo : str
        Path of the memory information pseudo-file used as fallback

    Returns
    -------
    ResourceLimit
        Limit in bytes and where it was read from
    """
    version = detect_cgroup_version(cgroup_root)
    limit = None

    if version == 2:
        value = _read_value(os.path.join(cgroup_root, CGROUP_V2_MEMORY_MAX))
        if value != CGROUP_V2_UNLIMITED and _parse_positive(value):
            limit = ResourceLimit(int(value), SOURCE_CGROUP_V2)
    else:
        value = _read_value(os.path.join(cgroup_root, CGROUP_V1_MEMORY_LIMIT))
        if _parse_positive(value):
            limit = ResourceLimit(int(value), SOURCE_CGROUP_V1)
            host_bytes = read_host_memory_bytes(meminfo)
            if host_bytes and limit.bytes >= host_bytes:
                limit = None

    if limit is None:
        LOG.info(f'No usable cgroup v{version} memory limit, falling back to host memory')
        limit = ResourceLimit(read_host_memory_bytes(meminfo), SOURCE_HOST_FALLBACK)

    if limit.bytes is None:
        raise ValueError(f'Unable to determine the memory limit from cgroup v{version} '
                         f'or {meminfo}')

    LOG.info(f'cgroup v{version}, container RAM limit: '
             f'{convert_from_bytes(limit.bytes, "m")} MiB (source: {limit.source})')
    return limit


def read_limit_bytes(cgroup_root=CGROUP_ROOT, meminfo=PROC_MEMINFO):
    return read_limit(cgroup_root, meminfo).bytes
