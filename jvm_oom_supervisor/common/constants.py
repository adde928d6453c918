################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import logging
import os
import sys


CGROUP_ROOT = "/sys/fs/cgroup"
CGROUP_V2_CONTROLLERS = "cgroup.controllers"
CGROUP_V2_MEMORY_MAX = "memory.max"
CGROUP_V2_UNLIMITED = "max"
CGROUP_V1_MEMORY_LIMIT = "memory/memory.limit_in_bytes"
PROC_MEMINFO = "/proc/meminfo"

SOURCE_CGROUP_V2 = "cgroup-v2"
SOURCE_CGROUP_V1 = "cgroup-v1"
SOURCE_HOST_FALLBACK = "host-fallback"

# Memory policy, in MiB unless stated otherwise
METASPACE_DIVISOR = 8          # 12.5% of the container limit
DIRECT_MEMORY_DIVISOR = 8      # 12.5% of the container limit
CODE_CACHE_MIB = 128
COMPRESSED_CLASS_SPACE_MIB = 64
RESERVE_PCT = 8
HEAP_PCT_INIT = 30
HEAP_PCT_MAX = 60
DEFAULT_THREAD_COUNT = 200
DEFAULT_STACK_KIB = 256

DUMP_TRIGGER = "makedump"
DUMP_DIR = "/tmp"
REMOTE_DUMP_PREFIX = "JAVA_APP_DUMPS"
ARCHIVE_SUFFIX = ".dump.tar.gz"
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
DEFAULT_TOOL_TIMEOUT = 300
DEFAULT_UPLOAD_MAX_ATTEMPTS = 3
DEFAULT_UPLOAD_TIMEOUT = 60

JATTACH = "jattach"
JCMD = "jcmd"


LOG = logging.getLogger("jvm-oom-supervisor")
formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s',
                              datefmt='%FT%T')
handler = logging.StreamHandler(stream=sys.stdout)
handler.setFormatter(formatter)
LOG.addHandler(handler)
log_level = logging.getLevelName(os.getenv("SUPERVISOR_LOG_LEVEL", "INFO").upper())
LOG.setLevel(log_level if isinstance(log_level, int) else logging.INFO)
