################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
""" Define configuration info for the JVM supervisor"""

import os
import shlex
import socket
import sys

from .budget import convert_from_bytes
from .budget import parse_size
from .common.constants import DEFAULT_STACK_KIB
from .common.constants import DEFAULT_THREAD_COUNT
from .common.constants import DEFAULT_TOOL_TIMEOUT
from .common.constants import DEFAULT_UPLOAD_MAX_ATTEMPTS
from .common.constants import DEFAULT_UPLOAD_TIMEOUT
from .common.constants import DUMP_DIR

MODE_LAUNCH = "launch"
MODE_DUMP = "dump"

REQUIRED_VARIABLES = {
    MODE_LAUNCH: [("profile", "PROFILE"), ("artifact", "ARTIFACT_NAME")],
    MODE_DUMP: [("bucket", "S3_BUCKET_BACKUP"), ("app_tag", "TAG_APPLICATION_NAME")],
}


class ConfigError(ValueError):
    pass


def _get_int(environ, name, default, minimum=1):
    value = environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        number = int(value)
    except ValueError:
        raise ConfigError(f'{name} must be an integer, got {value!r}')
    if number < minimum:
        raise ConfigError(f'{name} must be at least {minimum}, got {number}')
    return number


def _get_java_opts(environ):
    try:
        return shlex.split(environ.get("JAVA_OPTS", ""))
    except ValueError as e:
        raise ConfigError(f'JAVA_OPTS: {e}')


def _get_stack_kib(environ):
    value = environ.get("JVM_STACK_SIZE")
    if value is None or value.strip() == "":
        return DEFAULT_STACK_KIB
    try:
        stack_kib = convert_from_bytes(parse_size(value, default_unit='k'), 'k')
    except ValueError as e:
        raise ConfigError(f'JVM_STACK_SIZE: {e}')
    if stack_kib <= 0:
        raise ConfigError(f'JVM_STACK_SIZE must be at least 1k, got {value!r}')
    return stack_kib


def default_hook_command():
    """Command the JVM runs to re-invoke this program in dump mode."""
    program = os.path.abspath(sys.argv[0])
    if os.path.basename(program) == "__main__.py":
        # started with "python -m", __main__.py is not runnable on its own
        return f"{sys.executable} -m jvm_oom_supervisor"
    return program


class SupervisorConfig(object):
    """Settings read once from the environment at process start."""

    def __init__(self, profile=None, artifact=None, bucket=None, app_tag=None,
                 thread_count=DEFAULT_THREAD_COUNT, stack_kib=DEFAULT_STACK_KIB,
                 java_bin="java", java_opts=(), dump_dir=DUMP_DIR,
                 hook_command=None, tool_timeout=DEFAULT_TOOL_TIMEOUT,
                 upload_max_attempts=DEFAULT_UPLOAD_MAX_ATTEMPTS,
                 upload_timeout=DEFAULT_UPLOAD_TIMEOUT, endpoint_url=None,
                 host_id=None):
        self.profile = profile
        self.artifact = artifact
        self.bucket = bucket
        self.app_tag = app_tag
        self.thread_count = thread_count
        self.stack_kib = stack_kib
        self.java_bin = java_bin
        self.java_opts = list(java_opts)
        self.dump_dir = dump_dir
        self.hook_command = hook_command or default_hook_command()
        self.tool_timeout = tool_timeout
        self.upload_max_attempts = upload_max_attempts
        self.upload_timeout = upload_timeout
        self.endpoint_url = endpoint_url
        self.host_id = host_id or socket.gethostname()

    def missing(self, mode):
        """Return the environment variables required by mode that are unset."""
        return [name for attr, name in REQUIRED_VARIABLES[mode]
                if not getattr(self, attr)]

    def __repr__(self):
        return (f'SupervisorConfig(profile={self.profile!r}, artifact={self.artifact!r}, '
                f'bucket={self.bucket!r}, app_tag={self.app_tag!r}, '
                f'thread_count={self.thread_count}, stack_kib={self.stack_kib}, '
                f'dump_dir={self.dump_dir!r})')


def load_config(environ=None):
    """Function that builds the supervisor configuration from environment
    variables. Optional values fall back to their defaults, malformed numbers
    raise ConfigError. Required values are checked per mode with
    SupervisorConfig.missing.

    Parameters
    ----------
    environ : dict
        Environment to read, os.environ when not provided

    Returns
    -------
    SupervisorConfig
        The configuration
    """
    if environ is None:
        environ = os.environ

    return SupervisorConfig(
        profile=environ.get("PROFILE"),
        artifact=environ.get("ARTIFACT_NAME"),
        bucket=environ.get("S3_BUCKET_BACKUP"),
        app_tag=environ.get("TAG_APPLICATION_NAME"),
        thread_count=_get_int(environ, "JVM_THREAD_COUNT", DEFAULT_THREAD_COUNT),
        stack_kib=_get_stack_kib(environ),
        java_bin=environ.get("JAVA_BIN") or "java",
        java_opts=_get_java_opts(environ),
        dump_dir=environ.get("DUMP_DIR") or DUMP_DIR,
        hook_command=environ.get("SUPERVISOR_HOOK_COMMAND"),
        tool_timeout=_get_int(environ, "TOOL_TIMEOUT", DEFAULT_TOOL_TIMEOUT),
        upload_max_attempts=_get_int(environ, "UPLOAD_MAX_ATTEMPTS",
                                     DEFAULT_UPLOAD_MAX_ATTEMPTS),
        upload_timeout=_get_int(environ, "UPLOAD_TIMEOUT", DEFAULT_UPLOAD_TIMEOUT),
        endpoint_url=environ.get("S3_ENDPOINT_URL") or None,
        host_id=environ.get("HOSTNAME"),
    )
