################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import os
import shutil

from .common.constants import DUMP_TRIGGER
from .common.constants import LOG


def build_jvm_options(budget, config, app_args=()):
    """Function that composes the full JVM command line from the memory budget.

    The OutOfMemoryError hook re-invokes this program in dump mode; the JVM
    replaces %p with its own pid when the hook fires.

    Parameters
    ----------
    budget : MemoryBudget
        Budget computed from the container limit
    config : SupervisorConfig
        Supervisor configuration
    app_args : list
        Extra arguments handed to the application

    Returns
    -------
    list
        The command line, starting with the java binary
    """
    cmd = [
        config.java_bin,
        "--enable-native-access=ALL-UNNAMED",
        "-XX:+UseContainerSupport",
        f"-Xms{budget.init_heap_mib}m",
        f"-Xmx{budget.max_heap_mib}m",
        f"-XX:MaxMetaspaceSize={budget.metaspace_mib}m",
        f"-XX:MaxDirectMemorySize={budget.direct_mib}m",
        f"-XX:ReservedCodeCacheSize={budget.code_cache_mib}m",
        f"-XX:CompressedClassSpaceSize={budget.compressed_class_space_mib}m",
        f"-Xss{config.stack_kib}k",
        "-XX:+UseG1GC",
        "-XX:+UseStringDeduplication",
        "-XX:+HeapDumpOnOutOfMemoryError",
        f"-XX:HeapDumpPath={config.dump_dir}",
        f"-XX:OnOutOfMemoryError={config.hook_command} {DUMP_TRIGGER} %p",
    ]
    cmd.extend(config.java_opts)
    cmd.extend([
        f"-Dspring.profiles.active={config.profile}",
        "-jar",
        config.artifact,
    ])
    cmd.extend(app_args)
    return cmd


def _find_java(java_bin):
    if os.path.sep in java_bin:
        path = java_bin if os.access(java_bin, os.X_OK) else None
    else:
        path = shutil.which(java_bin)
    if not path:
        raise FileNotFoundError(f"JVM binary not found: {java_bin}")
    return path


def launch(budget, config, app_args=()):
    java = _find_java(config.java_bin)
    if not os.path.isfile(config.artifact):
        raise FileNotFoundError(f"Application artifact not found: {config.artifact}")

    cmd = build_jvm_options(budget, config, app_args)
    LOG.info("Launching JVM: %s" % " ".join(cmd))
    for h in LOG.handlers:
        h.flush()
    os.execv(java, cmd)
