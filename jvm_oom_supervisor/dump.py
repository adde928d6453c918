################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import collections
import glob
import io
import os
import subprocess

from .common.constants import JATTACH
from .common.constants import JCMD
from .common.constants import LOG

CaptureResult = collections.namedtuple('CaptureResult', ['name', 'path', 'succeeded', 'reason'])


class DumpManifest(object):
    """Outcome of every capture attempt made for one OOM event."""

    def __init__(self, host_id, pid):
        self.host_id = host_id
        self.pid = pid
        self.results = []

    def record(self, name, path, succeeded, reason=None):
        result = CaptureResult(name, path, succeeded, reason)
        self.results.append(result)
        return result

    def paths(self):
        return [r.path for r in self.results if r.succeeded]

    def failures(self):
        return [r for r in self.results if not r.succeeded]


def capture_plan(pid, host_id, dump_dir):
    """Return the capture attempts as (name, command, output path, stdout to file).

    Thread dumps are written by the tool to stdout, heap dumps are written by
    the JVM itself to the path given on the command line.
    """
    pid = str(pid)
    return [
        ("jattach threaddump", [JATTACH, pid, "threaddump"],
         os.path.join(dump_dir, f"{host_id}.threaddump"), True),
        ("jattach dumpheap", [JATTACH, pid, "dumpheap",
                              os.path.join(dump_dir, f"{host_id}.dumpheap")],
         os.path.join(dump_dir, f"{host_id}.dumpheap"), False),
        ("jcmd GC.heap_dump", [JCMD, pid, "GC.heap_dump",
                               os.path.join(dump_dir, f"{host_id}-jcmd.dumpheap")],
         os.path.join(dump_dir, f"{host_id}-jcmd.dumpheap"), False),
        ("jcmd Thread.print", [JCMD, pid, "Thread.print"],
         os.path.join(dump_dir, f"{host_id}-jcmd.threaddump"), True),
    ]


def _remove_stale(path):
    # jcmd refuses to overwrite an existing heap dump
    try:
        os.remove(path)
        LOG.info(f'Removed stale dump {path}')
    except FileNotFoundError:
        pass
    except OSError as e:
        LOG.error(f'Failed to remove stale dump {path}: {e}')


def _run_capture(cmd, path, to_file, timeout):
    if to_file:
        with io.open(path, "wb") as f:
            proc = subprocess.run(cmd, stdout=f, stderr=subprocess.STDOUT, timeout=timeout)
    else:
        proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
                              timeout=timeout)
        if proc.stdout:
            LOG.debug(proc.stdout.decode(errors="replace").strip())
    if proc.returncode != 0:
        return f'exit code {proc.returncode}'
    if not os.path.isfile(path) or os.path.getsize(path) == 0:
        return 'no output written'
    return None


def capture(manifest, name, cmd, path, to_file, timeout):
    LOG.info(f'Generating {name} for pid {manifest.pid}')
    _remove_stale(path)
    try:
        reason = _run_capture(cmd, path, to_file, timeout)
    except subprocess.TimeoutExpired:
        reason = f'timed out after {timeout}s'
    except OSError as e:
        reason = str(e)

    if reason:
        LOG.error(f'{name} failed: {reason}')
        return manifest.record(name, path, False, reason)
    LOG.info(f'{name} written to {path}')
    return manifest.record(name, path, True)


def collect(pid, host_id, dump_dir, timeout):
    """Function that gathers thread and heap snapshots from a running JVM.

    Each attempt is independent, a failing tool does not prevent the next one
    from running. Heap dumps written by the JVM itself on OutOfMemoryError
    (*.hprof in dump_dir) are added to the manifest as well.

    Parameters
    ----------
    pid : int
        PID of the JVM
    host_id : str
        Host identifier used to name the dump files
    dump_dir : str
        Directory the dumps are written to
    timeout : int
        Seconds each tool is allowed to run

    Returns
    -------
    DumpManifest
        Outcome of every capture attempt
    """
    manifest = DumpManifest(host_id, pid)
    for name, cmd, path, to_file in capture_plan(pid, host_id, dump_dir):
        capture(manifest, name, cmd, path, to_file, timeout)

    for hprof in sorted(glob.glob(os.path.join(dump_dir, "*.hprof"))):
        manifest.record("jvm heap dump", hprof, True)

    LOG.info(f'Collected {len(manifest.paths())} dump files, '
             f'{len(manifest.failures())} capture attempts failed')
    return manifest
