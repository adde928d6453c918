################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import collections
import os
import tarfile

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config
from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError

from .common.constants import ARCHIVE_SUFFIX
from .common.constants import DEFAULT_UPLOAD_MAX_ATTEMPTS
from .common.constants import DEFAULT_UPLOAD_TIMEOUT
from .common.constants import LOG
from .common.constants import REMOTE_DUMP_PREFIX

ArchiveArtifact = collections.namedtuple('ArchiveArtifact', ['path', 'host_id', 'timestamp'])


def archive_name(host_id, timestamp):
    return f"{host_id}-{timestamp}{ARCHIVE_SUFFIX}"


def remote_key(app_tag, name):
    # Layout expected by the postmortem tooling
    return f"{REMOTE_DUMP_PREFIX}/{app_tag}/{name}"


def bundle(manifest, timestamp, scratch_dir):
    """Function that compresses the successfully collected dump files into one archive.

    Files are stored under their base name. A file that can't be added is
    logged and skipped.

    Parameters
    ----------
    manifest : DumpManifest
        Outcome of the capture attempts, only successful ones are archived
    timestamp : str
        Timestamp of the OOM event
    scratch_dir : str
        Directory the archive is written to

    Returns
    -------
    ArchiveArtifact
        The archive written
    """
    host_id = manifest.host_id
    paths = manifest.paths()
    path = os.path.join(scratch_dir, archive_name(host_id, timestamp))
    LOG.info(f'Archiving dumps: {paths} -> {path}')
    with tarfile.open(path, "w:gz") as tar:
        for entry in paths:
            try:
                tar.add(entry, arcname=os.path.basename(entry))
            except OSError as e:
                LOG.error(f'Failed to add {entry} to archive: {e}')
    return ArchiveArtifact(path, host_id, timestamp)


def make_client(endpoint_url=None, max_attempts=DEFAULT_UPLOAD_MAX_ATTEMPTS,
                timeout=DEFAULT_UPLOAD_TIMEOUT):
    client_kwargs = {
        "service_name": "s3",
        "config": Config(
            retries={"max_attempts": max_attempts, "mode": "standard"},
            connect_timeout=timeout,
            read_timeout=timeout,
        ),
    }
    if endpoint_url:
        client_kwargs["endpoint_url"] = endpoint_url
    return boto3.client(**client_kwargs)


def upload(artifact, bucket, app_tag, endpoint_url=None,
           max_attempts=DEFAULT_UPLOAD_MAX_ATTEMPTS, timeout=DEFAULT_UPLOAD_TIMEOUT,
           client=None):
    """Upload the archive to s3://<bucket>/JAVA_APP_DUMPS/<app_tag>/<archive>.

    Returns True on success. Failures, including building the client, are
    logged and reported as False. Retries and timeouts are left to botocore.
    """
    key = remote_key(app_tag, os.path.basename(artifact.path))
    LOG.info(f'Uploading {artifact.path} to s3://{bucket}/{key}')
    try:
        if client is None:
            client = make_client(endpoint_url, max_attempts, timeout)
        client.upload_file(artifact.path, bucket, key)
    except (BotoCoreError, ClientError, S3UploadFailedError, OSError) as e:
        LOG.error(f'Failed to upload {artifact.path} to s3://{bucket}/{key}: {e}')
        return False
    LOG.info(f'Uploaded archive to s3://{bucket}/{key}')
    return True
