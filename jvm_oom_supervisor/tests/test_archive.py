################################################################################
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
################################################################################
import os
import tarfile

from botocore.exceptions import ClientError
from botocore.exceptions import EndpointConnectionError
from jvm_oom_supervisor import archive
from jvm_oom_supervisor import dump
from jvm_oom_supervisor.tests.base import BaseTestCase
import mock

HOST = "billing-7d9f8"
TIMESTAMP = "20261018-134501"


class TestArchive(BaseTestCase):

    def setUp(self):
        """Run before each test method to initialize test environment."""
        super(TestArchive, self).setUp()

        self.manifest = dump.DumpManifest(HOST, 4242)
        self.manifest.record("jattach threaddump",
                             self.write_file(f"dumps/{HOST}.threaddump", "Full thread dump"),
                             True)
        self.manifest.record("jattach dumpheap",
                             os.path.join(self.tmp_dir, "dumps", f"{HOST}.dumpheap"),
                             False, "exit code 1")
        self.manifest.record("jvm heap dump",
                             self.write_file("dumps/java_pid4242.hprof", "JAVA PROFILE"),
                             True)
        self.artifact = archive.ArchiveArtifact(
            os.path.join(self.tmp_dir, f"{HOST}-{TIMESTAMP}.dump.tar.gz"), HOST, TIMESTAMP)

    def test_archive_name(self):
        self.assertEqual(archive.archive_name(HOST, TIMESTAMP),
                         "billing-7d9f8-20261018-134501.dump.tar.gz")

    def test_remote_key(self):
        self.assertEqual(archive.remote_key("billing", "a.dump.tar.gz"),
                         "JAVA_APP_DUMPS/billing/a.dump.tar.gz")

    def test_bundle(self):
        """Test for archive.bundle

        Only the successful captures end up in the archive, stored by name.
        """
        artifact = archive.bundle(self.manifest, TIMESTAMP, self.tmp_dir)
        self.assertEqual(artifact, self.artifact)
        with tarfile.open(artifact.path, "r:gz") as tar:
            self.assertEqual(sorted(tar.getnames()),
                             [f"{HOST}.threaddump", "java_pid4242.hprof"])
            content = tar.extractfile(f"{HOST}.threaddump").read()
        self.assertEqual(content, b"Full thread dump")

    def test_bundle_skips_vanished_file(self):
        os.remove(os.path.join(self.tmp_dir, "dumps", "java_pid4242.hprof"))
        artifact = archive.bundle(self.manifest, TIMESTAMP, self.tmp_dir)
        with tarfile.open(artifact.path, "r:gz") as tar:
            self.assertEqual(tar.getnames(), [f"{HOST}.threaddump"])
        self.assertIn("Failed to add", self.fake_log.get_error())

    def test_bundle_empty_manifest(self):
        artifact = archive.bundle(dump.DumpManifest(HOST, 4242), TIMESTAMP, self.tmp_dir)
        with tarfile.open(artifact.path, "r:gz") as tar:
            self.assertEqual(tar.getnames(), [])

    def test_upload(self):
        client = mock.Mock()
        self.assertTrue(archive.upload(self.artifact, "dump-bucket", "billing",
                                       client=client))
        client.upload_file.assert_called_once_with(
            self.artifact.path, "dump-bucket",
            f"JAVA_APP_DUMPS/billing/{HOST}-{TIMESTAMP}.dump.tar.gz")

    def test_upload_client_error(self):
        client = mock.Mock()
        client.upload_file.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject")
        self.assertFalse(archive.upload(self.artifact, "dump-bucket", "billing",
                                        client=client))
        self.assertIn("Failed to upload", self.fake_log.get_error())

    def test_upload_unreachable(self):
        client = mock.Mock()
        client.upload_file.side_effect = EndpointConnectionError(
            endpoint_url="https://s3.amazonaws.com")
        self.assertFalse(archive.upload(self.artifact, "dump-bucket", "billing",
                                        client=client))

    def test_upload_builds_client(self):
        with mock.patch('jvm_oom_supervisor.archive.boto3.client') as mocked_client:
            self.assertTrue(archive.upload(self.artifact, "dump-bucket", "billing",
                                           endpoint_url="http://minio:9000",
                                           max_attempts=5, timeout=10))
        kwargs = mocked_client.call_args[1]
        self.assertEqual(kwargs["service_name"], "s3")
        self.assertEqual(kwargs["endpoint_url"], "http://minio:9000")
        self.assertEqual(kwargs["config"].retries,
                         {"max_attempts": 5, "mode": "standard"})
        self.assertEqual(kwargs["config"].connect_timeout, 10)
        mocked_client.return_value.upload_file.assert_called_once()

    def test_make_client_without_endpoint(self):
        with mock.patch('jvm_oom_supervisor.archive.boto3.client') as mocked_client:
            archive.make_client()
        self.assertNotIn("endpoint_url", mocked_client.call_args[1])
