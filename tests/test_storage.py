"""Tests for upload key generation and the storage backends."""

import re
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from cabinet_records.core.config import ConfigurationError, Settings, StorageBackend
from cabinet_records.exceptions import StorageError
from cabinet_records.services.storage_service import (
    LocalFileStorage,
    R2Storage,
    build_upload_key,
    get_storage,
)


def _r2_settings(**overrides) -> Settings:
    values = {
        "storage_backend": StorageBackend.R2,
        "r2_account_id": "acct",
        "r2_access_key_id": "key",
        "r2_secret_access_key": "secret",
        "r2_bucket_name": "bucket",
    }
    values.update(overrides)
    return Settings(**values)


class TestUploadKey:

    def test_key_shape(self):
        key = build_upload_key("Invoice March.pdf")
        assert re.fullmatch(r"\d{13}-[0-9a-f]{8}-Invoice_March\.pdf", key)

    def test_path_separators_removed(self):
        assert "/" not in build_upload_key("../../etc/passwd")

    def test_identical_names_get_unique_keys(self):
        keys = {build_upload_key("scan.pdf") for _ in range(200)}
        assert len(keys) == 200


class TestLocalFileStorage:

    def test_upload_writes_file(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path / "uploads"))
        storage.initialize()
        location = storage.upload(b"%PDF", "a.pdf", "application/pdf")
        assert (tmp_path / "uploads" / "a.pdf").read_bytes() == b"%PDF"
        assert location == str(tmp_path / "uploads" / "a.pdf")

    def test_delete_removes_file(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        location = storage.upload(b"data", "a.bin")
        storage.delete(location)
        assert not (tmp_path / "a.bin").exists()

    def test_upload_without_initialize_raises_storage_error(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path / "never-created"))
        with pytest.raises(StorageError) as exc_info:
            storage.upload(b"data", "a.bin")
        assert exc_info.value.status_code == 502

    def test_delete_missing_file_raises_storage_error(self, tmp_path):
        storage = LocalFileStorage(str(tmp_path))
        with pytest.raises(StorageError):
            storage.delete(str(tmp_path / "gone.bin"))


class TestR2Storage:

    def test_upload_puts_object_under_folder(self):
        client = MagicMock()
        storage = R2Storage(_r2_settings(r2_folder="records"), client=client)

        location = storage.upload(b"data", "k.pdf", "application/pdf")

        assert location == "records/k.pdf"
        client.put_object.assert_called_once_with(
            Bucket="bucket", Key="records/k.pdf", Body=b"data", ContentType="application/pdf",
        )

    def test_delete_uses_returned_location(self):
        client = MagicMock()
        storage = R2Storage(_r2_settings(), client=client)
        storage.delete("records/k.pdf")
        client.delete_object.assert_called_once_with(Bucket="bucket", Key="records/k.pdf")

    def test_client_error_becomes_storage_error(self):
        client = MagicMock()
        client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject",
        )
        storage = R2Storage(_r2_settings(), client=client)
        with pytest.raises(StorageError):
            storage.upload(b"data", "k.pdf")

    def test_endpoint_built_from_account(self):
        assert _r2_settings().r2_endpoint_url == "https://acct.r2.cloudflarestorage.com"


class TestGetStorage:

    def test_local_by_default(self, tmp_path):
        storage = get_storage(Settings(upload_dir=str(tmp_path)))
        assert isinstance(storage, LocalFileStorage)

    def test_r2_missing_credentials_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            get_storage(_r2_settings(r2_secret_access_key="", r2_bucket_name=""))
        assert "R2_SECRET_ACCESS_KEY" in str(exc_info.value)
        assert "R2_BUCKET_NAME" in str(exc_info.value)
