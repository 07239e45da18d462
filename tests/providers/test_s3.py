"""S3 provider tests.

Requires: moto[s3], boto3 (test dependencies).
All tests are skipped if dependencies are not installed.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import pytest

# Guard: skip entire module if dependencies are missing
moto = pytest.importorskip("moto", reason="moto not installed")
boto3 = pytest.importorskip("boto3", reason="boto3 not installed")

from remote_state._config import ReconcileSettings, RemoteState, VersioningMode  # noqa: E402
from remote_state._errors import DecodeError  # noqa: E402
from remote_state._models import ExistingBackendRecord  # noqa: E402
from remote_state._reconciler import Reconciler  # noqa: E402
from remote_state.providers._s3 import S3BackendConfig, S3Provider, S3ProvisioningConfig  # noqa: E402

if TYPE_CHECKING:
    from collections.abc import Iterator

REGION = "us-east-1"


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)


@pytest.fixture
def s3() -> Iterator[Any]:
    """Raw boto3 client against moto's mock S3 service."""
    with moto.mock_aws():
        yield boto3.client("s3", region_name=REGION)


@pytest.fixture
def bucket() -> str:
    return f"state-{uuid.uuid4().hex[:8]}"


def _state(bucket: str, **extra: object) -> RemoteState:
    return RemoteState(
        backend="s3",
        config={"bucket": bucket, "key": "app/terraform.tfstate", "region": REGION, **extra},
    )


class TestS3Identity:
    def test_name(self) -> None:
        assert S3Provider().name == "s3"

    def test_identifier_field(self) -> None:
        assert S3Provider().identifier(S3BackendConfig(bucket="b")) == "b"

    def test_filtered_config(self) -> None:
        config = {"bucket": "b", "s3_bucket_tags": {"a": "b"}, "skip_bucket_versioning": True, "encrypt": True}
        assert S3Provider().get_filtered_config(config) == {"bucket": "b", "encrypt": True}


class TestS3Decoding:
    def test_provisioning_keys(self) -> None:
        reconciler = Reconciler(S3Provider())
        backend, provisioning = reconciler.normalize(
            {"bucket": "b", "encrypt": True, "s3_bucket_tags": {"team": "x"}, "skip_bucket_creation": True}
        )
        assert backend.encrypt is True
        assert isinstance(provisioning, S3ProvisioningConfig)
        assert provisioning.tags == {"team": "x"}
        assert provisioning.skip_create is True
        assert provisioning.skip_versioning is False

    def test_string_bool_rejected(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            Reconciler(S3Provider()).normalize({"bucket": "b", "encrypt": "true"})
        assert exc_info.value.field == "encrypt"

    def test_provider_only_keys_match_decoded_fields(self) -> None:
        from remote_state._decode import decoded_keys

        assert set(S3Provider.provider_only_keys) == set(decoded_keys(S3ProvisioningConfig))


class TestS3Provisioning:
    def test_probe(self, s3: Any, bucket: str) -> None:
        provider = S3Provider()
        client = provider.create_client(S3BackendConfig(bucket=bucket, region=REGION))
        assert provider.check_name_available(client, S3BackendConfig(bucket=bucket)) is True
        s3.create_bucket(Bucket=bucket)
        assert provider.check_name_available(client, S3BackendConfig(bucket=bucket)) is False

    def test_initialize_creates_versioned_tagged_bucket(self, s3: Any, bucket: str) -> None:
        settings = ReconcileSettings(versioning_mode=VersioningMode.ENFORCE, retry_interval=0)
        reconciler = Reconciler(S3Provider(), settings)
        reconciler.initialize(_state(bucket, s3_bucket_tags={"team": "platform"}))

        s3.head_bucket(Bucket=bucket)
        assert s3.get_bucket_versioning(Bucket=bucket)["Status"] == "Enabled"
        tag_set = s3.get_bucket_tagging(Bucket=bucket)["TagSet"]
        assert tag_set == [{"Key": "team", "Value": "platform"}]

    def test_initialize_is_idempotent(self, s3: Any, bucket: str) -> None:
        reconciler = Reconciler(S3Provider(), ReconcileSettings(retry_interval=0))
        reconciler.initialize(_state(bucket))
        reconciler.initialize(_state(bucket))
        assert any(b["Name"] == bucket for b in s3.list_buckets()["Buckets"])

    def test_warn_mode_leaves_versioning_off(self, s3: Any, bucket: str) -> None:
        reconciler = Reconciler(S3Provider(), ReconcileSettings(retry_interval=0))
        reconciler.initialize(_state(bucket))
        assert s3.get_bucket_versioning(Bucket=bucket).get("Status") is None

    def test_create_outside_default_region(self, s3: Any, bucket: str) -> None:
        reconciler = Reconciler(S3Provider(), ReconcileSettings(retry_interval=0))
        state = RemoteState(backend="s3", config={"bucket": bucket, "region": "eu-west-1"})
        reconciler.initialize(state)
        location = s3.get_bucket_location(Bucket=bucket)["LocationConstraint"]
        assert location == "eu-west-1"

    def test_skip_creation(self, s3: Any, bucket: str) -> None:
        reconciler = Reconciler(S3Provider(), ReconcileSettings(retry_interval=0))
        reconciler.initialize(_state(bucket, skip_bucket_creation=True, skip_bucket_versioning=True))
        assert all(b["Name"] != bucket for b in s3.list_buckets()["Buckets"])

    def test_needs_initialization(self, s3: Any, bucket: str) -> None:
        reconciler = Reconciler(S3Provider(), ReconcileSettings(retry_interval=0))
        state = _state(bucket, s3_bucket_tags={"team": "platform"}, encrypt=True)
        recorded = ExistingBackendRecord(
            type="s3",
            config={"bucket": bucket, "key": "app/terraform.tfstate", "region": REGION, "encrypt": "true"},
        )
        assert reconciler.needs_initialization(state, recorded) is True
        reconciler.initialize(state)
        assert reconciler.needs_initialization(state, recorded) is False
