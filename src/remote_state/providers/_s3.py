"""S3 remote-state provider using boto3."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from remote_state._capabilities import Capability, CapabilitySet
from remote_state._models import ProvisioningConfig
from remote_state._provider import Provider
from remote_state._types import Tags

log = logging.getLogger(__name__)

_ALL_CAPABILITIES = CapabilitySet(set(Capability))

# Error codes meaning "no such bucket" vs "bucket exists but belongs to someone else".
_MISSING_CODES = frozenset({"404", "NoSuchBucket", "NotFound"})
_FORBIDDEN_CODES = frozenset({"403", "AccessDenied", "Forbidden"})
_ALREADY_OWNED_CODES = frozenset({"BucketAlreadyOwnedByYou"})

_DEFAULT_REGION = "us-east-1"


@dataclasses.dataclass(frozen=True)
class S3BackendConfig:
    """Options understood by Terraform's ``s3`` backend.

    See: https://developer.hashicorp.com/terraform/language/settings/backends/s3
    """

    bucket: str = ""
    key: str = ""
    region: str = ""
    endpoint: str = ""
    profile: str = ""
    role_arn: str = ""
    access_key: str = ""
    secret_key: str = ""
    encrypt: bool = False
    kms_key_id: str = ""
    acl: str = ""
    dynamodb_table: str = ""
    workspace_key_prefix: str = ""
    force_path_style: bool = False
    skip_credentials_validation: bool = False


@dataclasses.dataclass(frozen=True)
class S3ProvisioningConfig(ProvisioningConfig):
    """Provisioning-only options for the S3 state bucket."""

    tags: Tags = dataclasses.field(default_factory=dict, metadata={"key": "s3_bucket_tags"})
    skip_create: bool = dataclasses.field(default=False, metadata={"key": "skip_bucket_creation"})
    skip_versioning: bool = dataclasses.field(default=False, metadata={"key": "skip_bucket_versioning"})


class S3Provider(Provider):
    """Provisions the S3 bucket holding Terraform state.

    :param client_options: Additional keyword arguments for ``boto3`` client creation.
    """

    backend_config_type = S3BackendConfig
    provisioning_config_type = S3ProvisioningConfig
    provider_only_keys = (
        "s3_bucket_tags",
        "skip_bucket_versioning",
        "skip_bucket_creation",
    )
    identifier_field = "bucket"

    def __init__(self, *, client_options: dict[str, Any] | None = None) -> None:
        self._client_options = client_options or {}

    @property
    def name(self) -> str:
        return "s3"

    @property
    def capabilities(self) -> CapabilitySet:
        return _ALL_CAPABILITIES

    # region: client

    def create_client(self, backend_config: S3BackendConfig) -> Any:
        import boto3

        session_opts: dict[str, Any] = {}
        if backend_config.profile:
            session_opts["profile_name"] = backend_config.profile
        if backend_config.access_key and backend_config.secret_key:
            session_opts["aws_access_key_id"] = backend_config.access_key
            session_opts["aws_secret_access_key"] = backend_config.secret_key
        if backend_config.region:
            session_opts["region_name"] = backend_config.region
        session = boto3.session.Session(**session_opts)

        if backend_config.role_arn:
            session = self._assume_role(session, backend_config)

        client_opts: dict[str, Any] = dict(self._client_options)
        if backend_config.endpoint:
            client_opts.setdefault("endpoint_url", backend_config.endpoint)
        if backend_config.force_path_style:
            from botocore.config import Config

            client_opts.setdefault("config", Config(s3={"addressing_style": "path"}))
        return session.client("s3", **client_opts)

    @staticmethod
    def _assume_role(session: Any, backend_config: S3BackendConfig) -> Any:
        import boto3

        log.debug("Assuming role %s for remote state access", backend_config.role_arn)
        creds = session.client("sts").assume_role(
            RoleArn=backend_config.role_arn,
            RoleSessionName="remote-state",
        )["Credentials"]
        return boto3.session.Session(
            aws_access_key_id=creds["AccessKeyId"],
            aws_secret_access_key=creds["SecretAccessKey"],
            aws_session_token=creds["SessionToken"],
            region_name=session.region_name,
        )

    # endregion

    # region: capabilities

    def check_name_available(self, client: Any, backend_config: S3BackendConfig) -> bool:
        from botocore.exceptions import ClientError

        try:
            client.head_bucket(Bucket=backend_config.bucket)
        except ClientError as exc:
            code = _error_code(exc)
            if code in _MISSING_CODES:
                return True
            if code in _FORBIDDEN_CODES:
                # The name is taken by a bucket we cannot read.
                return False
            raise
        return False

    def create_resource(self, client: Any, config: ProvisioningConfig) -> None:
        from botocore.exceptions import ClientError

        backend_config: S3BackendConfig = config.backend
        params: dict[str, Any] = {"Bucket": backend_config.bucket}
        region = backend_config.region or client.meta.region_name or _DEFAULT_REGION
        if region != _DEFAULT_REGION:
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}
        try:
            client.create_bucket(**params)
        except ClientError as exc:
            if _error_code(exc) not in _ALREADY_OWNED_CODES:
                raise
            log.debug("S3 bucket %s is already owned by this account", backend_config.bucket)

    def get_versioning(self, client: Any, backend_config: S3BackendConfig) -> bool:
        response = client.get_bucket_versioning(Bucket=backend_config.bucket)
        return bool(response.get("Status") == "Enabled")

    def enable_versioning(self, client: Any, backend_config: S3BackendConfig) -> None:
        client.put_bucket_versioning(
            Bucket=backend_config.bucket,
            VersioningConfiguration={"Status": "Enabled"},
        )

    def apply_tags(self, client: Any, backend_config: S3BackendConfig, tags: Tags) -> None:
        tag_set = [{"Key": key, "Value": value} for key, value in sorted(tags.items())]
        client.put_bucket_tagging(Bucket=backend_config.bucket, Tagging={"TagSet": tag_set})

    # endregion


def _error_code(exc: Any) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))
