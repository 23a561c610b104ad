"""Resource types and typed credential records returned by the TVM client."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Type

from .cache.expiry import EXPIRATION_FIELD, get_expiration


class ResourceType(str, Enum):
    """Credential kinds served by the TVM, valued by their endpoint path."""

    AWS_S3 = "aws/s3"
    AZURE_BLOB = "azure/blob"
    AZURE_COSMOS = "azure/cosmos"
    AZURE_PRESIGN = "azure/presign"
    AZURE_REVOKE_PRESIGN = "azure/revoke"

    @property
    def endpoint(self) -> str:
        return self.value

    @property
    def cacheable(self) -> bool:
        """Presign and revoke calls are one-shot and always hit the network."""
        return self not in (ResourceType.AZURE_PRESIGN, ResourceType.AZURE_REVOKE_PRESIGN)


class CredentialRecord(Mapping[str, Any]):
    """
    A credential record vended by the TVM.

    Wraps the JSON body exactly as the server returned it and exposes the
    fields common to every resource type. Subclasses add typed accessors
    for the provider-specific fields.
    """

    resource_type: Optional[ResourceType] = None

    def __init__(self, data: Mapping[str, Any]):
        self._data: Dict[str, Any] = dict(data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CredentialRecord):
            return type(self) is type(other) and self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        fields = ", ".join(sorted(self._data))
        return f"{type(self).__name__}(fields=[{fields}], expiration={self.raw_expiration!r})"

    @property
    def raw_expiration(self) -> Any:
        return self._data.get(EXPIRATION_FIELD)

    @property
    def expiration(self) -> Optional[datetime]:
        """Parsed expiration, or None when missing or unparsable."""
        return get_expiration(self._data)

    def to_dict(self) -> Dict[str, Any]:
        """Return a copy of the record as received from the server."""
        return dict(self._data)


class AwsS3Credential(CredentialRecord):
    """Temporary AWS credentials scoped to the namespace's S3 prefix."""

    resource_type = ResourceType.AWS_S3

    @property
    def access_key_id(self) -> Optional[str]:
        return self._data.get("accessKeyId")

    @property
    def secret_access_key(self) -> Optional[str]:
        return self._data.get("secretAccessKey")

    @property
    def session_token(self) -> Optional[str]:
        return self._data.get("sessionToken")

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self._data.get("params") or {})

    @property
    def bucket(self) -> Optional[str]:
        return self.params.get("Bucket")

    def create_s3_client(self, region_name: Optional[str] = None, **client_kwargs: Any):
        """
        Build a boto3 S3 client authenticated with these credentials.

        Args:
            region_name: Optional AWS region for the client
            **client_kwargs: Extra arguments forwarded to ``Session.client``

        Returns:
            boto3 S3 client
        """
        import boto3

        session = boto3.session.Session(
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            aws_session_token=self.session_token,
            region_name=region_name,
        )
        return session.client("s3", **client_kwargs)


class AzureBlobCredential(CredentialRecord):
    """SAS URLs for the namespace's private and public blob containers."""

    resource_type = ResourceType.AZURE_BLOB

    @property
    def sas_url_private(self) -> Optional[str]:
        return self._data.get("sasURLPrivate")

    @property
    def sas_url_public(self) -> Optional[str]:
        return self._data.get("sasURLPublic")


class AzureCosmosCredential(CredentialRecord):
    """Resource tokens for the namespace's Cosmos DB container."""

    resource_type = ResourceType.AZURE_COSMOS

    @property
    def endpoint(self) -> Optional[str]:
        return self._data.get("endpoint")

    @property
    def resource_tokens(self) -> Any:
        return self._data.get("resourceTokens")

    @property
    def partition_key(self) -> Optional[str]:
        return self._data.get("partitionKey")

    @property
    def database_id(self) -> Optional[str]:
        return self._data.get("databaseId")

    @property
    def container_id(self) -> Optional[str]:
        return self._data.get("containerId")


class AzurePresignCredential(CredentialRecord):
    """Signature for a single presigned blob URL."""

    resource_type = ResourceType.AZURE_PRESIGN

    @property
    def signature(self) -> Optional[str]:
        return self._data.get("signature")


_RECORD_TYPES: Dict[ResourceType, Type[CredentialRecord]] = {
    ResourceType.AWS_S3: AwsS3Credential,
    ResourceType.AZURE_BLOB: AzureBlobCredential,
    ResourceType.AZURE_COSMOS: AzureCosmosCredential,
    ResourceType.AZURE_PRESIGN: AzurePresignCredential,
}


def build_credential(resource_type: ResourceType, data: Mapping[str, Any]) -> CredentialRecord:
    """Wrap a raw record mapping in the class matching its resource type."""
    record_cls = _RECORD_TYPES.get(resource_type, CredentialRecord)
    return record_cls(data)
