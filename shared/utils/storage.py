"""Object storage client for uploaded files.

The S3 implementation talks to any S3-compatible endpoint through aiobotocore.
Credentials are never read from application settings; botocore resolves them
from its default chain (environment, shared profile, container or instance
role), so the same code runs locally and under a managed identity.
"""

import json
from abc import ABC, abstractmethod
from enum import Enum
from urllib.parse import quote, urlsplit

from aiobotocore.config import AioConfig
from aiobotocore.session import get_session
from botocore.exceptions import BotoCoreError, ClientError

from shared.utils.logging import get_logger

logger = get_logger(__name__)

# Error codes S3 returns when the bucket is already there and usable by us
_BUCKET_EXISTS_CODES = {"BucketAlreadyOwnedByYou"}
_NOT_FOUND_CODES = {"404", "NoSuchBucket", "NotFound"}
# Stores without Block Public Access (MinIO, older LocalStack) answer with these
_NO_ACCESS_BLOCK_CODES = {"NoSuchPublicAccessBlockConfiguration", "NotImplemented"}


class ContainerAccess(str, Enum):
    """Read access applied to a container by ensure_container."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"


class ObjectStoreError(Exception):
    """A storage call failed.

    The original SDK exception is chained as ``__cause__``.
    """

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage
        self.message = message


class ObjectStore(ABC):
    """Abstract object store used by the upload handler."""

    @abstractmethod
    async def ensure_container(
        self,
        name: str,
        access: ContainerAccess = ContainerAccess.PRIVATE,
    ) -> None:
        """Create the container if it does not exist yet and apply access."""

    @abstractmethod
    async def upload(
        self,
        container: str,
        key: str,
        data: bytes,
        content_type: str,
    ) -> None:
        """Store bytes under key with the given content type."""

    @abstractmethod
    async def sign(self, container: str, key: str, expires_in: int) -> str:
        """Return a read-only URL for one object valid for expires_in seconds."""

    @abstractmethod
    def object_url(self, container: str, key: str) -> str:
        """Return the plain URL of an object."""


def public_read_policy(bucket: str) -> str:
    """Bucket policy granting anonymous GetObject on every key."""
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Sid": "PublicReadGetObject",
                    "Effect": "Allow",
                    "Principal": "*",
                    "Action": ["s3:GetObject"],
                    "Resource": [f"arn:aws:s3:::{bucket}/*"],
                }
            ],
        }
    )


class S3ObjectStore(ObjectStore):
    """Async S3 object store."""

    def __init__(
        self,
        endpoint_url: str,
        region: str = "us-east-1",
        addressing_style: str = "path",
    ):
        """Initialize S3 object store.

        Args:
            endpoint_url: S3 endpoint (AWS regional endpoint, MinIO, LocalStack)
            region: Region used for signing and bucket placement
            addressing_style: 'path' or 'virtual' bucket addressing
        """
        self.endpoint_url = endpoint_url.rstrip("/")
        self.region = region
        self.addressing_style = addressing_style
        self._config = AioConfig(
            signature_version="s3v4",
            s3={"addressing_style": addressing_style},
        )
        self._session = get_session()

    def _client(self):
        return self._session.create_client(
            "s3",
            region_name=self.region,
            endpoint_url=self.endpoint_url,
            config=self._config,
        )

    async def ensure_container(
        self,
        name: str,
        access: ContainerAccess = ContainerAccess.PRIVATE,
    ) -> None:
        """Create the bucket if absent and apply its read access.

        Concurrent callers are safe: losing the creation race surfaces as
        BucketAlreadyOwnedByYou, which counts as success. Public read access
        is applied on every call, so a bucket left private by an earlier
        failure is repaired by the next request.
        """
        async with self._client() as client:
            created = await self._create_if_missing(client, name)
            if access == ContainerAccess.PUBLIC_READ:
                await self._allow_public_read(client, name)
        if created:
            logger.info("container_created", container=name, access=access.value)

    async def _create_if_missing(self, client, name: str) -> bool:
        try:
            await client.head_bucket(Bucket=name)
            return False
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code not in _NOT_FOUND_CODES:
                raise ObjectStoreError(
                    "ensure_container",
                    f"Checking container '{name}' failed: {e}",
                ) from e
        except BotoCoreError as e:
            raise ObjectStoreError(
                "ensure_container",
                f"Checking container '{name}' failed: {e}",
            ) from e

        create_params = {"Bucket": name}
        if self.region != "us-east-1":
            create_params["CreateBucketConfiguration"] = {
                "LocationConstraint": self.region
            }

        try:
            await client.create_bucket(**create_params)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in _BUCKET_EXISTS_CODES:
                logger.debug("container_already_exists", container=name)
                return False
            raise ObjectStoreError(
                "ensure_container",
                f"Creating container '{name}' failed: {e}",
            ) from e
        except BotoCoreError as e:
            raise ObjectStoreError(
                "ensure_container",
                f"Creating container '{name}' failed: {e}",
            ) from e
        return True

    async def _allow_public_read(self, client, name: str) -> None:
        # New AWS buckets block public policies until the block is removed
        try:
            await client.delete_public_access_block(Bucket=name)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code not in _NO_ACCESS_BLOCK_CODES:
                raise ObjectStoreError(
                    "ensure_container",
                    f"Setting public read on container '{name}' failed: {e}",
                ) from e
        except BotoCoreError as e:
            raise ObjectStoreError(
                "ensure_container",
                f"Setting public read on container '{name}' failed: {e}",
            ) from e

        try:
            await client.put_bucket_policy(Bucket=name, Policy=public_read_policy(name))
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(
                "ensure_container",
                f"Setting public read on container '{name}' failed: {e}",
            ) from e

    async def upload(
        self,
        container: str,
        key: str,
        data: bytes,
        content_type: str,
    ) -> None:
        """Upload bytes to S3.

        Error messages name the container only; the key is logged, never
        raised, so callers can surface the message safely.
        """
        async with self._client() as client:
            try:
                await client.put_object(
                    Bucket=container,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                )
            except (ClientError, BotoCoreError) as e:
                logger.warning("s3_upload_failed", container=container, key=key)
                raise ObjectStoreError(
                    "upload",
                    f"Uploading to '{container}' failed: {e}",
                ) from e
        logger.info("s3_upload_complete", container=container, key=key, size_bytes=len(data))

    async def sign(self, container: str, key: str, expires_in: int) -> str:
        """Generate a pre-signed GET URL.

        SigV4 caps the validity window at seven days.
        """
        async with self._client() as client:
            try:
                return await client.generate_presigned_url(
                    "get_object",
                    Params={"Bucket": container, "Key": key},
                    ExpiresIn=expires_in,
                )
            except (ClientError, BotoCoreError) as e:
                logger.warning("s3_sign_failed", container=container, key=key)
                raise ObjectStoreError("sign", f"Signing URL failed: {e}") from e

    def object_url(self, container: str, key: str) -> str:
        quoted_key = quote(key, safe="/")
        if self.addressing_style == "virtual":
            parts = urlsplit(self.endpoint_url)
            return f"{parts.scheme}://{container}.{parts.netloc}/{quoted_key}"
        return f"{self.endpoint_url}/{container}/{quoted_key}"


def get_object_store(
    endpoint_url: str,
    region: str = "us-east-1",
    addressing_style: str = "path",
) -> ObjectStore:
    """Factory function to create the object store.

    Raises:
        ValueError: If addressing_style is not 'path' or 'virtual'
    """
    if addressing_style not in ("path", "virtual"):
        raise ValueError(
            f"Invalid addressing_style: {addressing_style}. Use 'path' or 'virtual'"
        )
    logger.info(
        "creating_object_store",
        endpoint_url=endpoint_url,
        region=region,
        addressing_style=addressing_style,
    )
    return S3ObjectStore(
        endpoint_url=endpoint_url,
        region=region,
        addressing_style=addressing_style,
    )
