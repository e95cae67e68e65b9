"""Image upload handling."""

from datetime import datetime, timedelta, timezone
from typing import Callable

from services.image_upload.app.config import AccessUrlPolicy, Settings
from services.image_upload.app.core.schemas import (
    StoredObject,
    UploadError,
    UploadErrorKind,
    UploadRequest,
    UploadResult,
)
from services.image_upload.app.upload.validation import generate_key, validate_upload
from shared.utils.logging import error_context, get_logger
from shared.utils.metrics import create_counter
from shared.utils.storage import ContainerAccess, ObjectStore

logger = get_logger(__name__)

UPLOADS_TOTAL = create_counter(
    "image_uploads_total",
    "Image uploads by outcome",
    ["outcome"],
)
UPLOADED_BYTES = create_counter(
    "image_uploaded_bytes_total",
    "Bytes written to the object store by successful uploads",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UploadHandler:
    """Validate an uploaded image, store it, and return an access URL."""

    def __init__(
        self,
        store: ObjectStore,
        settings: Settings,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize upload handler.

        Args:
            store: Object store the images are written to
            settings: Service settings, read once at startup
            clock: Source of the current time for signed URL expiry
        """
        self.store = store
        self.container = settings.container_name
        self.policy = settings.access_url_policy
        self.signed_url_ttl = settings.signed_url_ttl_seconds
        self.clock = clock

    @property
    def container_access(self) -> ContainerAccess:
        if self.policy == AccessUrlPolicy.PUBLIC:
            return ContainerAccess.PUBLIC_READ
        return ContainerAccess.PRIVATE

    async def handle(self, request: UploadRequest) -> UploadResult:
        """Handle one upload.

        Client input problems come back as errors before any storage call.
        The body is read only once validation passes. Storage faults are
        logged with the key and come back as a dependency failure whose
        message never names the key.
        """
        rejection = validate_upload(request)
        if rejection is not None:
            logger.info(
                "upload_rejected",
                reason=rejection.kind.value,
                file_name=request.declared_file_name,
                content_type=request.declared_content_type,
                size_bytes=request.size_bytes,
            )
            UPLOADS_TOTAL.labels(outcome="rejected").inc()
            return UploadResult.failure(rejection)

        data = await request.read()
        key = generate_key(request.declared_file_name)
        stage = "ensure_container"
        try:
            logger.debug("ensuring_container", container=self.container)
            await self.store.ensure_container(self.container, self.container_access)

            stage = "upload"
            await self.store.upload(
                self.container,
                key,
                data,
                request.declared_content_type,
            )

            stage = "access_url"
            expires_at = None
            if self.policy == AccessUrlPolicy.SIGNED:
                expires_at = self.clock() + timedelta(seconds=self.signed_url_ttl)
                url = await self.store.sign(self.container, key, self.signed_url_ttl)
            else:
                url = self.store.object_url(self.container, key)

        except Exception as e:
            logger.exception(
                "upload_failed",
                stage=stage,
                key=key,
                file_name=request.declared_file_name,
                content_type=request.declared_content_type,
                container=self.container,
                **error_context(e),
            )
            UPLOADS_TOTAL.labels(outcome="failed").inc()
            return UploadResult.failure(
                UploadError(UploadErrorKind.DEPENDENCY_FAILURE, str(e), stage=stage)
            )

        logger.info(
            "image_uploaded",
            key=key,
            container=self.container,
            content_type=request.declared_content_type,
            size_bytes=request.size_bytes,
            policy=self.policy.value,
        )
        UPLOADS_TOTAL.labels(outcome="stored").inc()
        UPLOADED_BYTES.inc(request.size_bytes)

        return UploadResult.success(
            StoredObject(
                generated_key=key,
                content_type=request.declared_content_type,
                size_bytes=request.size_bytes,
                access_url=url,
                expires_at=expires_at,
            )
        )
