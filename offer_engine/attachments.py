"""
Attachment Store

Turns a selected file into an Attachment. Small files are carried inline as
base64 data URLs; larger ones are uploaded to a private bucket and referenced
by a signed URL. When neither works the attachment is still recorded, with a
FailedSource, so the caller can show "upload failed" instead of losing it.
"""

import base64
import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor

from .models import Attachment, FailedSource, FileUpload, InlineSource, RemoteSource
from .storage.objects import ObjectStorage

logger = logging.getLogger(__name__)

SMALL_FILE_LIMIT = 500_000
SIGNED_URL_TTL = 60 * 60 * 24 * 7
DEFAULT_BUCKET = "offers"


class AttachmentStore:
    """Ingests files for a draft's attachment list."""

    def __init__(
        self,
        object_storage: ObjectStorage | None = None,
        bucket: str = DEFAULT_BUCKET,
        user_id: str = "anonymous",
        small_file_limit: int = SMALL_FILE_LIMIT,
        signed_url_ttl: int = SIGNED_URL_TTL,
        upload_large_only: bool = True,
        max_workers: int = 4,
        clock=time.time,
    ):
        """
        Args:
            object_storage: Remote storage; None disables uploads entirely
            bucket: Private bucket attachments are uploaded to
            user_id: First segment of every object path
            small_file_limit: Files below this many bytes are inlined
            signed_url_ttl: Lifetime of signed URLs, in seconds
            upload_large_only: When False, inlined files are uploaded as well
            max_workers: Parallel ingestions in ingest_many
            clock: Seconds-since-epoch source for object path timestamps
        """
        self.object_storage = object_storage
        self.bucket = bucket
        self.user_id = user_id or "anonymous"
        self.small_file_limit = small_file_limit
        self.signed_url_ttl = signed_url_ttl
        self.upload_large_only = upload_large_only
        self.max_workers = max_workers
        self.clock = clock

    def ingest(self, file: FileUpload, draft_id: str | None = None) -> Attachment:
        """Build a complete Attachment for one file. Never raises on storage errors."""
        inline = self._encode_inline(file) if file.size < self.small_file_limit else None

        uploaded = None
        if inline is None or not self.upload_large_only:
            uploaded = self._upload(file, draft_id)

        if inline is not None:
            source = InlineSource(data_url=inline, remote_path=uploaded[0] if uploaded else None)
        elif uploaded is not None:
            path, url = uploaded
            source = RemoteSource(url=url, path=path)
        else:
            source = FailedSource()
            logger.warning(f"Attachment {file.name} ({file.size} bytes) recorded without data: upload failed")

        return Attachment(
            id=uuid.uuid4().hex,
            name=file.name,
            size=file.size,
            type=file.type,
            source=source,
        )

    def ingest_many(self, files: list[FileUpload], draft_id: str | None = None) -> list[Attachment]:
        """
        Ingest several files concurrently. Returns only once every file has
        finished (uploaded, inlined or failed), in the order given.
        """
        if not files:
            return []
        if len(files) == 1:
            return [self.ingest(files[0], draft_id)]
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(lambda f: self.ingest(f, draft_id), files))

    @staticmethod
    def remove(attachments, attachment_id: str) -> tuple[Attachment, ...]:
        """
        Drop an attachment from a list. Only the local reference goes away;
        any uploaded object is left in the bucket.
        """
        return tuple(a for a in attachments if a.id != attachment_id)

    def object_path(self, file: FileUpload, draft_id: str | None) -> str:
        """``<user>/<draft>/<epoch ms>-<file name>``, with ``/`` and ``\\`` in the name replaced by ``_``."""
        millis = int(self.clock() * 1000)
        name = file.name.replace("/", "_").replace("\\", "_")
        return f"{self.user_id}/{draft_id or 'draft'}/{millis}-{name}"

    @staticmethod
    def _encode_inline(file: FileUpload) -> str:
        encoded = base64.b64encode(file.data).decode("ascii")
        return f"data:{file.type or 'application/octet-stream'};base64,{encoded}"

    def _ensure_bucket(self) -> None:
        """Create the private bucket if it is missing. Failure is only logged;
        the upload that follows will report its own error."""
        try:
            if self.bucket not in self.object_storage.list_buckets():
                self.object_storage.create_bucket(self.bucket, public=False)
        except Exception as e:
            logger.warning(f"Could not verify/create bucket {self.bucket}: {e}")

    def _upload(self, file: FileUpload, draft_id: str | None) -> tuple[str, str] | None:
        """Upload and sign. Returns (path, signed url), or None on any failure."""
        if self.object_storage is None:
            logger.warning(f"No object storage configured; cannot upload {file.name}")
            return None

        self._ensure_bucket()
        path = self.object_path(file, draft_id)
        try:
            self.object_storage.upload(self.bucket, path, file.data, file.type)
            url = self.object_storage.create_signed_url(self.bucket, path, self.signed_url_ttl)
        except Exception as e:
            logger.error(f"Upload failed for {file.name}: {e}")
            return None
        return path, url
