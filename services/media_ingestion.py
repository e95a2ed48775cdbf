"""
Media ingestion service.

This service handles the files attached to a submission:
- Checking each slot's file count, declared MIME type and size
- Uploading the primary video first, failing the submission if it fails
- Uploading photo slots concurrently, dropping photos that fail
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from starlette.concurrency import run_in_threadpool

from core.exceptions import (
    MediaError,
    UploadError,
    ValidationError,
    MSG_FILE_TOO_LARGE,
    MSG_INVALID_FILE_TYPE,
    MSG_TOO_MANY_FILES,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MiB


@dataclass
class IncomingFile:
    """A file part read from a multipart request."""
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class SlotPolicy:
    """
    Rules for one multipart field group.

    A fatal slot aborts the whole submission when its upload fails; files in
    other slots are dropped individually.
    """
    name: str
    folder: str
    max_count: int
    mime_prefix: str
    fatal: bool = False

    def accepts(self, content_type: Optional[str]) -> bool:
        return bool(content_type) and content_type.lower().startswith(self.mime_prefix)


PHOTOS_SLOT = SlotPolicy("photos", "event_photos", 10, "image/")
VIDEO_SLOT = SlotPolicy("video", "event_videos", 1, "video/", fatal=True)
MEDIA_PHOTOS_SLOT = SlotPolicy("media_photos", "event_media_photos", 5, "image/")

EVENT_UPDATE_SLOTS = (PHOTOS_SLOT, VIDEO_SLOT, MEDIA_PHOTOS_SLOT)
EVENT_CREATE_SLOTS = (PHOTOS_SLOT, VIDEO_SLOT)


@dataclass
class MediaResult:
    """URLs produced by one ingestion, in submission order per slot."""
    photos: List[str] = field(default_factory=list)
    video: Optional[str] = None
    media_photos: List[str] = field(default_factory=list)


class MediaIngestionCoordinator:
    """Validates and uploads the media slots of a single submission."""

    def __init__(
        self,
        blob_store,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        slots: Sequence[SlotPolicy] = EVENT_UPDATE_SLOTS
    ):
        self.blob_store = blob_store
        self.max_file_size = max_file_size
        self.slots = tuple(slots)

    def validate(self, submission: Mapping[str, Sequence[IncomingFile]]) -> Dict[str, List[IncomingFile]]:
        """
        Check every slot before anything is uploaded.

        Empty parts (zero bytes) are ignored. Any count, type or size violation
        rejects the whole submission.

        Args:
            submission: Files keyed by slot name

        Returns:
            Dict[str, List[IncomingFile]]: Non-empty files per slot

        Raises:
            ValidationError: On the first violation found
        """
        known = {slot.name for slot in self.slots}
        unexpected = [name for name, files in submission.items() if files and name not in known]
        if unexpected:
            raise ValidationError(
                MSG_INVALID_FILE_TYPE,
                details=f"Unexpected file field(s): {', '.join(sorted(unexpected))}"
            )

        accepted: Dict[str, List[IncomingFile]] = {}
        for slot in self.slots:
            files = [f for f in submission.get(slot.name) or [] if f.size > 0]

            if len(files) > slot.max_count:
                raise ValidationError(
                    MSG_TOO_MANY_FILES,
                    details=f"Field '{slot.name}' accepts at most {slot.max_count} file(s), got {len(files)}"
                )

            for incoming in files:
                if not slot.accepts(incoming.content_type):
                    logger.warning(
                        f"Rejected {incoming.filename!r} in '{slot.name}': content type {incoming.content_type}"
                    )
                    raise ValidationError(
                        MSG_INVALID_FILE_TYPE,
                        details=f"Field '{slot.name}' requires {slot.mime_prefix}* files, "
                                f"got {incoming.content_type} ({incoming.filename})"
                    )
                if incoming.size > self.max_file_size:
                    logger.warning(
                        f"Rejected {incoming.filename!r} in '{slot.name}': {incoming.size} bytes"
                    )
                    raise ValidationError(
                        MSG_FILE_TOO_LARGE,
                        details=f"Maximum size: {self.max_file_size / (1024 * 1024):.1f}MB"
                    )

            accepted[slot.name] = files
        return accepted

    async def ingest(self, submission: Mapping[str, Sequence[IncomingFile]]) -> MediaResult:
        """
        Upload all slots of a submission.

        Workflow:
        1. Validates every slot (nothing is uploaded on a violation)
        2. Uploads fatal slots one by one; a failure raises MediaError
        3. Uploads the remaining files concurrently, logging and dropping failures

        Returns:
            MediaResult: Uploaded URLs, submission order preserved within a slot

        Raises:
            ValidationError: If a slot breaks its policy
            MediaError: If a fatal slot upload fails
        """
        accepted = self.validate(submission)
        urls: Dict[str, List[str]] = {slot.name: [] for slot in self.slots}

        for slot in self.slots:
            if not slot.fatal:
                continue
            for incoming in accepted[slot.name]:
                try:
                    urls[slot.name].append(await self._upload(slot, incoming))
                except UploadError as e:
                    logger.error(f"Upload of '{slot.name}' file {incoming.filename!r} failed, aborting: {e}")
                    raise MediaError(details=e.details or str(e)) from e

        pending: List[Tuple[SlotPolicy, IncomingFile]] = [
            (slot, incoming)
            for slot in self.slots if not slot.fatal
            for incoming in accepted[slot.name]
        ]
        results = await asyncio.gather(*(self._upload_recoverable(slot, f) for slot, f in pending))

        for (slot, _), url in zip(pending, results):
            if url is not None:
                urls[slot.name].append(url)

        dropped = sum(1 for url in results if url is None)
        if dropped:
            logger.warning(f"{dropped} of {len(pending)} photo upload(s) failed and were skipped")

        return self._build_result(urls)

    async def _upload(self, slot: SlotPolicy, incoming: IncomingFile) -> str:
        return await run_in_threadpool(
            self.blob_store.upload,
            incoming.data,
            incoming.content_type,
            slot.folder,
            incoming.filename
        )

    async def _upload_recoverable(self, slot: SlotPolicy, incoming: IncomingFile) -> Optional[str]:
        try:
            return await self._upload(slot, incoming)
        except UploadError as e:
            logger.error(f"Upload of '{slot.name}' file {incoming.filename!r} failed, skipping: {e}")
            return None

    def _build_result(self, urls: Dict[str, List[str]]) -> MediaResult:
        result = MediaResult()
        for slot in self.slots:
            if slot.max_count == 1:
                setattr(result, slot.name, urls[slot.name][0] if urls[slot.name] else None)
            else:
                setattr(result, slot.name, urls[slot.name])
        return result
