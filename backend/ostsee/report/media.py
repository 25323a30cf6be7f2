# backend/ostsee/report/media.py
from typing import Callable

from ostsee.exceptions import NotFoundError, UploadRejectedError
from ostsee.logging_config import get_logger
from ostsee.report.draft import DraftStore
from ostsee.schemas.report import ExifRecord, MediaAttachment, SightingDraft
from ostsee.services import uploads
from ostsee.services.exif.reader import parse_exif

logger = get_logger(__name__)


def position_values(exif: ExifRecord) -> dict:
    """Form values a photo's metadata can fill in on the position step."""
    values: dict = {}
    if exif.has_gps:
        values.update(has_position=True, latitude=round(exif.latitude, 6),
                      longitude=round(exif.longitude, 6))
    if exif.date_time_original is not None:
        values["sighting_date"] = exif.date_time_original.date().isoformat()
        values["sighting_time"] = exif.date_time_original.strftime("%H:%M")
    return values


def _ensure_room(draft: SightingDraft) -> None:
    if len(draft.media) >= uploads.MAX_FILES:
        raise UploadRejectedError(f"Zu viele Dateien. Maximum: {uploads.MAX_FILES}")


class MediaPipeline:
    def __init__(self, store: DraftStore, extractor: Callable[[bytes], ExifRecord] = parse_exif):
        self.store = store
        self.extractor = extractor

    def _attachment(self, file_name: str, mime_type: str, data: bytes,
                    preset: uploads.UploadPreset, **kw) -> MediaAttachment:
        mime = uploads.check_upload(file_name, mime_type, len(data), preset)
        exif = self.extractor(data) if mime.startswith("image/") else ExifRecord()
        return MediaAttachment.from_bytes(file_name, mime, data, exif=exif, **kw)

    def ingest(self, file_name: str, mime_type: str, data: bytes) -> MediaAttachment:
        attachment = self._attachment(file_name, mime_type, data, uploads.MEDIA)

        def apply(draft: SightingDraft):
            _ensure_room(draft)
            draft.media.append(attachment)

        self.store.modify(apply)
        logger.info("Attached %s (%d bytes)", file_name, attachment.size)
        return attachment

    def ingest_from_position_step(self, file_name: str, mime_type: str, data: bytes) -> MediaAttachment:
        attachment = self._attachment(file_name, mime_type, data, uploads.GPS_PHOTO,
                                      from_position_step=True)

        def apply(draft: SightingDraft):
            _ensure_room(draft)
            # previous position photo stays attached as plain media
            for m in draft.media:
                m.from_position_step = False
            draft.media.insert(0, attachment)
            draft.values.update(position_values(attachment.exif))

        self.store.modify(apply)
        logger.info("Position photo %s attached, gps=%s", file_name, attachment.exif.has_gps)
        return attachment

    def remove(self, index: int) -> MediaAttachment:
        removed: list[MediaAttachment] = []

        def apply(draft: SightingDraft):
            if not 0 <= index < len(draft.media):
                raise NotFoundError("Anhang nicht gefunden", context={"index": index})
            removed.append(draft.media.pop(index))

        self.store.modify(apply)
        return removed[0]
