from datetime import datetime

import pytest

from conftest import make_jpeg
from ostsee.exceptions import NotFoundError, UploadRejectedError
from ostsee.report.media import MediaPipeline, position_values
from ostsee.schemas.report import ExifRecord
from ostsee.services import uploads
from ostsee.services.exif.reader import format_exposure, parse_exif


def test_parse_exif_reads_gps_and_camera(jpeg_with_gps):
    exif = parse_exif(jpeg_with_gps)
    assert exif.has_gps
    assert exif.latitude == pytest.approx(54.5, abs=1e-4)
    assert exif.longitude == pytest.approx(10.25, abs=1e-4)
    assert exif.make == "Canon"
    assert exif.model == "EOS R6"
    assert exif.date_time_original == datetime(2024, 6, 1, 14, 30)
    assert exif.exposure_time == "1/250"
    assert exif.f_number == 2.8
    assert exif.iso == 400


def test_parse_exif_southern_western_hemisphere():
    exif = parse_exif(make_jpeg(gps=(-33.9, -70.6)))
    assert exif.latitude == pytest.approx(-33.9, abs=1e-4)
    assert exif.longitude == pytest.approx(-70.6, abs=1e-4)


def test_parse_exif_never_raises():
    assert parse_exif(b"").is_empty
    assert parse_exif(b"definitely not an image").is_empty


def test_format_exposure():
    assert format_exposure(0.004) == "1/250"
    assert format_exposure(2.0) == "2s"
    assert format_exposure(None) is None


def test_position_values():
    exif = ExifRecord(latitude=54.1234567, longitude=10.7654321,
                      date_time_original=datetime(2024, 5, 4, 9, 5))
    assert position_values(exif) == {
        "has_position": True,
        "latitude": 54.123457,
        "longitude": 10.765432,
        "sighting_date": "2024-05-04",
        "sighting_time": "09:05",
    }
    assert position_values(ExifRecord()) == {}


def test_ingest_attaches_with_exif(store, jpeg_with_gps):
    attachment = MediaPipeline(store).ingest("wal.jpg", "image/jpeg", jpeg_with_gps)
    assert attachment.exif.has_gps
    draft = store.load()
    assert len(draft.media) == 1
    # plain attachments leave the form values alone
    assert draft.values == {}


def test_position_photo_fills_location(store, jpeg_with_gps):
    MediaPipeline(store).ingest_from_position_step("pos.jpg", "image/jpeg", jpeg_with_gps)
    draft = store.load()
    assert draft.media[0].from_position_step
    assert draft.values["latitude"] == pytest.approx(54.5, abs=1e-4)
    assert draft.values["sighting_date"] == "2024-06-01"
    assert draft.values["sighting_time"] == "14:30"


def test_second_position_photo_replaces_holder(store, jpeg_with_gps):
    pipeline = MediaPipeline(store)
    pipeline.ingest_from_position_step("first.jpg", "image/jpeg", jpeg_with_gps)
    pipeline.ingest_from_position_step("second.jpg", "image/jpeg", make_jpeg(gps=(55.0, 11.0)))
    draft = store.load()
    assert [m.file_name for m in draft.media] == ["second.jpg", "first.jpg"]
    assert [m.from_position_step for m in draft.media] == [True, False]
    assert draft.values["latitude"] == pytest.approx(55.0, abs=1e-4)


def test_position_photo_without_gps_keeps_manual_position(store, jpeg_without_gps):
    store.update({"latitude": 54.0, "longitude": 10.0})
    MediaPipeline(store).ingest_from_position_step("nogps.jpg", "image/jpeg", jpeg_without_gps)
    assert store.load().values == {"latitude": 54.0, "longitude": 10.0}


def test_position_photo_must_be_image(store):
    with pytest.raises(UploadRejectedError):
        MediaPipeline(store).ingest_from_position_step("clip.mp4", "video/mp4", b"\x00" * 100)
    assert store.load().media == []


def test_rejects_unsafe_and_oversized(store):
    pipeline = MediaPipeline(store, extractor=lambda data: ExifRecord())
    with pytest.raises(UploadRejectedError, match="Unsicherer Dateiname"):
        pipeline.ingest("../etc.jpg", "image/jpeg", b"x")
    with pytest.raises(UploadRejectedError, match="Ungültiger Dateityp"):
        pipeline.ingest("doc.pdf", "application/pdf", b"x")
    with pytest.raises(UploadRejectedError, match="Datei zu groß"):
        uploads.check_upload("big.jpg", "image/jpeg", uploads.MAX_FILE_SIZE + 1)


def test_file_limit(store):
    pipeline = MediaPipeline(store, extractor=lambda data: ExifRecord())
    for i in range(uploads.MAX_FILES):
        pipeline.ingest(f"{i}.jpg", "image/jpeg", b"x")
    with pytest.raises(UploadRejectedError, match="Zu viele Dateien"):
        pipeline.ingest("one-more.jpg", "image/jpeg", b"x")
    assert len(store.load().media) == uploads.MAX_FILES


def test_video_skips_exif(store):
    calls = []
    pipeline = MediaPipeline(store, extractor=lambda data: calls.append(data) or ExifRecord())
    pipeline.ingest("clip.mp4", "video/mp4", b"\x00" * 10)
    assert calls == []


def test_remove(store):
    pipeline = MediaPipeline(store, extractor=lambda data: ExifRecord())
    pipeline.ingest("a.jpg", "image/jpeg", b"a")
    pipeline.ingest("b.jpg", "image/jpeg", b"b")
    assert pipeline.remove(0).file_name == "a.jpg"
    assert [m.file_name for m in store.load().media] == ["b.jpg"]
    with pytest.raises(NotFoundError):
        pipeline.remove(5)
