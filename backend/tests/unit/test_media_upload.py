"""Unit tests for the MediaUploadCoordinator."""

import asyncio
import logging

import pytest

from app.application.services import IncomingFile, MediaBatch, MediaUploadCoordinator
from app.domain.entities import MediaFile
from app.domain.exceptions import MediaUploadError
from tests.fakes import FakeMediaStorage


def _file(name: str, content: bytes = b"payload") -> IncomingFile:
    return IncomingFile(content=content, filename=name, mimetype="image/png")


def _stored(file_id: str) -> MediaFile:
    return MediaFile(id=file_id, url=f"/media/{file_id}", filename="x.png", mimetype="image/png", size=1)


@pytest.fixture
def storage() -> FakeMediaStorage:
    return FakeMediaStorage()


@pytest.fixture
def coordinator(storage: FakeMediaStorage) -> MediaUploadCoordinator:
    return MediaUploadCoordinator(uploader=storage, deleter=storage)


@pytest.mark.asyncio
async def test_upload_returns_records_per_group(coordinator: MediaUploadCoordinator):
    batch = MediaBatch(featured=_file("cover.png"), images=[_file("a.png"), _file("b.png")], videos=[_file("v.mp4")])

    uploaded = await coordinator.upload(batch)

    assert uploaded.featured.filename == "cover.png"
    assert [f.filename for f in uploaded.images] == ["a.png", "b.png"]
    assert uploaded.videos[0].size == len(b"payload")
    assert uploaded.count == 4
    assert uploaded.featured.url.startswith("/media/")


@pytest.mark.asyncio
async def test_featured_uploads_before_groups(coordinator: MediaUploadCoordinator, storage: FakeMediaStorage):
    await coordinator.upload(MediaBatch(featured=_file("cover.png"), images=[_file("a.png")], videos=[_file("v.mp4")]))

    assert storage.uploaded_names[0] == "cover.png"
    assert storage.uploaded_names[-1] == "v.mp4"


@pytest.mark.asyncio
async def test_empty_batch_uploads_nothing(coordinator: MediaUploadCoordinator, storage: FakeMediaStorage):
    batch = MediaBatch(featured=_file("empty.png", b""), images=[_file("e.png", b"")])

    uploaded = await coordinator.upload(batch)

    assert batch.is_empty
    assert uploaded.count == 0
    assert storage.events == []


@pytest.mark.asyncio
async def test_failed_upload_raises_media_upload_error(coordinator: MediaUploadCoordinator, storage: FakeMediaStorage):
    storage.fail_uploads = {"b.png"}

    with pytest.raises(MediaUploadError) as exc_info:
        await coordinator.upload(MediaBatch(images=[_file("a.png"), _file("b.png")]))

    assert exc_info.value.filename == "b.png"
    assert "disk full" in str(exc_info.value)


@pytest.mark.asyncio
async def test_group_uploads_run_concurrently(coordinator: MediaUploadCoordinator, storage: FakeMediaStorage):
    storage.upload_delays = {"a.png": 0.05, "b.png": 0.05}

    await coordinator.upload(MediaBatch(images=[_file("a.png"), _file("b.png")]))

    assert storage.events[:2] == [("start", "a.png"), ("start", "b.png")]
    assert sorted(storage.uploaded_names) == ["a.png", "b.png"]


@pytest.mark.asyncio
async def test_failed_upload_cancels_its_siblings(coordinator: MediaUploadCoordinator, storage: FakeMediaStorage):
    storage.fail_uploads = {"bad.png"}
    storage.upload_delays = {"bad.png": 0.01, "slow.png": 0.2}

    with pytest.raises(MediaUploadError) as exc_info:
        await coordinator.upload(MediaBatch(images=[_file("bad.png"), _file("slow.png")]))

    assert exc_info.value.filename == "bad.png"
    assert isinstance(exc_info.value.__cause__, OSError)
    assert ("cancelled", "slow.png") in storage.events

    # Nothing lands in storage after the failure has been reported
    await asyncio.sleep(0.3)
    assert storage.uploaded_names == []
    assert storage.files == {}


@pytest.mark.asyncio
async def test_failed_image_group_skips_videos(coordinator: MediaUploadCoordinator, storage: FakeMediaStorage):
    storage.fail_uploads = {"bad.png"}

    with pytest.raises(MediaUploadError):
        await coordinator.upload(MediaBatch(images=[_file("bad.png")], videos=[_file("v.mp4")]))

    assert ("start", "v.mp4") not in storage.events


@pytest.mark.asyncio
async def test_discard_is_best_effort(
    coordinator: MediaUploadCoordinator, storage: FakeMediaStorage, caplog: pytest.LogCaptureFixture
):
    caplog.set_level(logging.INFO)
    storage.fail_deletes = {"bad"}

    removed = await coordinator.discard([_stored("ok-1"), _stored("bad"), _stored("ok-2")], reason="test cleanup")

    assert removed == 2
    assert sorted(storage.deleted_ids) == ["ok-1", "ok-2"]
    assert "Failed to delete file bad (test cleanup)" in caplog.text


@pytest.mark.asyncio
async def test_discard_nothing(coordinator: MediaUploadCoordinator):
    assert await coordinator.discard([], reason="noop") == 0
