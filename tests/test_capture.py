import asyncio
import os

import pytest

from stripbooth.models.session import SessionContext, SessionPhase
from stripbooth.services.camera import CameraService
from stripbooth.services.capture import FAILURE_MESSAGE, PERMISSION_MESSAGE, CaptureSessionController

from conftest import CaptureFactory, FakeRecorder, SlowCapture


@pytest.fixture
def session():
    context = SessionContext(shot_count=6, selection_limit=4)
    yield context
    context.dispose()


async def test_successful_session_produces_six_pairs_and_releases_camera(fast_settings, fake_recorder, events, session):
    factory = CaptureFactory()
    camera = CameraService(factory)
    controller = CaptureSessionController(camera, events, fake_recorder)

    assert await controller.run(session)

    assert len(session.stills) == 6
    assert [clip.index for clip in session.clips] == list(range(6))
    assert session.phase == SessionPhase.selecting
    assert session.progress == "6 / 6"
    assert not camera.is_active
    assert camera.camera is None
    assert factory.instances[0].release_calls == 1


async def test_session_emits_countdown_and_progress(fast_settings, fake_recorder, events, session):
    controller = CaptureSessionController(CameraService(CaptureFactory()), events, fake_recorder)
    await controller.run(session)

    assert [e["value"] for e in events.of_type("countdown")] == [2, 1] * 6
    assert [e["text"] for e in events.of_type("progress")] == [f"{i} / 6" for i in range(7)]
    assert [e["phase"] for e in events.of_type("phase")] == ["acquiring", "shooting", "selecting"]


async def test_stills_keep_full_camera_resolution(fast_settings, fake_recorder, session):
    controller = CaptureSessionController(CameraService(CaptureFactory(size=(320, 180))), None, fake_recorder)
    await controller.run(session)

    assert all(still.size == (320, 180) for still in session.stills)


async def test_camera_rejection_resets_to_start(fast_settings, fake_recorder, events, session):
    session.selection.toggle(1)
    session.frame_index = 3
    factory = CaptureFactory(opened=False)
    camera = CameraService(factory)
    controller = CaptureSessionController(camera, events, fake_recorder)

    assert not await controller.run(session)

    assert session.stills == []
    assert session.clips == []
    assert len(session.selection) == 0
    assert session.frame_index == 0
    assert session.phase == SessionPhase.idle
    assert session.error == PERMISSION_MESSAGE
    assert events.of_type("error") == [{"type": "error", "message": PERMISSION_MESSAGE}]
    assert [e["phase"] for e in events.of_type("phase")] == ["acquiring", "failed", "idle"]
    assert not camera.is_active
    assert fake_recorder.instances == []


async def test_mid_session_failure_aborts_and_discards(fast_settings, fake_recorder, events, session):
    # first read is the metadata wait, then one snapshot per shot
    factory = CaptureFactory(fail_after=3)
    camera = CameraService(factory)
    controller = CaptureSessionController(camera, events, fake_recorder)

    assert not await controller.run(session)

    assert session.stills == []
    assert session.clips == []
    assert session.error == FAILURE_MESSAGE
    assert session.phase == SessionPhase.idle
    assert factory.instances[0].release_calls == 1
    assert not any(os.listdir(session.workdir))


async def test_real_clip_recorder_writes_one_clip_per_shot(fast_settings, session):
    controller = CaptureSessionController(CameraService(CaptureFactory()))
    assert await controller.run(session)

    assert len(session.clips) == 6
    for clip in session.clips:
        assert os.path.exists(clip.path)
        assert clip.frame_count >= 1

    session.release_clips()
    assert not [name for name in os.listdir(session.workdir) if name.startswith("clip-")]


async def test_cancelled_session_releases_camera_after_pending_read(fast_settings, fake_recorder, session):
    capture = SlowCapture()
    controller = CaptureSessionController(CameraService(lambda index: capture), None, fake_recorder)

    task = asyncio.create_task(controller.run(session))
    while not session.stills:
        await asyncio.sleep(0.005)
    capture.slow = True
    while not capture.reading:
        await asyncio.sleep(0.005)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not capture.released_mid_read
    assert capture.release_calls == 1
    assert session.stills == [] and session.clips == []
