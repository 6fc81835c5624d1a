import pytest

pytest.importorskip("PySide6")

from conftest import make_animation, make_bitmap
from huaga.image_engine.metrics import metrics
from huaga.render_sync import TICK_INTERVAL_MS, RenderSync
from huaga.view_state import ViewState


@pytest.fixture
def view(fake_decoder, rescaler, displayed):
    return ViewState(display=displayed.append, decode=fake_decoder, rescale_fn=rescaler, clock=lambda: 0.0)


def test_step_renders_when_dirty(qtbot, view, fake_decoder, displayed):
    fake_decoder.add("/pics/a.png", make_bitmap(10, 10))
    view.open_image("/pics/a.png")
    sync = RenderSync(view)

    with qtbot.waitSignal(sync.rendered, timeout=1000):
        assert sync.step(0.0) is True
    assert len(displayed) == 1
    assert sync.step(0.0) is False
    assert len(displayed) == 1


def test_step_drives_animation(view, fake_decoder, displayed):
    anim = make_animation(100, 100)
    fake_decoder.add("/pics/c.gif", anim)
    view.open_image("/pics/c.gif")
    sync = RenderSync(view)

    sync.step(0.0)
    assert sync.step(0.05) is False
    assert sync.step(0.11) is True
    assert len(displayed) == 2


def test_overlapping_step_is_skipped(view, fake_decoder, displayed):
    fake_decoder.add("/pics/a.png", make_bitmap(10, 10))
    view.open_image("/pics/a.png")
    sync = RenderSync(view)
    metrics.reset()

    sync._busy.acquire()
    try:
        assert sync.step(0.0) is False
    finally:
        sync._busy.release()
    assert displayed == []
    assert metrics.render_stats().skipped_steps == 1
    assert sync.step(0.0) is True


def test_scale_error_does_not_stop_the_tick(view, fake_decoder, displayed):
    fake_decoder.add("/pics/empty.png", make_bitmap(0, 0))
    view.open_image("/pics/empty.png")
    sync = RenderSync(view)

    assert sync.step(0.0) is False
    assert view.is_dirty
    assert displayed == []


def test_timer_renders_without_explicit_step(qtbot, view, fake_decoder, displayed):
    sync = RenderSync(view)
    assert sync.interval() == TICK_INTERVAL_MS
    sync.start()
    try:
        assert sync.is_active()
        fake_decoder.add("/pics/a.png", make_bitmap(10, 10))
        view.open_image("/pics/a.png")
        qtbot.waitUntil(lambda: len(displayed) == 1, timeout=2000)
    finally:
        sync.stop()
    assert not sync.is_active()
