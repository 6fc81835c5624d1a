from huaga.image_engine.metrics import (
    DECODE_FAILURES,
    RENDERS,
    RESCALE,
    SKIPPED_STEPS,
    RenderStats,
    _Metrics,
)


def test_render_stats_empty():
    stats = _Metrics().render_stats()
    assert stats == RenderStats()
    assert stats.summary() == "0 renders"


def test_render_stats_collects_counters_and_rescale_timing():
    m = _Metrics()
    m.inc(RENDERS, 3)
    m.inc(SKIPPED_STEPS)
    m.inc(DECODE_FAILURES, 2)
    m.inc("unrelated.counter")
    with m.timed(RESCALE):
        pass

    stats = m.render_stats()
    assert (stats.renders, stats.skipped_steps, stats.decode_failures) == (3, 1, 2)
    assert stats.last_rescale_ms == stats.mean_rescale_ms
    assert stats.last_rescale_ms >= 0.0

    summary = stats.summary()
    assert summary.startswith("3 renders, rescale ")
    assert summary.endswith(", 1 skipped, 2 unreadable")


def test_reset_clears_stats():
    m = _Metrics()
    m.inc(RENDERS)
    m.reset()
    assert m.render_stats().renders == 0
    assert m.count(RENDERS) == 0
