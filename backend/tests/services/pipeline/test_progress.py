from app.services.pipeline.progress import ProgressReporter, stage_percent


def test_stage_percent_interpolates_within_window():
    assert stage_percent("extract") == 5
    assert stage_percent("extract", 1.0) == 15
    assert stage_percent("script", 0.5) == 45
    assert stage_percent("audio", 2.0) == 75
    assert stage_percent("audio", -1.0) == 60


def test_stage_percent_rounds_half_up():
    # 60 + 0.5 * 15 = 67.5
    assert stage_percent("audio", 0.5) == 68


def test_reported_progress_never_decreases():
    calls = []
    reporter = ProgressReporter(lambda stage, percent, message: calls.append((stage, percent)))

    reporter.report("video", "Rendering", 1.0)
    reporter.report("audio", "Late audio update", 0.0)

    assert calls == [("video", 90), ("audio", 90)]
    assert reporter.percent == 90


def test_step_reports_fraction_of_items():
    reporter = ProgressReporter()
    reporter.step("audio", 1, 3, "Narrated episode 1 of 3")
    assert reporter.percent == 65
    reporter.step("audio", 0, 0, "Nothing to narrate")
    assert reporter.percent == 75


def test_callback_errors_are_swallowed():
    def explode(stage, percent, message):
        raise RuntimeError("websocket closed")

    reporter = ProgressReporter(explode)
    event = reporter.report("extract", "Extracting document")
    assert event.percent == 5
    assert len(reporter.events) == 1


def test_full_run_ends_at_one_hundred():
    reporter = ProgressReporter()
    for stage in ("extract", "photos", "script", "audio", "video", "persist"):
        reporter.report(stage, stage, 1.0)
    reporter.report("complete", "Done", 1.0)
    percents = [event.percent for event in reporter.events]
    assert percents == sorted(percents)
    assert percents[-1] == 100
