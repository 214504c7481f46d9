from initiative_engine.utils.periods import (
    OPEN_END,
    build_period_value,
    default_window_end,
    parse_period_value,
    period_duration_days,
    target_date,
)


def test_parse_discovery_window():
    window = parse_period_value("2026-02-01 → 2026-02-14")
    assert window.start == "2026-02-01"
    assert window.end == "2026-02-14"
    assert window.has_start and window.has_end


def test_open_end_placeholder_is_not_an_end():
    window = parse_period_value(build_period_value("2026-02-01", None))
    assert window.end == OPEN_END
    assert not window.has_end


def test_empty_value():
    window = parse_period_value(None)
    assert not window.has_start
    assert not window.has_end


def test_target_date_reads_single_date_and_window_end():
    assert target_date("2026-03-31") == "2026-03-31"
    assert target_date("2026-02-01 → 2026-02-14") == "2026-02-14"
    assert target_date("2026-02-01 → ...") == ""
    assert target_date(None) == ""


def test_default_window_end():
    assert default_window_end("2026-02-01", 14) == "2026-02-15"
    assert default_window_end("next sprint", 14) is None


def test_period_duration_days():
    assert period_duration_days("2026-02-01 → 2026-02-15") == 14
    assert period_duration_days("2026-02-01 → ...") is None
