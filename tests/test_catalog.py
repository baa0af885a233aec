import pytest

from timetable_tracker.core.errors import ValidationError
from timetable_tracker.models import Activity
from timetable_tracker.services.catalog_service import (
    DEFAULT_ACTIVITIES,
    apply_catalog_edit,
    duration_minutes,
    parse_time_range,
    validate_activities,
)
from timetable_tracker.services.week_service import start_new_week

from conftest import CODE, NEXT_TUESDAY, READ, RUN, build_timetable


def _statuses(timetable):
    return {progress.activity: progress.daily_status for progress in timetable.current_week.activities}


def test_default_catalog_has_five_activities_with_valid_times():
    assert [activity.name for activity in DEFAULT_ACTIVITIES] == [
        "DS & Algo",
        "MERN Stack",
        "Go Backend",
        "Java & Spring",
        "Mobile Development",
    ]
    for activity in DEFAULT_ACTIVITIES:
        parse_time_range(activity.time)


def test_parse_time_range_returns_minutes():
    assert parse_time_range("07:00-08:30") == (420, 510)


@pytest.mark.parametrize("value", ["7:00-08:00", "24:00-01:00", "07:60-08:00", "07:00 - 08:00", "", "07:00"])
def test_parse_time_range_rejects_malformed_values(value):
    with pytest.raises(ValidationError):
        parse_time_range(value)


def test_duration_wraps_past_midnight():
    assert duration_minutes("07:00-08:00") == 60
    assert duration_minutes("18:00-00:00") == 360
    assert duration_minutes("23:30-00:15") == 45


def test_validate_activities_requires_a_list():
    with pytest.raises(ValidationError) as excinfo:
        validate_activities({"name": "Read"})

    assert excinfo.value.message == "Invalid input: activities must be an array"


def test_validate_activities_names_the_missing_field():
    with pytest.raises(ValidationError) as excinfo:
        validate_activities([READ.as_dict(), {"name": "Run", "time": "06:00-06:30"}])

    assert "activities[1].category is missing" in excinfo.value.message
    assert excinfo.value.field == "category"


def test_validate_activities_rejects_bad_time_with_index():
    with pytest.raises(ValidationError) as excinfo:
        validate_activities([{"name": "Read", "time": "7-8", "category": "Self"}])

    assert excinfo.value.message.startswith("activities[0].time:")


def test_validate_activities_strips_whitespace():
    assert validate_activities([{"name": " Read ", "time": "07:00-08:00", "category": "Self "}]) == [READ]


def test_unchanged_activities_keep_progress_regardless_of_order():
    a1, a2, a3 = READ, RUN, CODE
    a4 = Activity(name="Stretch", time="08:00-08:15", category="Health")
    timetable = build_timetable([a1, a2, a3])
    for progress in timetable.current_week.activities:
        progress.daily_status = [True] + [False] * 6

    apply_catalog_edit(timetable, [a4, a2, a1])

    statuses = _statuses(timetable)
    assert [progress.activity for progress in timetable.current_week.activities] == [a4, a2, a1]
    assert statuses[a1] == [True] + [False] * 6
    assert statuses[a2] == [True] + [False] * 6
    assert statuses[a4] == [False] * 7
    assert timetable.catalog == [a4, a2, a1]


def test_reordered_catalog_keeps_every_entry_once():
    timetable = build_timetable([RUN, READ, CODE])

    apply_catalog_edit(timetable, [READ, RUN, CODE])
    apply_catalog_edit(timetable, [CODE, READ, RUN])

    assert timetable.catalog == [CODE, READ, RUN]
    assert [entry.position for entry in timetable.default_activities] == [0, 1, 2]
    assert [progress.activity for progress in timetable.current_week.activities] == [CODE, READ, RUN]
    assert [progress.id for progress in timetable.current_week.activities] == [3, 2, 1]


def test_single_field_change_resets_progress():
    timetable = build_timetable([READ])
    timetable.current_week.activities[0].daily_status = [True] * 7
    moved = Activity(name="Read", time="07:30-08:30", category="Self")

    apply_catalog_edit(timetable, [moved])

    assert _statuses(timetable)[moved] == [False] * 7
    assert timetable.current_week.overall_completion_rate == 0.0


def test_reusing_the_same_catalog_changes_nothing():
    timetable = build_timetable([READ, RUN])
    timetable.current_week.activities[1].daily_status = [False, True] + [False] * 5
    rows = list(timetable.current_week.activities)

    apply_catalog_edit(timetable, [READ, RUN])

    assert all(new is old for new, old in zip(timetable.current_week.activities, rows))
    assert len(timetable.current_week.activities) == len(rows)
    assert timetable.current_week.activities[1].completion_rate == 14.3


def test_duplicate_entry_gets_a_copy_of_the_status():
    timetable = build_timetable([READ])
    timetable.current_week.activities[0].daily_status = [True, True] + [False] * 5

    apply_catalog_edit(timetable, [READ, READ])

    first, second = timetable.current_week.activities
    assert first is not second
    assert first.daily_status == second.daily_status == [True, True] + [False] * 5
    assert first.daily_status is not second.daily_status


def test_catalog_edit_does_not_touch_history():
    timetable = build_timetable([READ])
    timetable.current_week.activities[0].daily_status = [True] * 7
    start_new_week(timetable, NEXT_TUESDAY)

    apply_catalog_edit(timetable, [RUN])

    archived = timetable.history[0]
    assert [progress.activity for progress in archived.activities] == [READ]
    assert archived.activities[0].daily_status == [True] * 7
