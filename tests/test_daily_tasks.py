from datetime import datetime, timezone

from homecare.db.base import PocDailyTaskLog, PocDuty
from homecare.utils.daily_tasks import build_tasks_for_day, normalize_completion, to_iso

MONDAY, TUESDAY, WEDNESDAY, SATURDAY = "2025-01-06", "2025-01-07", "2025-01-08", "2025-01-11"


def duty(id, days, task_no=None, sort_order=0, name=None):
    return PocDuty(
        id=id,
        poc_id="poc-1",
        category="Care",
        task_no=task_no,
        duty=name or f"Duty {id}",
        days_of_week=days,
        sort_order=sort_order,
    )


def task_log(duty_id, status="INDEPENDENT", note=None, completed_at=None):
    return PocDailyTaskLog(
        daily_log_id="log-1",
        poc_duty_id=duty_id,
        completion_status=status,
        note=note,
        completed_at=completed_at,
    )


def ids(tasks):
    return [t["id"] for t in tasks]


def test_unconstrained_without_log_is_hidden_every_day():
    duties = [duty("a", None), duty("b", []), duty("c", ""), duty("d", {})]
    for ymd in (MONDAY, TUESDAY, WEDNESDAY, SATURDAY):
        assert build_tasks_for_day(ymd, duties, {}) == []


def test_unconstrained_with_log_is_shown_for_that_log():
    duties = [duty("a", None)]
    logs = {"a": task_log("a", "REFUSED", note="not hungry")}

    tasks = build_tasks_for_day(TUESDAY, duties, logs)

    assert ids(tasks) == ["a"]
    assert tasks[0]["status"] == "REFUSED"
    assert tasks[0]["note"] == "not hungry"
    # a different daily log (other date) has no row for the duty
    assert build_tasks_for_day(WEDNESDAY, duties, {}) == []


def test_empty_list_scenario_shows_after_logging():
    duties = [duty("a", [])]
    assert build_tasks_for_day(MONDAY, duties, {}) == []
    assert ids(build_tasks_for_day(MONDAY, duties, {"a": task_log("a")})) == ["a"]


def test_constrained_duty_follows_weekdays():
    duties = [duty("mwf", ["Mon", "Wed", "Fri"])]
    assert ids(build_tasks_for_day(MONDAY, duties, {})) == ["mwf"]
    assert build_tasks_for_day(TUESDAY, duties, {}) == []
    # a stray log does not resurrect a duty on an excluded day
    assert build_tasks_for_day(TUESDAY, duties, {"mwf": task_log("mwf")}) == []


def test_weekend_map():
    duties = [duty("wk", {"0": True, "6": True})]
    assert ids(build_tasks_for_day(SATURDAY, duties, {})) == ["wk"]
    assert build_tasks_for_day(MONDAY, duties, {}) == []


def test_order_is_preserved():
    duties = [
        duty("z", "mon,tue", task_no=3),
        duty("a", ["M"], task_no=1),
        duty("m", None, task_no=2),
    ]
    logs = {"m": task_log("m")}
    assert ids(build_tasks_for_day(MONDAY, duties, logs)) == ["z", "a", "m"]


def test_malformed_fails_open_unless_told_otherwise():
    duties = [duty("bad", "[mon, wed")]
    assert ids(build_tasks_for_day(TUESDAY, duties, {})) == ["bad"]
    assert build_tasks_for_day(TUESDAY, duties, {}, fail_open=False) == []


def test_output_shape_without_log():
    tasks = build_tasks_for_day(MONDAY, [duty("a", ["mon"], task_no=7, name="Bathing")], {})
    assert tasks == [{
        "id": "a",
        "taskNo": 7,
        "duty": "Bathing",
        "category": "Care",
        "status": None,
        "note": None,
        "timestamp": None,
    }]


def test_output_shape_with_log():
    done = datetime(2025, 1, 6, 15, 30, tzinfo=timezone.utc)
    logs = {"a": task_log("a", "verbal_prompt", note="needed reminder", completed_at=done)}

    task = build_tasks_for_day(MONDAY, [duty("a", ["mon"])], logs)[0]

    assert task["status"] == "VERBAL_PROMPT"
    assert task["note"] == "needed reminder"
    assert task["timestamp"] == "2025-01-06T15:30:00+00:00"


def test_unknown_completion_status_is_null():
    logs = {"a": task_log("a", "DONE")}
    assert build_tasks_for_day(MONDAY, [duty("a", ["mon"])], logs)[0]["status"] is None


def test_empty_inputs():
    assert build_tasks_for_day(MONDAY, [], {}) == []
    assert build_tasks_for_day(MONDAY, None, None) == []


def test_normalize_completion():
    assert normalize_completion(" physical_assist ") == "PHYSICAL_ASSIST"
    assert normalize_completion("") is None
    assert normalize_completion(None) is None
    assert normalize_completion("skipped") is None


def test_to_iso():
    assert to_iso(None) is None
    assert to_iso(datetime(2025, 1, 6, 8, 0)) == "2025-01-06T08:00:00+00:00"
    assert to_iso("2025-01-06T08:00:00Z") == "2025-01-06T08:00:00+00:00"
    assert to_iso("yesterday") is None


def test_plain_record_duties():
    duties = [
        {"id": "a", "category": "Care", "taskNo": 1, "duty": "Bathing", "daysOfWeek": ["Mon"], "sortOrder": 1},
        {"id": "b", "category": "Meals", "taskNo": 2, "duty": "Lunch", "daysOfWeek": None, "sortOrder": 2},
        {"id": "c", "category": "Care", "taskNo": 3, "duty": "Walk", "days_of_week": "tue"},
    ]
    logs = {"b": {"completionStatus": "refused", "note": "ate out", "completedAt": "2025-01-06T12:00:00Z"}}

    tasks = build_tasks_for_day(MONDAY, duties, logs)

    assert ids(tasks) == ["a", "b"]
    assert tasks[0]["taskNo"] == 1
    assert tasks[1]["status"] == "REFUSED"
    assert tasks[1]["note"] == "ate out"
    assert tasks[1]["timestamp"] == "2025-01-06T12:00:00+00:00"
    assert ids(build_tasks_for_day(TUESDAY, duties, {})) == ["c"]


def test_odd_task_numbers_become_null():
    duties = [
        {"id": "a", "taskNo": "3", "daysOfWeek": ["mon"]},
        {"id": "b", "taskNo": "first", "daysOfWeek": ["mon"]},
        {"id": "c", "taskNo": float("inf"), "daysOfWeek": ["mon"]},
    ]
    assert [t["taskNo"] for t in build_tasks_for_day(MONDAY, duties, {})] == [3, None, None]


def test_unreadable_target_date_does_not_raise():
    duties = [duty("a", ["mon"]), duty("b", "[[")]
    assert ids(build_tasks_for_day("0001-01-01T00:00:00", duties, {})) == ["a", "b"]
