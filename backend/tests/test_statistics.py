from datetime import date

from app.models import AttendanceLog, DayOfWeek
from conftest import MONDAY, create_entry

NEXT_MONDAY = "2024-06-10"


def save_record(client, seed, entry, on_date, **overrides):
    payload = {
        "attendanceDate": on_date,
        "originalScheduleEntryId": entry["id"],
        "isPresent": False,
        "substituteTeacherId": None,
        "actualTeacherIds": [],
    }
    payload.update(overrides)
    response = client.post(f"{seed.base}/attendance", json=[payload], headers=seed.admin)
    assert response.status_code == 200, response.text
    return response.json()


def summary(client, seed, path, start=MONDAY, end=NEXT_MONDAY):
    response = client.get(
        f"{seed.base}/statistics/{path}",
        params={"startDate": start, "endDate": end},
        headers=seed.admin,
    )
    assert response.status_code == 200, response.text
    return response.json()


def test_attendance_summary_counts_self_and_substitute_teaching(client, seed):
    math = create_entry(client, seed, classGroupId="CG1", teacherIds=["T1"])
    club = create_entry(
        client, seed, classGroupId="CG2", timeSlotId="P2", subjectCode=None, customActivity="Club", teacherIds=["T3"]
    )
    retired = create_entry(client, seed, classGroupId="CG3", timeSlotId="P3", teacherIds=["T9"])

    save_record(client, seed, math, MONDAY, isPresent=True)
    save_record(client, seed, math, NEXT_MONDAY, substituteTeacherId="T4")
    save_record(client, seed, club, MONDAY, isPresent=True, actualTeacherIds=["T4"])
    save_record(client, seed, retired, MONDAY, isPresent=True)
    save_record(client, seed, math, "2024-06-17", isPresent=True)

    rows = summary(client, seed, "attendance-summary")
    assert [row["teacherName"] for row in rows] == ["Anong", "Chalerm", "Duangjai"]
    by_teacher = {row["teacherId"]: row["subjectStats"] for row in rows}

    assert by_teacher["T1"] == {
        "MATH101": {"subjectName": "Mathematics", "totalScheduled": 2, "taughtBySelf": 1, "taughtBySubstitute": 1}
    }
    # The scheduled teacher of a custom activity keeps the slot even when someone else ran it.
    assert by_teacher["T3"]["activity_Club"] == {
        "subjectName": "Club",
        "totalScheduled": 1,
        "taughtBySelf": 0,
        "taughtBySubstitute": 0,
    }
    assert by_teacher["T4"]["activity_Club"]["totalScheduled"] == 1
    assert by_teacher["T4"]["activity_Club"]["taughtBySelf"] == 1

    for stats in by_teacher.values():
        for stat in stats.values():
            assert stat["taughtBySelf"] + stat["taughtBySubstitute"] <= stat["totalScheduled"]


def test_attendance_summary_ignores_lunch_break_logs(client, seed, db_session):
    db_session.add(
        AttendanceLog(
            school_id=seed.school_id,
            attendance_date=date(2024, 6, 3),
            original_schedule_entry_id="gone",
            day=DayOfWeek.monday,
            time_slot_id="P2",
            time_slot_period=2,
            start_time="09:20",
            end_time="10:10",
            class_group_id="CG1",
            custom_activity="Lunch Break",
            original_teacher_ids=["T1"],
            is_present=True,
        )
    )
    db_session.commit()

    assert summary(client, seed, "attendance-summary") == []


def test_substitution_summary_is_zero_filled(client, seed):
    math = create_entry(client, seed, classGroupId="CG1", teacherIds=["T1"])
    for on_date, substitute in ((MONDAY, "T4"), (NEXT_MONDAY, "T3"), ("2024-06-17", "T3")):
        response = client.post(
            f"{seed.base}/substitutions",
            json={
                "substitutionDate": on_date,
                "absentTeacherId": "T1",
                "substituteTeacherId": substitute,
                "originalScheduleEntryId": math["id"],
                "reason": "Seminar",
            },
            headers=seed.admin,
        )
        assert response.status_code == 201

    rows = summary(client, seed, "substitution-summary")
    assert rows == [
        {"teacherId": "T1", "teacherName": "Anong", "taughtAsSubstitute": 0, "wasSubstitutedFor": 2},
        {"teacherId": "T2", "teacherName": "Boonmee", "taughtAsSubstitute": 0, "wasSubstitutedFor": 0},
        {"teacherId": "T3", "teacherName": "Chalerm", "taughtAsSubstitute": 1, "wasSubstitutedFor": 0},
        {"teacherId": "T4", "teacherName": "Duangjai", "taughtAsSubstitute": 1, "wasSubstitutedFor": 0},
    ]


def test_summaries_require_a_valid_range(client, seed):
    base = f"{seed.base}/statistics"
    missing = client.get(f"{base}/attendance-summary", params={"startDate": MONDAY}, headers=seed.admin)
    assert missing.status_code == 400

    reversed_range = client.get(
        f"{base}/substitution-summary",
        params={"startDate": NEXT_MONDAY, "endDate": MONDAY},
        headers=seed.admin,
    )
    assert reversed_range.status_code == 400


def test_summaries_are_editor_only(client, seed):
    params = {"startDate": MONDAY, "endDate": NEXT_MONDAY}
    for path in ("attendance-summary", "substitution-summary"):
        response = client.get(f"{seed.base}/statistics/{path}", params=params, headers=seed.viewer)
        assert response.status_code == 403
