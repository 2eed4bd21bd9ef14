from sqlalchemy import text

from app.models import School
from conftest import create_entry, entry_payload


def test_create_and_list_schedule_entries(client, seed):
    item = create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1", locationId="L1")
    assert item["academicYear"] == "2024"
    assert item["semester"] == 1
    assert item["day"] == "Monday"
    assert item["teacherIds"] == ["T1"]

    listed = client.get(f"{seed.base}/schedule", headers=seed.viewer)
    assert listed.status_code == 200
    assert [entry["id"] for entry in listed.json()] == [item["id"]]

    other_term = client.get(f"{seed.base}/schedule", params={"academicYear": "2023"}, headers=seed.viewer)
    assert other_term.status_code == 200
    assert other_term.json() == []


def test_teacher_double_booking_is_rejected_with_the_colliding_entry(client, seed):
    first = create_entry(client, seed, teacherIds=["T1"])

    response = client.post(
        f"{seed.base}/schedule",
        json=entry_payload(teacherIds=["T1", "T2"], classGroupId="CG2"),
        headers=seed.admin,
    )
    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["conflict"]["kind"] == "teacher"
    assert body["conflict"]["conflictingEntry"]["id"] == first["id"]
    assert body["message"] == body["conflict"]["message"]

    listed = client.get(f"{seed.base}/schedule", headers=seed.admin).json()
    assert len(listed) == 1


def test_location_and_class_group_conflicts(client, seed):
    first = create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1", locationId="L1")

    location = client.post(
        f"{seed.base}/schedule",
        json=entry_payload(teacherIds=["T2"], classGroupId="CG2", locationId="L1"),
        headers=seed.admin,
    )
    assert location.status_code == 409
    assert location.json()["conflict"]["kind"] == "location"

    group = client.post(
        f"{seed.base}/schedule",
        json=entry_payload(teacherIds=["T2"], classGroupId="CG1", locationId="L2"),
        headers=seed.admin,
    )
    assert group.status_code == 409
    assert group.json()["conflict"]["kind"] == "classGroup"
    assert group.json()["conflict"]["conflictingEntry"]["id"] == first["id"]


def test_same_resources_in_another_slot_are_allowed(client, seed):
    create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1", locationId="L1")
    create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1", locationId="L1", timeSlotId="P2")
    create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1", locationId="L1", day="Tuesday")


def test_entry_without_claims_never_conflicts(client, seed):
    create_entry(client, seed, customActivity="Assembly", subjectCode=None)
    create_entry(client, seed, customActivity="Assembly", subjectCode=None)
    create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1", locationId="L1")


def test_update_does_not_conflict_with_itself(client, seed):
    item = create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1", locationId="L1")

    response = client.put(
        f"{seed.base}/schedule/{item['id']}",
        json=entry_payload(teacherIds=["T1", "T2"], classGroupId="CG1", locationId="L2"),
        headers=seed.admin,
    )
    assert response.status_code == 200
    assert response.json()["item"]["teacherIds"] == ["T1", "T2"]
    assert response.json()["item"]["locationId"] == "L2"


def test_update_into_occupied_slot_is_rejected(client, seed):
    occupied = create_entry(client, seed, teacherIds=["T1"])
    moving = create_entry(client, seed, teacherIds=["T1"], timeSlotId="P2")

    response = client.put(
        f"{seed.base}/schedule/{moving['id']}",
        json=entry_payload(teacherIds=["T1"]),
        headers=seed.admin,
    )
    assert response.status_code == 409
    assert response.json()["conflict"]["conflictingEntry"]["id"] == occupied["id"]


def test_update_missing_entry_returns_404(client, seed):
    response = client.put(f"{seed.base}/schedule/missing", json=entry_payload(), headers=seed.admin)
    assert response.status_code == 404


def test_teacher_ids_round_trip_in_order(client, seed):
    for teacher_ids, slot in (([], "P1"), (["T1"], "P2"), (["T3", "T1", "T2"], "P3")):
        item = create_entry(client, seed, teacherIds=teacher_ids, timeSlotId=slot)
        assert item["teacherIds"] == teacher_ids

    listed = client.get(f"{seed.base}/schedule", headers=seed.admin).json()
    assert sorted(entry["teacherIds"] for entry in listed) == sorted([[], ["T1"], ["T3", "T1", "T2"]])


def test_unreadable_teacher_ids_read_back_as_empty(client, seed, db_session):
    item = create_entry(client, seed, teacherIds=["T1"])
    db_session.execute(
        text("UPDATE schedule_entries SET teacher_ids = :raw WHERE id = :id"),
        {"raw": "not-json", "id": item["id"]},
    )
    db_session.commit()

    listed = client.get(f"{seed.base}/schedule", headers=seed.admin)
    assert listed.status_code == 200
    assert listed.json()[0]["teacherIds"] == []


def test_delete_entry(client, seed):
    item = create_entry(client, seed, teacherIds=["T1"])

    deleted = client.delete(f"{seed.base}/schedule/{item['id']}", headers=seed.admin)
    assert deleted.status_code == 204
    assert client.get(f"{seed.base}/schedule", headers=seed.admin).json() == []

    missing = client.delete(f"{seed.base}/schedule/{item['id']}", headers=seed.admin)
    assert missing.status_code == 404


def test_delete_entry_with_substitutions_is_blocked(client, seed):
    item = create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1")
    substitution = client.post(
        f"{seed.base}/substitutions",
        json={
            "substitutionDate": "2024-06-03",
            "absentTeacherId": "T1",
            "substituteTeacherId": "T2",
            "originalScheduleEntryId": item["id"],
            "reason": "Sick leave",
        },
        headers=seed.admin,
    )
    assert substitution.status_code == 201

    response = client.delete(f"{seed.base}/schedule/{item['id']}", headers=seed.admin)
    assert response.status_code == 409
    assert "substitutions" in response.json()["message"]
    assert len(client.get(f"{seed.base}/schedule", headers=seed.admin).json()) == 1


def test_resolve_conflict_replaces_the_colliding_entry(client, seed):
    first = create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1")

    response = client.post(
        f"{seed.base}/schedule/resolve-conflict",
        json={
            "entryToSave": entry_payload(teacherIds=["T1", "T2"], classGroupId="CG2"),
            "conflictingEntryId": first["id"],
        },
        headers=seed.admin,
    )
    assert response.status_code == 201
    saved = response.json()["item"]
    assert saved["teacherIds"] == ["T1", "T2"]

    listed = client.get(f"{seed.base}/schedule", headers=seed.admin).json()
    assert [entry["id"] for entry in listed] == [saved["id"]]


def test_resolve_conflict_updates_an_existing_entry(client, seed):
    occupied = create_entry(client, seed, teacherIds=["T1"])
    moving = create_entry(client, seed, teacherIds=["T3"], timeSlotId="P2")

    payload = entry_payload(teacherIds=["T1", "T3"])
    payload["id"] = moving["id"]
    response = client.post(
        f"{seed.base}/schedule/resolve-conflict",
        json={"entryToSave": payload, "conflictingEntryId": occupied["id"]},
        headers=seed.admin,
    )
    assert response.status_code == 200
    assert response.json()["item"]["id"] == moving["id"]
    assert response.json()["item"]["timeSlotId"] == "P1"

    listed = client.get(f"{seed.base}/schedule", headers=seed.admin).json()
    assert [entry["id"] for entry in listed] == [moving["id"]]


def test_resolve_conflict_aborts_on_a_second_collision(client, seed):
    first = create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1")
    second = create_entry(client, seed, teacherIds=["T2"], classGroupId="CG2", locationId="L1")

    response = client.post(
        f"{seed.base}/schedule/resolve-conflict",
        json={
            "entryToSave": entry_payload(teacherIds=["T1"], locationId="L1"),
            "conflictingEntryId": first["id"],
        },
        headers=seed.admin,
    )
    assert response.status_code == 409
    assert response.json()["conflict"]["kind"] == "location"
    assert response.json()["conflict"]["conflictingEntry"]["id"] == second["id"]

    listed = client.get(f"{seed.base}/schedule", headers=seed.admin).json()
    assert {entry["id"] for entry in listed} == {first["id"], second["id"]}


def test_resolve_conflict_requires_entry_and_conflicting_id(client, seed):
    response = client.post(
        f"{seed.base}/schedule/resolve-conflict",
        json={"entryToSave": entry_payload()},
        headers=seed.admin,
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_school_without_term_cannot_be_edited(client, seed, db_session):
    school = db_session.get(School, seed.school_id)
    school.academic_year = None
    db_session.commit()

    response = client.post(f"{seed.base}/schedule", json=entry_payload(teacherIds=["T1"]), headers=seed.admin)
    assert response.status_code == 500
    assert "School info not configured" in response.json()["message"]


def test_schedule_writes_require_an_editor(client, seed):
    response = client.post(f"{seed.base}/schedule", json=entry_payload(), headers=seed.viewer)
    assert response.status_code == 403

    anonymous = client.get(f"{seed.base}/schedule")
    assert anonymous.status_code in {401, 403}


def test_users_are_scoped_to_their_school(client, seed):
    foreign = client.get(f"{seed.base}/schedule", headers=seed.other_admin)
    assert foreign.status_code == 403

    system = client.post(f"{seed.base}/schedule", json=entry_payload(teacherIds=["T1"]), headers=seed.sysadmin)
    assert system.status_code == 201

    unknown = client.get("/api/schools/nowhere/schedule", headers=seed.sysadmin)
    assert unknown.status_code == 404


def test_schedule_writes_are_audited(client, seed, db_session):
    item = create_entry(client, seed, teacherIds=["T1"])
    rows = db_session.execute(
        text("SELECT action, entity_id, user_id FROM activity_logs WHERE school_id = :school"),
        {"school": seed.school_id},
    ).all()
    assert ("schedule.create", item["id"], "admin-1") in [tuple(row) for row in rows]


def test_resolve_conflict_ignores_an_entry_id_from_another_school(client, seed):
    first = create_entry(client, seed, teacherIds=["T1"])
    foreign = client.post("/api/schools/school-2/schedule", json=entry_payload(), headers=seed.other_admin)
    assert foreign.status_code == 201
    foreign_id = foreign.json()["item"]["id"]

    payload = entry_payload(teacherIds=["T1"])
    payload["id"] = foreign_id
    response = client.post(
        f"{seed.base}/schedule/resolve-conflict",
        json={"entryToSave": payload, "conflictingEntryId": first["id"]},
        headers=seed.admin,
    )
    assert response.status_code == 201
    saved = response.json()["item"]
    assert saved["id"] not in {foreign_id, first["id"]}
    assert saved["schoolId"] == seed.school_id

    listed = client.get(f"{seed.base}/schedule", headers=seed.admin).json()
    assert [entry["id"] for entry in listed] == [saved["id"]]
    other = client.get("/api/schools/school-2/schedule", headers=seed.other_admin).json()
    assert [entry["id"] for entry in other] == [foreign_id]


def test_resolve_conflict_reports_integrity_failures_accurately(client, seed):
    first = create_entry(client, seed, teacherIds=["T1"], classGroupId="CG1")

    unknown_slot = client.post(
        f"{seed.base}/schedule/resolve-conflict",
        json={"entryToSave": entry_payload(teacherIds=["T1"], timeSlotId="P404"), "conflictingEntryId": first["id"]},
        headers=seed.admin,
    )
    assert unknown_slot.status_code == 409
    assert unknown_slot.json()["message"] == "The change conflicts with related records."

    substitution = client.post(
        f"{seed.base}/substitutions",
        json={
            "substitutionDate": "2024-06-03",
            "absentTeacherId": "T1",
            "substituteTeacherId": "T2",
            "originalScheduleEntryId": first["id"],
            "reason": "Sick leave",
        },
        headers=seed.admin,
    )
    assert substitution.status_code == 201

    in_use = client.post(
        f"{seed.base}/schedule/resolve-conflict",
        json={"entryToSave": entry_payload(teacherIds=["T1"]), "conflictingEntryId": first["id"]},
        headers=seed.admin,
    )
    assert in_use.status_code == 409
    assert "substitutions" in in_use.json()["message"]

    listed = client.get(f"{seed.base}/schedule", headers=seed.admin).json()
    assert [entry["id"] for entry in listed] == [first["id"]]
