from conftest import create_entry


def bulk_payload(**overrides) -> dict:
    payload = {
        "customActivity": "Sports Day",
        "days": ["Monday", "Tuesday"],
        "timeSlotIds": ["P1", "P2"],
        "classGroupIds": ["CG1", "CG2"],
        "teacherIds": [],
        "locationId": None,
    }
    payload.update(overrides)
    return payload


def test_bulk_activity_skips_only_colliding_slots(client, seed):
    occupied = create_entry(client, seed, classGroupId="CG2", teacherIds=["T1"])

    response = client.post(f"{seed.base}/schedule/bulk-activity", json=bulk_payload(), headers=seed.admin)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["successCount"] == 7
    assert body["skippedCount"] == 1
    assert body["conflicts"] == [
        {
            "day": "Monday",
            "timeSlotId": "P1",
            "classGroupId": "CG2",
            "kind": "classGroup",
            "conflictingEntryId": occupied["id"],
            "reason": "The class group already has a class in this time slot.",
        }
    ]

    listed = client.get(f"{seed.base}/schedule", headers=seed.admin).json()
    placed = [entry for entry in listed if entry["customActivity"] == "Sports Day"]
    assert len(placed) == 7
    assert all(entry["subjectCode"] is None for entry in placed)


def test_bulk_activity_does_not_double_book_within_the_batch(client, seed):
    response = client.post(
        f"{seed.base}/schedule/bulk-activity",
        json=bulk_payload(days=["Monday"], timeSlotIds=["P1"], teacherIds=["T1"]),
        headers=seed.admin,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["successCount"] == 1
    assert body["skippedCount"] == 1
    assert body["conflicts"][0]["classGroupId"] == "CG2"
    assert body["conflicts"][0]["kind"] == "teacher"


def test_bulk_activity_for_teachers_only(client, seed):
    response = client.post(
        f"{seed.base}/schedule/bulk-activity",
        json=bulk_payload(days=["Friday"], classGroupIds=[], teacherIds=["T4"], locationId="L2"),
        headers=seed.admin,
    )
    assert response.status_code == 200
    assert response.json()["successCount"] == 2

    listed = client.get(f"{seed.base}/schedule", headers=seed.admin).json()
    assert {entry["timeSlotId"] for entry in listed} == {"P1", "P2"}
    assert all(entry["classGroupId"] is None and entry["teacherIds"] == ["T4"] for entry in listed)


def test_bulk_activity_validation(client, seed):
    missing_activity = client.post(
        f"{seed.base}/schedule/bulk-activity",
        json=bulk_payload(customActivity=""),
        headers=seed.admin,
    )
    assert missing_activity.status_code == 400

    no_targets = client.post(
        f"{seed.base}/schedule/bulk-activity",
        json=bulk_payload(classGroupIds=[], teacherIds=[]),
        headers=seed.admin,
    )
    assert no_targets.status_code == 400

    no_slots = client.post(
        f"{seed.base}/schedule/bulk-activity",
        json=bulk_payload(timeSlotIds=[]),
        headers=seed.admin,
    )
    assert no_slots.status_code == 400
    assert client.get(f"{seed.base}/schedule", headers=seed.admin).json() == []
