import csv
import io

import pytest
from sqlalchemy import text

from scoutplan.models.program import ProgramEntry
from tests.conftest import auth_headers


@pytest.fixture
def leader(client, seed_users):
    return auth_headers(client, "leader@example.com")


@pytest.fixture
def other(client, seed_users):
    return auth_headers(client, "other@example.com")


def _create(client, headers, **overrides):
    payload = {"name": "Saturday Meeting", "date": "2026-05-02", "start_time": "09:00", "is_public": False}
    payload.update(overrides)
    resp = client.post("/api/programs", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _entries_payload(acts):
    return {
        "entries": [
            {"entry_type": "activity", "position": 0, "activity_id": acts["campfire"].activity_id},
            {"entry_type": "custom", "position": 1, "custom_title": "Snack", "custom_duration_minutes": 15},
            {"entry_type": "activity", "position": 2, "activity_id": acts["knots"].activity_id},
        ]
    }


def _with_entries(client, headers, acts, **overrides):
    program = _create(client, headers, **overrides)
    resp = client.put(f"/api/programs/{program['program_id']}/entries", json=_entries_payload(acts), headers=headers)
    assert resp.status_code == 200, resp.text
    return program, resp.json()


def _times(schedule):
    return [(row["title"], row["start_time"], row["end_time"]) for row in schedule["rows"]]


def test_create_program(client, leader):
    body = _create(client, leader)
    assert body["name"] == "Saturday Meeting"
    assert body["start_time"] == "09:00"
    assert body["is_public"] is False


def test_create_program_normalizes_start_time(client, leader):
    assert _create(client, leader, start_time="9:05:00")["start_time"] == "09:05"


def test_create_program_defaults_start_time(client, leader):
    resp = client.post("/api/programs", json={"name": "No start given"}, headers=leader)
    assert resp.status_code == 201
    assert resp.json()["start_time"] == "09:00"


@pytest.mark.parametrize("bad", ["24:00", "9am", "12:61"])
def test_create_program_rejects_bad_start_time(client, leader, bad):
    resp = client.post("/api/programs", json={"name": "Bad", "start_time": bad}, headers=leader)
    assert resp.status_code == 422


def test_create_program_requires_auth(client, seed_users):
    resp = client.post("/api/programs", json={"name": "Anon", "start_time": "09:00"})
    assert resp.status_code in (401, 403)


def test_replace_entries_computes_schedule(client, leader, seed_activities):
    _, schedule = _with_entries(client, leader, seed_activities)
    assert _times(schedule) == [
        ("Campfire Songs", "09:00", "09:30"),
        ("Snack", "09:30", "09:45"),
        ("Knot Relay", "09:45", "10:30"),
    ]
    assert schedule["summary"] == {"total_duration_minutes": 90, "entry_count": 3, "end_time": "10:30"}
    assert [row["position"] for row in schedule["rows"]] == [0, 1, 2]
    assert all(row["entry_id"] for row in schedule["rows"])


def test_replace_entries_persists_times(client, db, leader, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities)
    rows = (
        db.query(ProgramEntry)
        .filter(ProgramEntry.program_id == program["program_id"])
        .order_by(ProgramEntry.position)
        .all()
    )
    assert [(r.position, r.start_time, r.end_time) for r in rows] == [
        (0, "09:00", "09:30"),
        (1, "09:30", "09:45"),
        (2, "09:45", "10:30"),
    ]
    assert rows[1].activity_id is None
    assert rows[0].custom_title is None


def test_replace_entries_with_empty_list(client, leader, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities)
    resp = client.put(f"/api/programs/{program['program_id']}/entries", json={"entries": []}, headers=leader)
    assert resp.status_code == 200
    assert resp.json()["rows"] == []
    assert resp.json()["summary"]["end_time"] is None


def test_replace_entries_orders_by_position(client, leader, seed_activities):
    program = _create(client, leader)
    payload = {
        "entries": [
            {"entry_type": "custom", "position": 5, "custom_title": "Last", "custom_duration_minutes": 10},
            {"entry_type": "custom", "position": 1, "custom_title": "First", "custom_duration_minutes": 20},
        ]
    }
    resp = client.put(f"/api/programs/{program['program_id']}/entries", json=payload, headers=leader)
    assert _times(resp.json()) == [("First", "09:00", "09:20"), ("Last", "09:20", "09:30")]
    assert [row["position"] for row in resp.json()["rows"]] == [0, 1]


def test_replace_entries_unknown_activity(client, leader, seed_activities):
    program = _create(client, leader)
    payload = {"entries": [{"entry_type": "activity", "position": 0, "activity_id": 9999}]}
    resp = client.put(f"/api/programs/{program['program_id']}/entries", json=payload, headers=leader)
    assert resp.status_code == 400


def test_replace_entries_rejects_unknown_entry_type(client, leader):
    program = _create(client, leader)
    payload = {"entries": [{"entry_type": "meal", "position": 0}]}
    resp = client.put(f"/api/programs/{program['program_id']}/entries", json=payload, headers=leader)
    assert resp.status_code == 422


def test_replace_entries_rejects_negative_custom_duration(client, leader):
    program = _create(client, leader)
    payload = {"entries": [{"entry_type": "custom", "custom_title": "x", "custom_duration_minutes": -5}]}
    resp = client.put(f"/api/programs/{program['program_id']}/entries", json=payload, headers=leader)
    assert resp.status_code == 422


def test_replace_entries_rejects_duplicate_ids(client, leader):
    program = _create(client, leader)
    payload = {
        "entries": [
            {"entry_type": "custom", "id": "same", "custom_title": "a", "custom_duration_minutes": 5},
            {"entry_type": "custom", "id": "same", "custom_title": "b", "custom_duration_minutes": 5},
        ]
    }
    resp = client.put(f"/api/programs/{program['program_id']}/entries", json=payload, headers=leader)
    assert resp.status_code == 400


def test_custom_entry_without_duration(client, leader):
    program = _create(client, leader, start_time="10:00")
    payload = {
        "entries": [
            {"entry_type": "custom", "custom_title": "Flag raising"},
            {"entry_type": "custom", "custom_title": "Hike", "custom_duration_minutes": 60},
        ]
    }
    resp = client.put(f"/api/programs/{program['program_id']}/entries", json=payload, headers=leader)
    assert _times(resp.json()) == [("Flag raising", "10:00", "10:00"), ("Hike", "10:00", "11:00")]


def test_add_entry_appends_and_inserts(client, leader, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities)
    pid = program["program_id"]

    resp = client.post(
        f"/api/programs/{pid}/entries",
        json={"entry": {"entry_type": "activity", "activity_id": seed_activities["circle"].activity_id}},
        headers=leader,
    )
    assert resp.status_code == 201
    assert _times(resp.json())[-1] == ("Evening Circle", "10:30", "10:45")

    resp = client.post(
        f"/api/programs/{pid}/entries",
        json={"entry": {"entry_type": "custom", "custom_title": "Opening", "custom_duration_minutes": 5}, "position": 0},
        headers=leader,
    )
    rows = resp.json()["rows"]
    assert rows[0]["title"] == "Opening"
    assert rows[1]["start_time"] == "09:05"
    assert [row["position"] for row in rows] == [0, 1, 2, 3, 4]
    assert resp.json()["summary"]["end_time"] == "10:50"


def test_add_activity_entry_requires_activity_id(client, leader):
    program = _create(client, leader)
    resp = client.post(
        f"/api/programs/{program['program_id']}/entries",
        json={"entry": {"entry_type": "activity"}},
        headers=leader,
    )
    assert resp.status_code == 400


def test_remove_entry_recomputes(client, leader, seed_activities):
    program, schedule = _with_entries(client, leader, seed_activities)
    snack_id = schedule["rows"][1]["entry_id"]
    resp = client.delete(f"/api/programs/{program['program_id']}/entries/{snack_id}", headers=leader)
    assert resp.status_code == 200
    assert _times(resp.json()) == [("Campfire Songs", "09:00", "09:30"), ("Knot Relay", "09:30", "10:15")]
    assert [row["position"] for row in resp.json()["rows"]] == [0, 1]


def test_remove_unknown_entry(client, leader, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities)
    resp = client.delete(f"/api/programs/{program['program_id']}/entries/nope", headers=leader)
    assert resp.status_code == 404


def test_reorder_entries(client, leader, seed_activities):
    program, schedule = _with_entries(client, leader, seed_activities)
    knots_id = schedule["rows"][2]["entry_id"]
    resp = client.post(
        f"/api/programs/{program['program_id']}/entries/reorder",
        json={"entry_id": knots_id, "from_index": 2, "to_index": 0},
        headers=leader,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert _times(body) == [
        ("Knot Relay", "09:00", "09:45"),
        ("Campfire Songs", "09:45", "10:15"),
        ("Snack", "10:15", "10:30"),
    ]
    assert body["rows"][0]["entry_id"] == knots_id

    again = client.get(f"/api/programs/{program['program_id']}/schedule", headers=leader).json()
    assert _times(again) == _times(body)


def test_reorder_unknown_entry_is_noop(client, leader, seed_activities):
    program, schedule = _with_entries(client, leader, seed_activities)
    resp = client.post(
        f"/api/programs/{program['program_id']}/entries/reorder",
        json={"entry_id": "missing", "from_index": 0, "to_index": 2},
        headers=leader,
    )
    assert resp.status_code == 200
    assert _times(resp.json()) == _times(schedule)


def test_update_start_time_shifts_entries(client, leader, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities)
    pid = program["program_id"]
    client.get(f"/api/programs/{pid}", headers=leader)  # warm the detail cache

    resp = client.put(
        f"/api/programs/{pid}",
        json={"name": "Saturday Meeting", "date": "2026-05-02", "start_time": "14:00", "is_public": False},
        headers=leader,
    )
    assert resp.status_code == 200
    detail = client.get(f"/api/programs/{pid}", headers=leader).json()
    assert detail["start_time"] == "14:00"
    assert [(e["start_time"], e["end_time"]) for e in detail["entries"]] == [
        ("14:00", "14:30"),
        ("14:30", "14:45"),
        ("14:45", "15:30"),
    ]
    assert detail["summary"]["end_time"] == "15:30"


def test_program_detail(client, leader, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities)
    resp = client.get(f"/api/programs/{program['program_id']}", headers=leader)
    assert resp.status_code == 200
    body = resp.json()
    assert body["owner"]["name"] == "Leader"
    assert body["summary"]["total_duration_minutes"] == 90
    first = body["entries"][0]
    assert first["activity"]["name"] == "Campfire Songs"
    assert first["activity"]["activity_type_name"] == "Game"
    assert body["entries"][1]["activity"] is None
    assert body["entries"][1]["custom_title"] == "Snack"


def test_private_program_hidden_from_others(client, leader, other, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities)
    pid = program["program_id"]
    assert client.get(f"/api/programs/{pid}", headers=other).status_code == 404
    assert client.get(f"/api/programs/{pid}").status_code == 404
    assert client.get(f"/api/programs/{pid}/schedule", headers=other).status_code == 404
    assert client.get(f"/api/programs/{pid}/export.csv", headers=other).status_code == 404


def test_public_program_readable_but_not_editable(client, leader, other, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities, is_public=True)
    pid = program["program_id"]
    assert client.get(f"/api/programs/{pid}").status_code == 200
    assert client.get(f"/api/programs/{pid}/schedule", headers=other).status_code == 200

    resp = client.put(f"/api/programs/{pid}/entries", json={"entries": []}, headers=other)
    assert resp.status_code == 404
    assert client.delete(f"/api/programs/{pid}", headers=other).status_code == 404


def test_list_programs_only_own_with_aggregates(client, leader, other, seed_activities):
    _with_entries(client, leader, seed_activities)
    _create(client, leader, name="Empty Evening")
    _create(client, other, name="Someone Else")

    resp = client.get("/api/programs", headers=leader)
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"]["total"] == 2
    by_name = {p["name"]: p for p in body["programs"]}
    assert set(by_name) == {"Saturday Meeting", "Empty Evening"}
    assert by_name["Saturday Meeting"]["entry_count"] == 3
    assert by_name["Saturday Meeting"]["total_duration_minutes"] == 90
    assert by_name["Empty Evening"]["entry_count"] == 0
    assert by_name["Empty Evening"]["total_duration_minutes"] == 0


def test_list_programs_pagination_and_sort(client, leader):
    for name in ("Charlie", "Alpha", "Bravo"):
        _create(client, leader, name=name)
    resp = client.get("/api/programs?limit=2&sort=name&order=desc", headers=leader)
    body = resp.json()
    assert [p["name"] for p in body["programs"]] == ["Charlie", "Bravo"]
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}


def test_delete_program_removes_entries(client, db, leader, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities)
    pid = program["program_id"]
    resp = client.delete(f"/api/programs/{pid}", headers=leader)
    assert resp.status_code == 200
    assert client.get(f"/api/programs/{pid}", headers=leader).status_code == 404
    assert db.query(ProgramEntry).filter(ProgramEntry.program_id == pid).count() == 0


def test_export_csv(client, leader, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities)
    resp = client.get(f"/api/programs/{program['program_id']}/export.csv", headers=leader)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="program_saturday_meeting.csv"' in resp.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(resp.text)))
    assert rows[0] == ["Program", "Saturday Meeting"]
    assert rows[4] == ["Total Duration (min)", "90"]
    header_at = rows.index(
        ["#", "Start Time", "End Time", "Type", "Title", "Duration (min)",
         "Group Size", "Effort Level", "Location", "Activity Type"]
    )
    body = rows[header_at + 1:]
    assert body[0][:6] == ["1", "09:00", "09:30", "activity", "Campfire Songs", "30"]
    assert body[0][6:] == ["large", "low", "outside", "Game"]
    assert body[1][:6] == ["2", "09:30", "09:45", "custom", "Snack", "15"]
    assert body[1][6:] == ["", "", "", ""]


def _block_entry_inserts(db):
    # Makes every entry write fail inside the database transaction.
    db.execute(text(
        "CREATE TRIGGER block_entry_inserts BEFORE INSERT ON program_entry "
        "BEGIN SELECT RAISE(ABORT, 'program_entry is read-only'); END"
    ))
    db.commit()


def test_replace_entries_rejects_activity_without_activity_id(client, db, leader, seed_activities):
    program = _create(client, leader)
    payload = {
        "entries": [
            {"entry_type": "custom", "position": 0, "custom_title": "Opening", "custom_duration_minutes": 5},
            {"entry_type": "activity", "position": 1},
        ]
    }
    resp = client.put(f"/api/programs/{program['program_id']}/entries", json=payload, headers=leader)
    assert resp.status_code == 400
    assert db.query(ProgramEntry).filter(ProgramEntry.program_id == program["program_id"]).count() == 0


def test_failed_entry_write_keeps_stored_entries(client, db, leader, seed_activities):
    program, before = _with_entries(client, leader, seed_activities)
    pid = program["program_id"]
    _block_entry_inserts(db)

    resp = client.put(f"/api/programs/{pid}/entries", json={"entries": []}, headers=leader)
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to save program entries."

    after = client.get(f"/api/programs/{pid}/schedule", headers=leader).json()
    assert _times(after) == _times(before)
    assert [row["entry_id"] for row in after["rows"]] == [row["entry_id"] for row in before["rows"]]


def test_failed_start_time_update_changes_nothing(client, db, leader, seed_activities):
    program, _ = _with_entries(client, leader, seed_activities)
    pid = program["program_id"]
    client.get(f"/api/programs/{pid}", headers=leader)  # warm the detail cache
    _block_entry_inserts(db)

    resp = client.put(
        f"/api/programs/{pid}",
        json={"name": "Moved Meeting", "date": "2026-05-02", "start_time": "14:00", "is_public": False},
        headers=leader,
    )
    assert resp.status_code == 500

    detail = client.get(f"/api/programs/{pid}", headers=leader).json()
    assert detail["name"] == "Saturday Meeting"
    assert detail["start_time"] == "09:00"
    assert [(e["start_time"], e["end_time"]) for e in detail["entries"]] == [
        ("09:00", "09:30"),
        ("09:30", "09:45"),
        ("09:45", "10:30"),
    ]


def test_replace_entries_keeps_own_ids(client, leader, seed_activities):
    program, schedule = _with_entries(client, leader, seed_activities)
    rows = schedule["rows"]
    payload = {
        "entries": [
            {"entry_type": "custom", "id": rows[1]["entry_id"], "position": 0,
             "custom_title": "Snack", "custom_duration_minutes": 15},
            {"entry_type": "activity", "id": rows[0]["entry_id"], "position": 1,
             "activity_id": seed_activities["campfire"].activity_id},
        ]
    }
    resp = client.put(f"/api/programs/{program['program_id']}/entries", json=payload, headers=leader)
    assert resp.status_code == 200
    assert [row["entry_id"] for row in resp.json()["rows"]] == [rows[1]["entry_id"], rows[0]["entry_id"]]


def test_replace_entries_with_ids_from_another_program(client, leader, other, seed_activities):
    source, source_schedule = _with_entries(client, leader, seed_activities, is_public=True)
    copied = [
        {"entry_type": "custom", "id": row["entry_id"], "position": row["position"],
         "custom_title": row["title"], "custom_duration_minutes": row["duration_minutes"]}
        for row in source_schedule["rows"]
    ]
    target = _create(client, other, name="Copied Meeting")

    resp = client.put(f"/api/programs/{target['program_id']}/entries", json={"entries": copied}, headers=other)
    assert resp.status_code == 200
    new_ids = {row["entry_id"] for row in resp.json()["rows"]}
    assert len(new_ids) == 3
    assert new_ids.isdisjoint(row["entry_id"] for row in source_schedule["rows"])

    untouched = client.get(f"/api/programs/{source['program_id']}/schedule").json()
    assert _times(untouched) == _times(source_schedule)
