"""
이벤트 / 참여(opt-in) API 통합 테스트.
"""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from eventpay.domain.records import EventStatus
from eventpay.models.event import Event, Participation
from tests.helpers import (
    auth_header,
    create_event_in_db,
    participate,
    setup_admin_and_members,
    utc,
)


def _today_noon_utc() -> datetime:
    now = datetime.now(timezone.utc)
    return datetime(now.year, now.month, now.day, 12, tzinfo=timezone.utc)


def test_admin_creates_event(client, db_session):
    ctx = setup_admin_and_members(db_session)

    r = client.post(
        "/events",
        headers=auth_header(ctx["admin_token"]),
        json={"name": "Yoga", "price": 120.5, "end_at": "2025-08-03T18:00:00Z"},
    )
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["name"] == "Yoga"
    assert data["price"] == "120.50"
    assert data["status"] == "open"
    assert data["opt_in_count"] == 0
    assert datetime.fromisoformat(data["end_at"].replace("Z", "+00:00")) == utc(2025, 8, 3, 18)


def test_create_event_rejects_negative_price(client, db_session):
    ctx = setup_admin_and_members(db_session)
    r = client.post(
        "/events",
        headers=auth_header(ctx["admin_token"]),
        json={"name": "Bad", "price": -1, "end_at": "2025-08-03T18:00:00Z"},
    )
    assert r.status_code == 400, r.text
    assert r.json()["code"] == "VALIDATION_ERROR"
    assert r.json()["detail"].startswith("price:")
    assert db_session.scalar(select(func.count()).select_from(Event)) == 0


def test_member_cannot_create_event(client, db_session):
    ctx = setup_admin_and_members(db_session)
    r = client.post(
        "/events",
        headers=auth_header(ctx["user1_token"]),
        json={"name": "Yoga", "price": 10, "end_at": "2025-08-03T18:00:00Z"},
    )
    assert r.status_code == 403, r.text


def test_clone_event_copies_name_and_price(client, db_session):
    ctx = setup_admin_and_members(db_session)
    src = create_event_in_db(db_session, name="Weekly Run", price=80, end_at=utc(2025, 8, 1, 9))
    client.post(f"/events/{src.id}/close", headers=auth_header(ctx["admin_token"]))

    r = client.post(
        "/events/clone",
        headers=auth_header(ctx["admin_token"]),
        json={"source_event_id": str(src.id), "new_end_at": "2025-08-08T09:00:00Z"},
    )
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["id"] != str(src.id)
    assert data["name"] == "Weekly Run"
    assert data["price"] == "80.00"
    assert data["status"] == "open"

    r = client.post(
        "/events/clone",
        headers=auth_header(ctx["admin_token"]),
        json={"source_event_id": str(src.id), "new_end_at": "2025-08-15T09:00:00Z", "name": "Long Run", "price": 90},
    )
    assert r.status_code == 201, r.text
    assert r.json()["data"]["name"] == "Long Run"
    assert r.json()["data"]["price"] == "90.00"


def test_clone_missing_source_event(client, db_session):
    ctx = setup_admin_and_members(db_session)
    r = client.post(
        "/events/clone",
        headers=auth_header(ctx["admin_token"]),
        json={"source_event_id": str(uuid.uuid4()), "new_end_at": "2025-08-08T09:00:00Z"},
    )
    assert r.status_code == 404, r.text
    assert r.json()["detail"] == "Source event not found"


def test_update_event_partial(client, db_session):
    ctx = setup_admin_and_members(db_session)
    ev = create_event_in_db(db_session, name="Swim", price=50, end_at=utc(2025, 8, 10))

    r = client.put(f"/events/{ev.id}", headers=auth_header(ctx["admin_token"]), json={"price": 75})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["name"] == "Swim"
    assert data["price"] == "75.00"


def test_update_missing_event(client, db_session):
    ctx = setup_admin_and_members(db_session)
    r = client.put(f"/events/{uuid.uuid4()}", headers=auth_header(ctx["admin_token"]), json={"name": "x"})
    assert r.status_code == 404, r.text
    assert r.json()["detail"] == "Event not found"


def test_update_closed_event_rejected(client, db_session):
    ctx = setup_admin_and_members(db_session)
    ev = create_event_in_db(db_session, name="Swim", price=50, end_at=utc(2025, 8, 10), status=EventStatus.CLOSED)

    r = client.put(f"/events/{ev.id}", headers=auth_header(ctx["admin_token"]), json={"name": "Renamed"})
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "Cannot update a closed event"


def test_close_event_twice_is_noop(client, db_session):
    ctx = setup_admin_and_members(db_session)
    ev = create_event_in_db(db_session, name="Swim", price=50, end_at=utc(2025, 8, 10))

    first = client.post(f"/events/{ev.id}/close", headers=auth_header(ctx["admin_token"]))
    second = client.post(f"/events/{ev.id}/close", headers=auth_header(ctx["admin_token"]))
    assert first.status_code == 200, first.text
    assert second.status_code == 200, second.text
    assert second.json()["data"]["status"] == "closed"


def test_member_opts_in(client, db_session):
    ctx = setup_admin_and_members(db_session)
    ev = create_event_in_db(db_session, name="Swim", price=50, end_at=utc(2025, 8, 10))

    r = client.post(f"/events/{ev.id}/optin", headers=auth_header(ctx["user1_token"]))
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["event_id"] == str(ev.id)
    assert data["user_id"] == str(ctx["user1"].id)


def test_duplicate_opt_in_rejected(client, db_session):
    ctx = setup_admin_and_members(db_session)
    ev = create_event_in_db(db_session, name="Swim", price=50, end_at=utc(2025, 8, 10))

    client.post(f"/events/{ev.id}/optin", headers=auth_header(ctx["user1_token"]))
    r = client.post(f"/events/{ev.id}/optin", headers=auth_header(ctx["user1_token"]))
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "Already opted in to this event"
    assert db_session.scalar(select(func.count()).select_from(Participation)) == 1


def test_opt_in_closed_event_rejected(client, db_session):
    ctx = setup_admin_and_members(db_session)
    ev = create_event_in_db(db_session, name="Swim", price=50, end_at=utc(2025, 8, 10), status=EventStatus.CLOSED)

    r = client.post(f"/events/{ev.id}/optin", headers=auth_header(ctx["user1_token"]))
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "Event is not open for opt-in"


def test_opt_in_missing_event(client, db_session):
    ctx = setup_admin_and_members(db_session)
    r = client.post(f"/events/{uuid.uuid4()}/optin", headers=auth_header(ctx["user1_token"]))
    assert r.status_code == 404, r.text
    assert r.json()["detail"] == "Event not found"


def test_admin_cannot_opt_in(client, db_session):
    ctx = setup_admin_and_members(db_session)
    ev = create_event_in_db(db_session, name="Swim", price=50, end_at=utc(2025, 8, 10))

    r = client.post(f"/events/{ev.id}/optin", headers=auth_header(ctx["admin_token"]))
    assert r.status_code == 403, r.text
    assert r.json()["detail"] == "User role ADMIN is not authorized to access this route"


def test_event_participants(client, db_session):
    ctx = setup_admin_and_members(db_session)
    ev = create_event_in_db(db_session, name="Swim", price=50, end_at=utc(2025, 8, 10))
    participate(db_session, ev, ctx["user2"], opted_in_at=utc(2025, 8, 1, 9))
    participate(db_session, ev, ctx["user1"], opted_in_at=utc(2025, 8, 1, 10))

    r = client.get(f"/events/{ev.id}/participants", headers=auth_header(ctx["admin_token"]))
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["event_id"] == str(ev.id)
    assert [p["name"] for p in data["participants"]] == ["User Two", "User One"]
    assert data["participants"][0]["email"] == ctx["user2"].email


def test_event_participants_empty_and_missing(client, db_session):
    ctx = setup_admin_and_members(db_session)
    ev = create_event_in_db(db_session, name="Swim", price=50, end_at=utc(2025, 8, 10))

    r = client.get(f"/events/{ev.id}/participants", headers=auth_header(ctx["admin_token"]))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["participants"] == []

    r = client.get(f"/events/{uuid.uuid4()}/participants", headers=auth_header(ctx["admin_token"]))
    assert r.status_code == 404, r.text


def test_admin_lists_events_with_counts_and_month_filter(client, db_session):
    ctx = setup_admin_and_members(db_session)
    aug = create_event_in_db(db_session, name="Aug", price=10, end_at=utc(2025, 8, 31, 23, 59))
    sep = create_event_in_db(db_session, name="Sep", price=20, end_at=utc(2025, 9, 1))
    participate(db_session, aug, ctx["user1"])
    participate(db_session, aug, ctx["user2"])

    r = client.get("/events", headers=auth_header(ctx["admin_token"]))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["meta"]["count"] == 2
    assert [e["name"] for e in body["data"]] == ["Aug", "Sep"]
    assert [e["opt_in_count"] for e in body["data"]] == [2, 0]

    r = client.get("/events?month=2025-09", headers=auth_header(ctx["admin_token"]))
    assert [e["id"] for e in r.json()["data"]] == [str(sep.id)]

    r = client.get("/events?month=2025-9", headers=auth_header(ctx["admin_token"]))
    assert r.status_code == 400, r.text


def test_member_sees_only_todays_open_events(client, db_session):
    ctx = setup_admin_and_members(db_session)
    noon = _today_noon_utc()
    today = create_event_in_db(db_session, name="Today", price=10, end_at=noon)
    create_event_in_db(db_session, name="Today Closed", price=10, end_at=noon, status=EventStatus.CLOSED)
    create_event_in_db(db_session, name="Tomorrow", price=10, end_at=noon + timedelta(days=1))
    create_event_in_db(db_session, name="Yesterday", price=10, end_at=noon - timedelta(days=1))

    r = client.get("/events", headers=auth_header(ctx["user1_token"]))
    assert r.status_code == 200, r.text
    assert [e["id"] for e in r.json()["data"]] == [str(today.id)]


def test_my_participations(client, db_session):
    ctx = setup_admin_and_members(db_session)
    e1 = create_event_in_db(db_session, name="First", price=10, end_at=utc(2025, 8, 3, 18))
    e2 = create_event_in_db(db_session, name="Second", price=20, end_at=utc(2025, 8, 4, 18))
    participate(db_session, e2, ctx["user1"], opted_in_at=utc(2025, 8, 2))
    participate(db_session, e1, ctx["user1"], opted_in_at=utc(2025, 8, 1))
    participate(db_session, e1, ctx["user2"])

    r = client.get("/users/me/participations", headers=auth_header(ctx["user1_token"]))
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert r.json()["meta"]["count"] == 2
    assert [d["event_name"] for d in data] == ["First", "Second"]
    assert [d["event_date"] for d in data] == ["2025-08-03", "2025-08-04"]
    assert data[1]["price"] == "20.00"


def test_admin_has_no_participation_history(client, db_session):
    ctx = setup_admin_and_members(db_session)
    r = client.get("/users/me/participations", headers=auth_header(ctx["admin_token"]))
    assert r.status_code == 403, r.text
