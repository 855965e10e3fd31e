"""
Church content through the HTTP surface: public pages with an explicit
church selection, member-only listings, and the manager pages.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from churchhub.extensions import db
from churchhub.models import Event, FinancialRecord, Mission, Song, SongList, SongListItem


def _in_days(days):
    return datetime.now(timezone.utc) + timedelta(days=days)


@pytest.fixture()
def events(grace, hope):
    rows = [
        Event(title="Last Week", event_date=_in_days(-7), church_id=grace.id),
        Event(title="Sunday Service", event_date=_in_days(2), church_id=grace.id),
        Event(title="Bible Study", event_date=_in_days(1), church_id=grace.id, event_type="study"),
        Event(title="Youth Night", event_date=_in_days(5), church_id=grace.id, event_type="youth"),
        Event(title="Prayer Vigil", event_date=_in_days(3), church_id=grace.id, event_type="prayer"),
        Event(title="Hope Picnic", event_date=_in_days(1), church_id=hope.id),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return rows


class TestPublicEvents:
    def test_visitor_without_selection_gets_nothing(self, client, events):
        res = client.get("/api/events")
        assert res.status_code == 200
        assert res.get_json() == []

    def test_visitor_with_selection_sees_upcoming_in_order(self, client, events):
        res = client.get("/api/events?church=grace")
        titles = [e["title"] for e in res.get_json()]
        assert titles == ["Bible Study", "Sunday Service", "Prayer Vigil", "Youth Night"]

    def test_unknown_church_selection(self, client, events):
        res = client.get("/api/events?church=nowhere")
        assert res.status_code == 404

    def test_non_ascii_digit_selection(self, client, events):
        res = client.get("/api/events?church=²")
        assert res.status_code == 404

    def test_member_sees_own_church(self, client, member, events, auth_headers):
        res = client.get("/api/events", headers=auth_headers(member))
        assert "Hope Picnic" not in [e["title"] for e in res.get_json()]

    def test_home_preview(self, client, events):
        body = client.get(f"/api/home?church={events[0].church_id}").get_json()
        assert len(body["upcoming_events"]) == 3
        assert body["latest_sermon"] is None


class TestEventManager:
    def test_pastor_creates_event(self, client, pastor, grace, auth_headers):
        res = client.post(
            "/api/admin/events",
            json={"title": "Easter Service", "event_date": "2030-04-20T10:00:00Z", "location": "Main Hall"},
            headers=auth_headers(pastor),
        )
        assert res.status_code == 201
        body = res.get_json()
        assert body["church_id"] == grace.id
        assert body["event_type"] == "service"

    def test_invalid_event_type(self, client, pastor, auth_headers):
        res = client.post(
            "/api/admin/events",
            json={"title": "Odd", "event_date": "2030-04-20T10:00:00Z", "event_type": "party"},
            headers=auth_headers(pastor),
        )
        assert res.status_code == 400

    def test_admin_must_pick_church(self, client, admin, hope, auth_headers):
        headers = auth_headers(admin)
        payload = {"title": "Joint Service", "event_date": "2030-05-01T10:00:00Z"}
        res = client.post("/api/admin/events", json=payload, headers=headers)
        assert res.status_code == 400
        assert res.get_json()["missing_fields"] == ["church_id"]

        res = client.post("/api/admin/events", json={**payload, "church_id": hope.id}, headers=headers)
        assert res.status_code == 201
        assert res.get_json()["church_id"] == hope.id

    def test_admin_cannot_pick_missing_church(self, client, admin, auth_headers):
        res = client.post(
            "/api/admin/events",
            json={"title": "Ghost Service", "event_date": "2030-05-01T10:00:00Z", "church_id": 9999},
            headers=auth_headers(admin),
        )
        assert res.status_code == 400
        assert Event.query.count() == 0

    def test_pastor_cannot_touch_other_church_event(self, client, pastor, events, auth_headers):
        hope_event = events[-1]
        res = client.delete(f"/api/admin/events/{hope_event.id}", headers=auth_headers(pastor))
        assert res.status_code == 404
        assert db.session.get(Event, hope_event.id) is not None

    def test_update_and_delete(self, client, pastor, events, auth_headers):
        headers = auth_headers(pastor)
        event = events[1]
        res = client.put(f"/api/admin/events/{event.id}", json={"location": "Chapel"}, headers=headers)
        assert res.status_code == 200
        assert res.get_json()["location"] == "Chapel"
        assert res.get_json()["title"] == "Sunday Service"

        res = client.delete(f"/api/admin/events/{event.id}", headers=headers)
        assert res.status_code == 200
        assert db.session.get(Event, event.id) is None

    def test_blank_required_field_on_update(self, client, pastor, events, auth_headers):
        res = client.put(f"/api/admin/events/{events[1].id}", json={"title": ""}, headers=auth_headers(pastor))
        assert res.status_code == 400


class TestMissions:
    def test_overfunded_mission_reports_raw_progress(self, client, grace):
        db.session.add(
            Mission(title="Well Project", goal_amount=1000, raised_amount=1250, church_id=grace.id)
        )
        db.session.commit()
        missions = client.get("/api/missions?church=grace").get_json()
        assert missions[0]["progress_percent"] == 125.0
        assert missions[0]["is_overfunded"] is True

    def test_mission_without_goal(self, client, grace):
        db.session.add(Mission(title="Open Ended", church_id=grace.id))
        db.session.commit()
        mission = client.get("/api/missions?church=grace").get_json()[0]
        assert mission["progress_percent"] is None
        assert mission["is_overfunded"] is False

    def test_end_before_start_is_rejected(self, client, pastor, auth_headers):
        res = client.post(
            "/api/admin/missions",
            json={"title": "Backwards", "start_date": "2030-02-01", "end_date": "2030-01-01"},
            headers=auth_headers(pastor),
        )
        assert res.status_code == 400

    def test_worship_team_cannot_manage_missions(self, client, worship_leader, auth_headers):
        res = client.post("/api/admin/missions", json={"title": "Nope"}, headers=auth_headers(worship_leader))
        assert res.status_code == 403


class TestGiving:
    def test_allocation_chart_from_public_expenses(self, client, grace):
        db.session.add_all(
            [
                FinancialRecord(category="Missions", amount=300, record_type="expense", church_id=grace.id,
                                record_date=date(2024, 3, 1)),
                FinancialRecord(category="Utilities", amount=100, record_type="expense", church_id=grace.id,
                                record_date=date(2024, 3, 2)),
                FinancialRecord(category="Tithes & Offerings", amount=5000, record_type="income", church_id=grace.id,
                                record_date=date(2024, 3, 3)),
                FinancialRecord(category="Staff Salaries", amount=900, record_type="expense", church_id=grace.id,
                                record_date=date(2024, 3, 4), is_public=False),
            ]
        )
        db.session.commit()

        body = client.get("/api/giving?church=grace").get_json()
        chart = {slice_["name"]: slice_["value"] for slice_ in body["allocation_chart"]}
        assert chart == {"Utilities": 25, "Missions": 75}
        assert len(body["allocations"]) == 2
        assert body["giving_options"]

    def test_giving_without_church_is_empty(self, client):
        body = client.get("/api/giving").get_json()
        assert body["allocations"] == []
        assert body["allocation_chart"] == []


class TestFinancialRecords:
    def test_admin_totals(self, client, admin, grace, auth_headers):
        headers = auth_headers(admin)
        for payload in (
            {"category": "Tithes & Offerings", "amount": "1000.50", "record_type": "income"},
            {"category": "Utilities", "amount": "200.25", "record_type": "expense"},
        ):
            res = client.post("/api/admin/financial-records", json={**payload, "church_id": grace.id},
                              headers=headers)
            assert res.status_code == 201

        body = client.get(f"/api/admin/financial-records?church_id={grace.id}", headers=headers).get_json()
        assert body["totals"] == {"income": "1000.50", "expense": "200.25", "balance": "800.25"}

    def test_unknown_category(self, client, admin, grace, auth_headers):
        res = client.post(
            "/api/admin/financial-records",
            json={"category": "Snacks", "amount": "5", "record_type": "expense", "church_id": grace.id},
            headers=auth_headers(admin),
        )
        assert res.status_code == 400

    def test_negative_amount(self, client, admin, grace, auth_headers):
        res = client.post(
            "/api/admin/financial-records",
            json={"category": "Utilities", "amount": "-5", "record_type": "expense", "church_id": grace.id},
            headers=auth_headers(admin),
        )
        assert res.status_code == 400

    def test_pastor_cannot_see_records(self, client, pastor, auth_headers):
        assert client.get("/api/admin/financial-records", headers=auth_headers(pastor)).status_code == 403


class TestSongs:
    def test_songs_are_members_only(self, client, grace):
        db.session.add(Song(title="Amazing Grace", church_id=grace.id))
        db.session.commit()
        body = client.get("/api/songs").get_json()
        assert body == {"songs": [], "members_only": True}

    def test_song_search(self, client, member, grace, auth_headers):
        db.session.add_all(
            [
                Song(title="Amazing Grace", artist="John Newton", church_id=grace.id),
                Song(title="How Great Thou Art", artist="Carl Boberg", church_id=grace.id),
            ]
        )
        db.session.commit()
        body = client.get("/api/songs?q=newton", headers=auth_headers(member)).get_json()
        assert [s["title"] for s in body["songs"]] == ["Amazing Grace"]

    def test_song_list_with_items(self, client, worship_leader, auth_headers):
        headers = auth_headers(worship_leader)
        first = client.post("/api/admin/songs", json={"title": "Opening", "tempo": "120"}, headers=headers)
        second = client.post("/api/admin/songs", json={"title": "Closing"}, headers=headers)
        assert first.status_code == 201
        assert first.get_json()["tempo"] == 120

        res = client.post(
            "/api/admin/song-lists",
            json={
                "name": "Sunday Set",
                "service_date": "2030-01-06",
                "items": [
                    {"song_id": second.get_json()["id"], "position": 1},
                    {"song_id": first.get_json()["id"], "position": 0},
                ],
            },
            headers=headers,
        )
        assert res.status_code == 201
        assert [item["title"] for item in res.get_json()["items"]] == ["Opening", "Closing"]

        res = client.delete(f"/api/admin/songs/{first.get_json()['id']}", headers=headers)
        assert res.status_code == 400

    def test_song_list_rejects_foreign_song(self, client, worship_leader, hope, auth_headers):
        foreign = Song(title="Elsewhere", church_id=hope.id)
        db.session.add(foreign)
        db.session.commit()
        res = client.post(
            "/api/admin/song-lists",
            json={"name": "Set", "service_date": "2030-01-06", "items": [{"song_id": foreign.id}]},
            headers=auth_headers(worship_leader),
        )
        assert res.status_code == 400

    def test_foreign_song_in_a_list_looks_missing(self, client, pastor, hope, auth_headers):
        foreign = Song(title="Elsewhere", church_id=hope.id)
        song_list = SongList(name="Hope Set", service_date=date(2030, 1, 6), church_id=hope.id)
        db.session.add_all([foreign, song_list])
        db.session.flush()
        db.session.add(SongListItem(song_list_id=song_list.id, song_id=foreign.id, position=0))
        db.session.commit()

        res = client.delete(f"/api/admin/songs/{foreign.id}", headers=auth_headers(pastor))
        assert res.status_code == 404

    def test_member_cannot_manage_songs(self, client, member, auth_headers):
        res = client.post("/api/admin/songs", json={"title": "Mine"}, headers=auth_headers(member))
        assert res.status_code == 403


class TestChurches:
    def test_public_list_sorted_by_name(self, client, hope, grace):
        names = [c["name"] for c in client.get("/api/churches").get_json()]
        assert names == ["Grace Community", "Hope Fellowship"]

    def test_admin_creates_church_with_slug(self, client, admin, auth_headers):
        res = client.post("/api/admin/churches", json={"name": "St. Mark's Chapel"}, headers=auth_headers(admin))
        assert res.status_code == 201
        assert res.get_json()["slug"] == "st-mark-s-chapel"

    def test_duplicate_slug(self, client, admin, auth_headers):
        res = client.post("/api/admin/churches", json={"name": "Other", "slug": "grace"},
                          headers=auth_headers(admin))
        assert res.status_code == 409
