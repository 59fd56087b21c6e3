"""Tests for API routes."""

from uuid import uuid4

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from caterstaff.models import ConfirmationRequest, Event, Notification
from caterstaff.services.announcements import save_announcement
from caterstaff.services.confirmations import create_session

JSON = {"accept": "application/json"}


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, client: TestClient):
        """Test the health endpoint returns OK."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"


class TestEventsRoutes:
    """Tests for event-related routes."""

    def test_create_event(self, client: TestClient, session: Session):
        """Test creating an event through the form."""
        response = client.post(
            "/events",
            data={"name": "Gala", "date": "2025-07-01", "guest_count": "80", "event_type": "corporate"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        event = session.exec(select(Event)).one()
        assert response.headers["location"] == f"/events/{event.id}/staffing"
        assert event.guest_count == 80

    def test_negative_guest_count_rejected(self, client: TestClient):
        """Test negative guest count rejected."""
        response = client.post(
            "/events", data={"name": "Gala", "date": "2025-07-01", "guest_count": "-5"}
        )
        assert response.status_code == 422

    def test_list_events(self, client: TestClient, wedding: Event):
        """Test listing events as JSON."""
        response = client.get("/events")
        assert response.status_code == 200
        assert [e["name"] for e in response.json()] == ["Mariage Dupont"]

    def test_requirement(self, client: TestClient, wedding: Event):
        """Test the event requirement endpoint."""
        response = client.get(f"/events/{wedding.id}/requirement")
        assert response.json() == {"servers": 6, "chefs": 2, "bartenders": 2, "head_waiter": 1}

    def test_custom_role(self, client: TestClient, wedding: Event):
        """Test adding a custom role to an event."""
        response = client.post(
            f"/events/{wedding.id}/custom-roles", data={"role": "Plongeur", "count": "2"}, headers=JSON
        )
        assert response.json() == {"custom_roles": {"Plongeur": 2}}
        roster = client.get(f"/events/{wedding.id}/roster").json()
        assert roster["roles"]["Plongeur"]["missing"] == 2

    def test_staffing_page(self, client: TestClient, wedding: Event):
        """Test the staffing page renders."""
        response = client.get(f"/events/{wedding.id}/staffing")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Mariage Dupont" in response.text

    def test_staffing_json(self, client: TestClient, wedding: Event):
        """Test the staffing overview as JSON."""
        response = client.get(f"/events/{wedding.id}/staffing", headers=JSON)
        assert response.json()["roster"]["total_needed"] == 11

    def test_event_not_found(self, client: TestClient):
        """Test event not found."""
        response = client.get(f"/events/{uuid4()}/staffing")
        assert response.status_code == 404


class TestTeamRoutes:
    """Tests for the team directory."""

    def test_create_and_list(self, client: TestClient):
        """Test create and list."""
        response = client.post(
            "/team",
            data={"name": "Julie Martin", "role": "Serveuse", "skills": "cocktails, service"},
            headers=JSON,
        )
        assert response.status_code == 201
        assert response.json()["skills"] == ["cocktails", "service"]

        members = client.get("/team").json()
        assert members[0]["stats"]["reliability"] == 50


class TestSettingsRoutes:
    """Tests for staff ratio settings."""

    def test_defaults(self, client: TestClient):
        """Test reading the default ratio settings."""
        data = client.get("/settings/staffing").json()
        assert data["guests_per_server"] == 25
        assert data["head_waiter_enabled"] is True

    def test_update(self, client: TestClient, wedding: Event):
        """Test updating the ratio settings."""
        response = client.post(
            "/settings/staffing", data={"guests_per_server": "20", "coeff_wedding": "1.0"}, headers=JSON
        )
        assert response.json()["guests_per_server"] == 20
        assert response.json()["guests_per_chef"] == 60
        requirement = client.get(f"/events/{wedding.id}/requirement").json()
        assert requirement["servers"] == 6

    def test_zero_ratio_rejected(self, client: TestClient):
        """Test zero ratio rejected."""
        response = client.post("/settings/staffing", data={"guests_per_server": "0"})
        assert response.status_code == 422


class TestConfirmationRoutes:
    """Tests for operator actions on confirmation requests."""

    def test_open_session(self, client: TestClient, wedding: Event, team):
        """Test opening a confirmation session."""
        response = client.post(
            f"/events/{wedding.id}/sessions",
            data={"team_member_ids": [str(team["julie"].id), str(team["marc"].id)]},
            headers=JSON,
        )
        assert response.status_code == 201
        data = response.json()
        assert len(data["requests"]) == 2
        assert data["link"].endswith(f"/confirm/{data['session_id']}")
        assert data["link"] in data["message"]

    def test_open_session_unknown_member(self, client: TestClient, wedding: Event):
        """Test open session unknown member."""
        response = client.post(
            f"/events/{wedding.id}/sessions", data={"team_member_ids": [str(uuid4())]}
        )
        assert response.status_code == 404

    def test_sent_then_decision(self, client: TestClient, session: Session, wedding: Event, team, clock):
        """Test sent then decision."""
        confirmation_session = create_session(session, wedding.id, [team["julie"].id], clock)
        request_id = confirmation_session.requests[0].id

        response = client.post(f"/requests/{request_id}/sent", headers=JSON)
        assert response.json()["sent_at"] is not None

        response = client.post(
            f"/requests/{request_id}/decision", data={"decision": "confirmed"}, follow_redirects=False
        )
        assert response.status_code == 303
        assert response.headers["location"] == f"/events/{wedding.id}/staffing"

    def test_conflicting_decision(self, client: TestClient, session: Session, wedding: Event, team, clock):
        """Test a conflicting operator decision returns 409."""
        confirmation_session = create_session(session, wedding.id, [team["julie"].id], clock)
        request_id = confirmation_session.requests[0].id
        client.post(f"/requests/{request_id}/decision", data={"decision": "declined"}, headers=JSON)

        response = client.post(
            f"/requests/{request_id}/decision", data={"decision": "confirmed"}, headers=JSON
        )
        assert response.status_code == 409
        assert response.json()["current_status"] == "declined"

    def test_reset(self, client: TestClient, session: Session, wedding: Event, team, clock):
        """Test resetting a request to pending."""
        confirmation_session = create_session(session, wedding.id, [team["julie"].id], clock)
        request_id = confirmation_session.requests[0].id
        client.post(f"/requests/{request_id}/decision", data={"decision": "declined"}, headers=JSON)

        response = client.post(f"/requests/{request_id}/reset", headers=JSON)
        assert response.json()["status"] == "pending"
        assert response.json()["responded_at"] is None

    def test_unknown_request(self, client: TestClient):
        """Test an unknown request returns 404."""
        response = client.post(f"/requests/{uuid4()}/sent", headers=JSON)
        assert response.status_code == 404


class TestPublicConfirmRoutes:
    """Tests for the public confirmation page."""

    def test_form(self, client: TestClient, session: Session, wedding: Event, team, clock):
        """Test the public confirmation form renders."""
        confirmation_session = create_session(session, wedding.id, [team["julie"].id], clock)
        response = client.get(f"/confirm/{confirmation_session.id}")
        assert response.status_code == 200
        assert "Mariage Dupont" in response.text
        assert "samedi 14 juin 2025" in response.text

    def test_invalid_link(self, client: TestClient):
        """Test an unknown link shows the not found card."""
        assert "Lien invalide" in client.get("/confirm/not-a-uuid").text
        assert client.get(f"/confirm/{uuid4()}").status_code == 404

    def test_expired_link(self, client: TestClient, session: Session, wedding: Event, team, clock):
        """Test an expired link shows the expired card."""
        confirmation_session = create_session(session, wedding.id, [team["julie"].id], clock)
        clock.advance(days=8)
        response = client.post(
            f"/confirm/{confirmation_session.id}",
            data={"first_name": "Julie", "last_name": "Martin", "decision": "confirmed"},
        )
        assert response.status_code == 410
        assert "Lien expiré" in response.text

    def test_confirm(self, client: TestClient, session: Session, wedding: Event, team, clock):
        """Test a member confirms through the public form."""
        confirmation_session = create_session(session, wedding.id, [team["julie"].id], clock)
        response = client.post(
            f"/confirm/{confirmation_session.id}",
            data={"first_name": "Julie", "last_name": "Martin", "decision": "confirmed"},
        )
        assert response.status_code == 200
        assert "Parfait Julie !" in response.text

        response = client.post(
            f"/confirm/{confirmation_session.id}",
            data={"first_name": "Julie", "last_name": "Martin", "decision": "confirmed"},
        )
        assert "Déjà répondu" in response.text

    def test_blank_names_redisplay_form(self, client: TestClient, session: Session, wedding: Event, team, clock):
        """Test blank names redisplay form."""
        confirmation_session = create_session(session, wedding.id, [team["julie"].id], clock)
        response = client.post(
            f"/confirm/{confirmation_session.id}",
            data={"first_name": "Julie", "last_name": " ", "decision": "declined"},
        )
        assert response.status_code == 422
        assert "prénom et votre nom" in response.text
        requests = session.exec(
            select(ConfirmationRequest).where(ConfirmationRequest.session_id == confirmation_session.id)
        ).all()
        assert [r.status for r in requests] == ["pending"]

    def test_missing_or_unknown_decision_redisplay_form(
        self, client: TestClient, session: Session, wedding: Event, team, clock
    ):
        """Test a missing or unknown answer re-displays the form instead of a JSON error."""
        confirmation_session = create_session(session, wedding.id, [team["julie"].id], clock)
        for data in (
            {"first_name": "Julie", "last_name": "Martin"},
            {"first_name": "Julie", "last_name": "Martin", "decision": "maybe"},
        ):
            response = client.post(f"/confirm/{confirmation_session.id}", data=data)
            assert response.status_code == 422
            assert response.headers["content-type"].startswith("text/html")
            assert "Merci de choisir une réponse." in response.text
            assert "Mariage Dupont" in response.text

        requests = session.exec(
            select(ConfirmationRequest).where(ConfirmationRequest.session_id == confirmation_session.id)
        ).all()
        assert [r.status for r in requests] == ["pending"]

    def test_expired_link_with_blank_names(
        self, client: TestClient, session: Session, wedding: Event, team, clock
    ):
        """Test an expired link shows the expired card even when the names are blank."""
        confirmation_session = create_session(session, wedding.id, [team["julie"].id], clock)
        clock.advance(days=8)
        response = client.post(
            f"/confirm/{confirmation_session.id}",
            data={"first_name": "", "last_name": " ", "decision": "confirmed"},
        )
        assert response.status_code == 410
        assert "Lien expiré" in response.text

    def test_unknown_link_with_blank_names(self, client: TestClient):
        """Test an unknown link shows the not found card even when the names are blank."""
        response = client.post(f"/confirm/{uuid4()}", data={"first_name": "", "last_name": ""})
        assert response.status_code == 404
        assert "Lien invalide" in response.text


class TestAnnouncementRoutes:
    """Tests for announcements and the public form."""

    def test_draft_preview(self, client: TestClient, wedding: Event):
        """Test previewing a draft announcement."""
        data = client.get(f"/events/{wedding.id}/announcement").json()
        assert data["id"] is None
        assert data["staff_needs"]["servers"] == 6

    def test_send_with_custom_needs(self, client: TestClient, wedding: Event):
        """Test send with custom needs."""
        response = client.post(
            f"/events/{wedding.id}/announcement",
            data={"roles": ["servers", "chefs"], "counts": ["4", "1"], "send": "true"},
            headers=JSON,
        )
        data = response.json()
        assert data["status"] == "sent"
        assert data["staff_needs"] == {"servers": 4, "chefs": 1}
        assert "samedi 14 juin 2025" in data["message"]

    def test_repondre(self, client: TestClient, session: Session, wedding: Event, clock):
        """Test answering an announcement."""
        announcement = save_announcement(session, wedding, {"servers": 2}, clock, send=True)

        page = client.get(f"/repondre/{announcement.token}")
        assert page.status_code == 200
        assert "Serveurs" in page.text

        response = client.post(
            f"/repondre/{announcement.token}",
            data={"first_name": "Julie", "role": "servers", "available": "true"},
        )
        assert response.status_code == 422

        response = client.post(
            f"/repondre/{announcement.token}",
            data={"first_name": "Julie", "role": "servers", "available": "true", "phone": "0612345678"},
        )
        assert response.status_code == 200
        assert "Merci Julie !" in response.text

    def test_repondre_without_availability_redisplay_form(
        self, client: TestClient, session: Session, wedding: Event, clock
    ):
        """Test a missing availability answer re-displays the form."""
        announcement = save_announcement(session, wedding, {"servers": 2}, clock, send=True)
        for data in (
            {"first_name": "Julie", "role": "servers"},
            {"first_name": "Julie", "role": "servers", "available": "peut-être"},
        ):
            response = client.post(f"/repondre/{announcement.token}", data=data)
            assert response.status_code == 422
            assert response.headers["content-type"].startswith("text/html")
            assert "si tu es disponible" in response.text

    def test_repondre_unknown_token(self, client: TestClient):
        """Test repondre unknown token."""
        assert client.get("/repondre/nope").status_code == 404


class TestNotificationRoutes:
    """Tests for operator notifications."""

    def test_list_and_mark_read(self, client: TestClient, session: Session, wedding: Event):
        """Test list and mark read."""
        notification = Notification(type="pending_confirmations", message="2 personnes", action_url="/events")
        session.add(notification)
        session.commit()

        assert len(client.get("/notifications?unread=true").json()) == 1
        response = client.post(f"/notifications/{notification.id}/read", headers=JSON)
        assert response.json()["read"] is True
        assert client.get("/notifications?unread=true").json() == []
