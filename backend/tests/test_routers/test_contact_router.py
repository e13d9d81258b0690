"""Integration tests for the contact form endpoints."""

from unittest.mock import patch

from services.email_service import EmailService

CONTACT_FORM = {
    "name": "Visitor",
    "email": "visitor@example.com",
    "subject": "Bulk licences",
    "message": "Do you offer team pricing?",
}


class TestContactRouter:
    def test_submit(self, client):
        with patch.object(
            EmailService, "send_contact_notification", return_value=True
        ) as notify:
            response = client.post("/api/contact", json=CONTACT_FORM)

        assert response.status_code == 201
        assert response.json()["status"] == "pending"
        notify.assert_called_once()

    def test_rate_limited(self, client):
        with patch.object(
            EmailService, "send_contact_notification", return_value=True
        ):
            statuses = [
                client.post("/api/contact", json=CONTACT_FORM).status_code
                for _ in range(6)
            ]

        assert statuses[:5] == [201] * 5
        assert statuses[5] == 429

    def test_invalid_email(self, client):
        response = client.post(
            "/api/contact", json={**CONTACT_FORM, "email": "not-an-email"}
        )

        assert response.status_code == 422

    def test_admin_inbox(self, client, admin_user, auth_headers):
        with patch.object(
            EmailService, "send_contact_notification", return_value=True
        ):
            created = client.post("/api/contact", json=CONTACT_FORM).json()

        headers = auth_headers(admin_user)
        inbox = client.get("/api/contact", headers=headers)
        assert [m["id"] for m in inbox.json()] == [created["id"]]

        resolved = client.put(f"/api/contact/{created['id']}", headers=headers)
        assert resolved.json()["status"] == "resolved"

        pending = client.get(
            "/api/contact", params={"status": "pending"}, headers=headers
        )
        assert pending.json() == []

    def test_inbox_requires_admin(self, client, student_user, auth_headers):
        response = client.get("/api/contact", headers=auth_headers(student_user))

        assert response.status_code == 403
