"""Integration tests for admin and instructor back office endpoints."""

import pytest

import repositories.db_models as db_models
from services.payment_service import sign_payment
from tests.conftest import TEST_PASSWORD, make_course

ADMIN_GET_ENDPOINTS = [
    "/api/admin/courses",
    "/api/admin/courses/pending",
    "/api/admin/courses/rejected",
    "/api/admin/dashboard",
    "/api/admin/revenue",
    "/api/admin/payouts",
    "/api/admin/transactions",
    "/api/admin/enrollment-stats",
    "/api/admin/course-performance",
    "/api/admin/users",
    "/api/admin/instructors",
    "/api/admin/students",
    "/api/admin/scheduler",
]

INSTRUCTOR_GET_ENDPOINTS = [
    "/api/instructor/dashboard",
    "/api/instructor/earnings",
    "/api/instructor/payouts",
    "/api/instructor/course-analytics",
    "/api/instructor/students",
    "/api/instructor/students-progress",
]


@pytest.fixture
def purchase(client, student_user, auth_headers, paid_course):
    """Buy paid_course through the checkout endpoints."""
    headers = auth_headers(student_user)
    order = client.post(
        "/api/payment/create-order",
        json={"course_id": paid_course.id},
        headers=headers,
    ).json()
    response = client.post(
        "/api/payment/verify-payment",
        json={
            "order_id": order["order_id"],
            "payment_id": "pay_admin_1",
            "signature": sign_payment(order["order_id"], "pay_admin_1"),
        },
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()["enrollment"]


class TestPermissions:
    @pytest.mark.parametrize("url", ADMIN_GET_ENDPOINTS)
    def test_admin_endpoints_reject_instructors(
        self, client, instructor_user, auth_headers, url
    ):
        assert client.get(url, headers=auth_headers(instructor_user)).status_code == 403

    @pytest.mark.parametrize("url", ADMIN_GET_ENDPOINTS)
    def test_admin_endpoints_serve_admins(self, client, admin_user, auth_headers, url):
        assert client.get(url, headers=auth_headers(admin_user)).status_code == 200

    @pytest.mark.parametrize("url", INSTRUCTOR_GET_ENDPOINTS)
    def test_instructor_endpoints_reject_students(
        self, client, student_user, auth_headers, url
    ):
        assert client.get(url, headers=auth_headers(student_user)).status_code == 403

    @pytest.mark.parametrize("url", INSTRUCTOR_GET_ENDPOINTS)
    def test_instructor_endpoints_serve_instructors(
        self, client, instructor_user, auth_headers, url
    ):
        response = client.get(url, headers=auth_headers(instructor_user))

        assert response.status_code == 200


class TestCourseReview:
    def test_approve_pending_course(
        self, client, db_session, admin_user, instructor_user, auth_headers,
        test_category,
    ):
        pending = make_course(
            db_session,
            instructor_user,
            test_category,
            title="Awaiting Review",
            status=db_models.CourseStatus.PENDING_APPROVAL,
        )

        queue = client.get(
            "/api/admin/courses/pending", headers=auth_headers(admin_user)
        )
        assert [c["id"] for c in queue.json()] == [pending.id]

        response = client.post(
            f"/api/admin/courses/{pending.id}/approve",
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert client.get(f"/api/courses/{pending.id}").status_code == 200

    def test_reject_draft_refused(
        self, client, db_session, admin_user, instructor_user, auth_headers,
        test_category,
    ):
        draft = make_course(
            db_session,
            instructor_user,
            test_category,
            status=db_models.CourseStatus.DRAFT,
        )

        response = client.post(
            f"/api/admin/courses/{draft.id}/reject",
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 400


class TestAdminUsers:
    def test_add_admin(self, client, admin_user, auth_headers):
        response = client.post(
            "/api/admin/add-admin",
            json={
                "name": "Second Admin",
                "email": "admin2@example.com",
                "password": TEST_PASSWORD,
            },
            headers=auth_headers(admin_user),
        )

        assert response.status_code == 201
        assert response.json()["role"] == "admin"

    def test_list_users_by_role(
        self, client, admin_user, student_user, instructor_user, auth_headers
    ):
        response = client.get(
            "/api/admin/users",
            params={"role": "student"},
            headers=auth_headers(admin_user),
        )

        data = response.json()
        assert data["total"] == 1
        assert data["users"][0]["email"] == student_user.email

    def test_user_detail(self, client, admin_user, student_user, auth_headers):
        response = client.get(
            f"/api/admin/users/{student_user.id}", headers=auth_headers(admin_user)
        )

        assert response.status_code == 200
        assert response.json()["user"]["id"] == student_user.id

    def test_missing_user(self, client, admin_user, auth_headers):
        response = client.get("/api/admin/users/999", headers=auth_headers(admin_user))

        assert response.status_code == 404

    def test_scheduler_status_shape(self, client, admin_user, auth_headers):
        data = client.get(
            "/api/admin/scheduler", headers=auth_headers(admin_user)
        ).json()

        assert isinstance(data["running"], bool)
        assert isinstance(data["jobs"], list)


class TestRevenueReports:
    def test_admin_sees_sale(self, client, admin_user, auth_headers, purchase):
        headers = auth_headers(admin_user)

        dashboard = client.get("/api/admin/dashboard", headers=headers).json()
        transactions = client.get("/api/admin/transactions", headers=headers).json()
        payouts = client.get("/api/admin/payouts", headers=headers).json()

        assert dashboard["total_revenue"] == 499.0
        assert transactions["total"] == 1
        assert transactions["transactions"][0]["course_title"] == "Advanced SQL"
        assert payouts[0]["earnings"] == 399.2

    def test_instructor_sees_own_sale(
        self, client, instructor_user, other_instructor, auth_headers, purchase
    ):
        mine = client.get(
            "/api/instructor/payouts", headers=auth_headers(instructor_user)
        ).json()
        theirs = client.get(
            "/api/instructor/payouts", headers=auth_headers(other_instructor)
        ).json()

        assert mine["total"] == 1
        assert mine["transactions"][0]["instructor_earning"] == 399.2
        assert theirs["total"] == 0

    def test_instructor_students(
        self, client, instructor_user, student_user, auth_headers, purchase
    ):
        response = client.get(
            "/api/instructor/students", headers=auth_headers(instructor_user)
        )

        students = response.json()
        assert [s["student_id"] for s in students] == [student_user.id]
        assert students[0]["course_title"] == "Advanced SQL"
