"""
Unit tests for UserRepository and CategoryRepository.
"""

import repositories.db_models as db_models
from repositories.category_repository import CategoryRepository
from repositories.user_repository import UserRepository
from tests.conftest import make_user


class TestUserRepository:
    """Test cases for UserRepository."""

    def test_get_by_email_ignores_case(self, db_session, student_user):
        """Lookup lower-cases the address."""
        repo = UserRepository(db_session)

        user = repo.get_by_email("STUDENT@Example.com")

        assert user is not None
        assert user.id == student_user.id

    def test_email_exists(self, db_session, student_user):
        repo = UserRepository(db_session)

        assert repo.email_exists(student_user.email) is True
        assert repo.email_exists("nobody@example.com") is False

    def test_get_users_filtered_by_role(
        self, db_session, student_user, other_student, instructor_user
    ):
        repo = UserRepository(db_session)

        users, total = repo.get_users_filtered(role=db_models.UserRole.STUDENT)

        assert total == 2
        assert {u.id for u in users} == {student_user.id, other_student.id}

    def test_get_users_filtered_search(self, db_session, student_user, other_student):
        """Search matches name or email, case-insensitively."""
        repo = UserRepository(db_session)

        by_name, _ = repo.get_users_filtered(search="student two")
        by_email, _ = repo.get_users_filtered(search="STUDENT2@")

        assert [u.id for u in by_name] == [other_student.id]
        assert [u.id for u in by_email] == [other_student.id]

    def test_get_users_filtered_pagination(self, db_session):
        for i in range(5):
            make_user(db_session, f"learner{i}@example.com")
        repo = UserRepository(db_session)

        page1, total = repo.get_users_filtered(skip=0, limit=2)
        page2, _ = repo.get_users_filtered(skip=2, limit=2)

        assert total == 5
        assert len(page1) == 2
        assert len(page2) == 2
        assert not {u.id for u in page1} & {u.id for u in page2}

    def test_count_by_role_zero_filled(self, db_session, student_user):
        repo = UserRepository(db_session)

        counts = repo.count_by_role()

        assert counts == {"admin": 0, "instructor": 0, "student": 1}


class TestCategoryRepository:
    """Test cases for CategoryRepository."""

    def test_get_by_name_normalizes(self, db_session, test_category):
        repo = CategoryRepository(db_session)

        assert repo.get_by_name("  programming ").id == test_category.id
        assert repo.get_by_name("Cooking") is None

    def test_get_by_status_alphabetical(self, db_session, test_category):
        db_session.add_all(
            [
                db_models.Category(
                    name="Art", status=db_models.CategoryStatus.APPROVED
                ),
                db_models.Category(
                    name="Zoology", status=db_models.CategoryStatus.PENDING
                ),
            ]
        )
        db_session.commit()
        repo = CategoryRepository(db_session)

        approved = repo.get_by_status(db_models.CategoryStatus.APPROVED)

        assert [c.name for c in approved] == ["Art", "Programming"]

    def test_get_by_suggester(self, db_session, instructor_user):
        db_session.add(
            db_models.Category(
                name="Game Design",
                status=db_models.CategoryStatus.PENDING,
                suggested_by=instructor_user.id,
            )
        )
        db_session.commit()
        repo = CategoryRepository(db_session)

        mine = repo.get_by_suggester(instructor_user.id)

        assert [c.name for c in mine] == ["Game Design"]

    def test_count_courses(self, db_session, test_category, free_course, paid_course):
        repo = CategoryRepository(db_session)

        assert repo.count_courses(test_category.id) == 2
