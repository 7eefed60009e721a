from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from atelier.api import create_app
from atelier.auth import hash_password
from atelier.config import Settings
from atelier.models import Course, CourseTeacher, GalleryItem, Member, User

SECRET = "test-session-secret-that-is-long-enough-for-hs256"
BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        session_secret=SECRET,
        rate_limit_enabled=False,
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app, seed):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seed(app):
    """Two unlinked members, one member linked to a user, two courses, two artworks."""
    session = app.state.session_factory()
    try:
        alice_user = User(email="alice@example.com", password_hash=hash_password("user-pass"))
        session.add(alice_user)
        session.flush()
        session.add_all(
            [
                Member(
                    id="AB-12",
                    name_he="אבי בן",
                    name_en="Avi Ben",
                    role_he="צייר",
                    role_en="Painter",
                    bio_he="מצייר נופים",
                    bio_en="Paints landscapes",
                    image_url="https://img.example/avi.jpg",
                    password_hash=hash_password("secret-12"),
                    created_at=BASE_TIME,
                ),
                Member(
                    id="dana",
                    name_he="דנה",
                    name_en="Dana",
                    role_he="פסלת",
                    role_en="Sculptor",
                    password_hash=hash_password("dana-pass"),
                    created_at=BASE_TIME + timedelta(days=1),
                ),
                Member(
                    id="alice-cohen",
                    user_id=alice_user.id,
                    name_en="Alice Cohen",
                    role_en="Photographer",
                    created_at=BASE_TIME + timedelta(days=2),
                ),
            ]
        )
        oil = Course(
            name_he="ציור בשמן",
            name_en="Oil Painting",
            description_he="קורס למתחילים",
            description_en="A course for beginners",
            created_at=BASE_TIME,
        )
        clay = Course(
            name_he="פיסול",
            name_en="Sculpture",
            description_he="עבודה בחימר",
            description_en="Working with clay",
            created_at=BASE_TIME + timedelta(days=1),
        )
        session.add_all([oil, clay])
        session.flush()
        session.add_all(
            [
                CourseTeacher(course_id=oil.id, teacher_id="AB-12"),
                CourseTeacher(course_id=clay.id, teacher_id="dana"),
            ]
        )
        sunset = GalleryItem(
            artist_id="AB-12",
            title_he="שקיעה",
            title_en="Sunset",
            description_he="שמן על בד",
            description_en="Oil on canvas",
            image_url="https://img.example/sunset.jpg",
            created_at=BASE_TIME,
        )
        wave = GalleryItem(
            artist_id="dana",
            title_he="גל",
            title_en="Sea Wave",
            description_he="ברונזה",
            description_en="Bronze",
            image_url="https://img.example/wave.jpg",
            created_at=BASE_TIME + timedelta(days=1),
        )
        session.add_all([sunset, wave])
        session.commit()
        return {
            "oil": oil.id,
            "clay": clay.id,
            "sunset": sunset.id,
            "wave": wave.id,
        }
    finally:
        session.close()


@pytest.fixture
def auth_headers(app):
    """Build an ``Authorization`` header for a member, optionally back-dated."""

    def build(member_id: str, issued_at: datetime | None = None) -> dict:
        token = app.state.codec.encode(member_id, issued_at)
        return {"Authorization": f"Bearer {token}"}

    return build
