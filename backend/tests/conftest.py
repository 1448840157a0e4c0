import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from scoutplan.database import Base, get_db
from scoutplan.main import app
from scoutplan.models.user import User
from scoutplan.models.taxonomy import ActivityType, EducationalArea, EducationalGoal, Sdg
from scoutplan.models.activity import Activity

TEST_DB_URL = "sqlite:///./test_scoutplan.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    app.state.query_cache.clear()
    yield
    app.state.query_cache.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        "admin": User(email="admin@example.com", name="Admin", role="admin"),
        "leader": User(email="leader@example.com", name="Leader", role="user"),
        "other": User(email="other@example.com", name="Other Leader", role="user"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def seed_taxonomies(db):
    game = ActivityType(name="Game", description="Playful activities")
    reflection = ActivityType(name="Reflection", description="Thinking together")
    area = EducationalArea(name="Social Skills", icon="users", code="SOCIAL")
    team = EducationalGoal(area=area, title="Teamwork", code="SOCIAL_TEAM")
    empathy = EducationalGoal(area=area, title="Empathy", code="SOCIAL_EMPATHY")
    education = Sdg(number=4, name="Quality Education", description="Education", icon_url="/sdg-4.png")
    land = Sdg(number=15, name="Life on Land", description="Land", icon_url="/sdg-15.png")
    db.add_all([game, reflection, area, team, empathy, education, land])
    db.commit()
    for row in (game, reflection, team, empathy, education, land):
        db.refresh(row)
    return {
        "game": game,
        "reflection": reflection,
        "team": team,
        "empathy": empathy,
        "sdg4": education,
        "sdg15": land,
    }


@pytest.fixture
def seed_activities(db, seed_taxonomies):
    t = seed_taxonomies
    rows = {
        "campfire": Activity(
            name="Campfire Songs",
            description="Singing around the fire",
            materials="Guitar, songbooks",
            approximate_duration_minutes=30,
            group_size="large",
            effort_level="low",
            location="outside",
            age_group="scouts",
            activity_type_id=t["game"].activity_type_id,
            educational_goals=[t["team"]],
            sdgs=[t["sdg4"]],
        ),
        "knots": Activity(
            name="Knot Relay",
            description="Teams race to tie knots",
            materials="Ropes",
            approximate_duration_minutes=45,
            group_size="medium",
            effort_level="medium",
            location="inside",
            age_group="cub_scouts",
            activity_type_id=t["game"].activity_type_id,
            educational_goals=[t["team"]],
            sdgs=[t["sdg15"]],
        ),
        "circle": Activity(
            name="Evening Circle",
            description="Reflection of the day",
            materials="Candle",
            approximate_duration_minutes=15,
            group_size="small",
            effort_level="low",
            location="inside",
            age_group="rovers",
            activity_type_id=t["reflection"].activity_type_id,
            educational_goals=[t["empathy"]],
            sdgs=[],
        ),
        "hidden": Activity(
            name="Draft Hike",
            description="Not approved yet",
            materials="Map",
            approximate_duration_minutes=120,
            group_size="large",
            effort_level="high",
            location="outside",
            age_group="rovers",
            activity_type_id=t["game"].activity_type_id,
            is_approved=False,
        ),
    }
    for row in rows.values():
        db.add(row)
    db.commit()
    for row in rows.values():
        db.refresh(row)
    return rows


def get_token(client, email: str) -> str:
    resp = client.post("/api/auth/login", json={"email": email})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}
