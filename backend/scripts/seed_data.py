"""Seed the database with taxonomies, demo activities and a demo program."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from scoutplan.database import SessionLocal, engine, Base
import scoutplan.models  # noqa: F401

from scoutplan.models.user import User
from scoutplan.models.taxonomy import ActivityType, EducationalArea, EducationalGoal, Sdg
from scoutplan.models.activity import Activity
from scoutplan.models.program import Program
from scoutplan.schemas.program import ActivityEntry, CustomEntry
from scoutplan.services.activity_service import load_activity_durations
from scoutplan.services.program_service import replace_entries
from scoutplan.services.schedule_service import compute_schedule, renumber

ACTIVITY_TYPES = [
    ("Game", "Playful and fun activities"),
    ("Icebreaker", "Activities that break the ice and set the mood"),
    ("Challenge", "Activities that test skills and competences"),
    ("Reflection", "Reflection and critical thinking"),
    ("Creativity", "Activities that stimulate creativity"),
    ("Cooperation", "Activities that promote teamwork"),
    ("Leadership", "Activities that develop leadership skills"),
    ("Adventure", "Adventure and exploration"),
    ("Technique", "Scouting techniques and pioneering"),
]

EDUCATIONAL_AREAS = [
    (
        {"name": "Social Skills", "description": "Communication and relationships", "icon": "users", "code": "SOCIAL"},
        [
            ("Effective Communication", "SOCIAL_COMM"),
            ("Teamwork", "SOCIAL_TEAM"),
            ("Empathy", "SOCIAL_EMPATHY"),
        ],
    ),
    (
        {"name": "Leadership", "description": "Leadership and responsibility", "icon": "flag", "code": "LEADERSHIP"},
        [
            ("Decision Making", "LEADERSHIP_DECISION"),
            ("Responsibility", "LEADERSHIP_RESPONSIBILITY"),
        ],
    ),
    (
        {"name": "Technical Skills", "description": "Outdoor and scouting techniques", "icon": "compass", "code": "TECHNICAL"},
        [
            ("Orienteering", "TECHNICAL_ORIENTEERING"),
            ("Pioneering", "TECHNICAL_PIONEERING"),
        ],
    ),
    (
        {"name": "Creativity", "description": "Creative thinking and expression", "icon": "lightbulb", "code": "CREATIVITY"},
        [
            ("Problem Solving", "CREATIVITY_PROBLEM"),
            ("Artistic Expression", "CREATIVITY_ART"),
        ],
    ),
]

SDGS = [
    (1, "No Poverty"), (2, "Zero Hunger"), (3, "Good Health and Well-being"),
    (4, "Quality Education"), (5, "Gender Equality"), (6, "Clean Water and Sanitation"),
    (7, "Affordable and Clean Energy"), (8, "Decent Work and Economic Growth"),
    (9, "Industry, Innovation and Infrastructure"), (10, "Reduced Inequalities"),
    (11, "Sustainable Cities and Communities"), (12, "Responsible Consumption and Production"),
    (13, "Climate Action"), (14, "Life Below Water"), (15, "Life on Land"),
    (16, "Peace, Justice and Strong Institutions"), (17, "Partnerships for the Goals"),
]

DEMO_ACTIVITIES = [
    {
        "name": "Name and Gesture Game",
        "description": "Each person says their name with a gesture; the others repeat every name and gesture so far.",
        "materials": "No materials needed",
        "approximate_duration_minutes": 15,
        "group_size": "medium",
        "effort_level": "low",
        "location": "inside",
        "age_group": "cub_scouts",
        "type": "Game",
        "goals": ["SOCIAL_COMM", "SOCIAL_TEAM"],
        "sdgs": [4, 5],
    },
    {
        "name": "Treasure Hunt",
        "description": "Clues with riddles and codes lead the patrols to a hidden treasure.",
        "materials": "Clues, treasure (sweets or small prizes), paper and pencils",
        "approximate_duration_minutes": 45,
        "group_size": "large",
        "effort_level": "medium",
        "location": "outside",
        "age_group": "scouts",
        "type": "Game",
        "goals": ["TECHNICAL_ORIENTEERING", "SOCIAL_TEAM", "CREATIVITY_PROBLEM"],
        "sdgs": [4, 15],
    },
    {
        "name": "Reflection of the Day",
        "description": "Participants share the most important moments of the day and what they learned.",
        "materials": "Candle (optional), reflection questions",
        "approximate_duration_minutes": 20,
        "group_size": "small",
        "effort_level": "low",
        "location": "inside",
        "age_group": "adventurers",
        "type": "Reflection",
        "goals": ["SOCIAL_EMPATHY", "LEADERSHIP_DECISION"],
        "sdgs": [3, 4],
    },
    {
        "name": "Shelter Building",
        "description": "Build a shelter from natural materials while learning construction techniques.",
        "materials": "Ropes, branches, leaves, basic tools",
        "approximate_duration_minutes": 90,
        "group_size": "medium",
        "effort_level": "high",
        "location": "outside",
        "age_group": "rovers",
        "type": "Technique",
        "goals": ["TECHNICAL_PIONEERING", "SOCIAL_TEAM"],
        "sdgs": [11, 13, 15],
    },
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        users = [
            User(email="admin@scoutplan.local", name="Admin Leader", role="admin"),
            User(email="leader@scoutplan.local", name="Patrol Leader", role="user"),
        ]
        db.add_all(users)
        db.flush()

        types = {name: ActivityType(name=name, description=description) for name, description in ACTIVITY_TYPES}
        db.add_all(types.values())

        goals = {}
        for area_data, goal_rows in EDUCATIONAL_AREAS:
            area = EducationalArea(**area_data)
            db.add(area)
            for title, code in goal_rows:
                goal = EducationalGoal(area=area, title=title, code=code)
                goals[code] = goal
                db.add(goal)

        sdgs = {}
        for number, name in SDGS:
            sdg = Sdg(number=number, name=name, description=name, icon_url=f"/sdg-icons/sdg-{number}.png")
            sdgs[number] = sdg
            db.add(sdg)
        db.flush()

        activities = []
        for data in DEMO_ACTIVITIES:
            data = dict(data)
            activity = Activity(
                activity_type=types[data.pop("type")],
                educational_goals=[goals[code] for code in data.pop("goals")],
                sdgs=[sdgs[number] for number in data.pop("sdgs")],
                created_by=users[0].user_id,
                **data,
            )
            activities.append(activity)
            db.add(activity)
        db.flush()

        program = Program(name="Saturday Meeting", start_time="09:00", user_id=users[1].user_id, is_public=True)
        db.add(program)
        db.commit()

        entries = renumber([
            ActivityEntry(activity_id=activities[0].activity_id),
            CustomEntry(custom_title="Snack break", custom_duration_minutes=15),
            ActivityEntry(activity_id=activities[1].activity_id),
            ActivityEntry(activity_id=activities[2].activity_id),
        ])
        lookup = load_activity_durations(db, [e.activity_id for e in entries if e.entry_type == "activity"])
        result = replace_entries(db, program.program_id, compute_schedule(entries, program.start_time, lookup))
        if not result.ok:
            print(f"Seeding program entries failed: {result.error}")
            return

        print("Seed data created successfully!")
        print(f"  Users: {len(users)}")
        print(f"  Activity types: {len(types)}, goals: {len(goals)}, SDGs: {len(sdgs)}")
        print(f"  Activities: {len(activities)}")
        print("  Demo program: 'Saturday Meeting'")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
