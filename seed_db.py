import asyncio

from app.database import async_session, create_tables
from app.models.profile import Profile, YearOfStudyEnum
from app.models.skill import Skill
from app.models.user import User
from app.models.user_skill import UserSkill

SKILLS = [
    ("Python", "Programming"),
    ("React", "Programming"),
    ("Machine Learning", "Programming"),
    ("UI Design", "Design"),
    ("Figma", "Design"),
    ("Video Editing", "Media"),
    ("Photography", "Media"),
    ("Public Speaking", "Other"),
]


async def async_main():
    await create_tables()

    async with async_session() as session:
        skills = {name: Skill(name=name, category=category) for name, category in SKILLS}
        session.add_all(skills.values())

        # Identities
        u1 = User(email="alice@example.com", display_name="Alice Builder")
        u2 = User(email="bob@example.com", display_name="Bob Designer")
        u3 = User(email="charlie@example.com", display_name="Charlie Research")
        session.add_all([u1, u2, u3])
        await session.flush()

        # Profiles
        session.add_all([
            Profile(id=u1.id, full_name="Alice Builder", department="Computer Science",
                    year_of_study=YearOfStudyEnum.THIRD, email=u1.email,
                    bio="I love building scalable backends."),
            Profile(id=u2.id, full_name="Bob Designer", department="Fine Arts",
                    year_of_study=YearOfStudyEnum.SECOND, email=u2.email,
                    linkedin_url="https://linkedin.com/in/bob-designer"),
            Profile(id=u3.id, full_name="Charlie Research", department="Statistics",
                    year_of_study=YearOfStudyEnum.MASTERS, email=u3.email,
                    bio="Data science is my passion.", phone="+1 555 0100"),
        ])
        await session.flush()

        session.add_all([
            UserSkill(user_id=u1.id, skill_id=skills["Python"].id),
            UserSkill(user_id=u1.id, skill_id=skills["React"].id),
            UserSkill(user_id=u2.id, skill_id=skills["Figma"].id),
            UserSkill(user_id=u2.id, skill_id=skills["UI Design"].id),
            UserSkill(user_id=u3.id, skill_id=skills["Python"].id),
            UserSkill(user_id=u3.id, skill_id=skills["Machine Learning"].id),
        ])
        await session.commit()
    print("Database seeded with sample students and skills. Sign in with /mock-login/1")


if __name__ == "__main__":
    asyncio.run(async_main())
