"""
Seed script - populates the database with sample portfolio content.

Usage:
    python -m scripts.seed

Creates a few projects, certifications and education entries (with the
messy skill spellings real content has), a couple of manual skills, then
runs the full sync so the skill graph is built the same way production
builds it.

This script is IDEMPOTENT - running it twice won't create duplicates.
It checks for existing data before inserting.
"""
import asyncio
import sys
import os
from datetime import date

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.database import async_session_maker, init_db
from app.core.security import create_admin_token
from app.models.certification import Certification
from app.models.education import Education
from app.models.project import Project
from app.models.skill import Skill, SkillSourceType
from app.services.skill_normalizer import clean_name, guess_category
from app.services.skill_sync_service import SkillSyncService
from sqlalchemy import select


# ─── Projects ──────────────────────────────────────────────────
# `technologies` is what the editor stores; the id mirror in `skills`
# is filled in by the sync.

PROJECTS = [
    {
        "title": "Portfolio Site",
        "description": "This site: public portfolio plus an admin dashboard",
        "category": "Web",
        "technologies": ["React", "TypeScript", "Tailwind", "FastAPI", "PostgreSQL"],
        "github_url": "https://github.com/example/portfolio",
        "featured": True,
        "start_date": date(2024, 1, 10),
    },
    {
        "title": "Expense Tracker",
        "description": "Mobile-first budgeting app with offline sync",
        "category": "Mobile",
        # Same skills, different spelling - must collapse onto one record each
        "technologies": ["react", '"TypeScript"', "Firebase", "Jest"],
        "start_date": date(2023, 5, 2),
        "end_date": date(2023, 9, 30),
    },
    {
        "title": "Legacy Inventory System",
        "description": "Retired internal tool, hidden from the public site",
        "category": "Internal",
        "technologies": ["PHP", "MySQL", "jQuery"],
        "is_active": False,
        "start_date": date(2019, 3, 1),
        "end_date": date(2020, 6, 1),
    },
]

CERTIFICATIONS = [
    {
        "title": "AWS Certified Cloud Practitioner",
        "issuer": "Amazon Web Services",
        "credential_id": "AWS-CCP-0001",
        "issue_date": date(2023, 11, 20),
        "skills": [
            {"name": "AWS", "proficiency": "Intermediate", "verified": True},
            {"name": "Docker", "proficiency": "Beginner", "verified": False},
        ],
    },
]

EDUCATION = [
    {
        "degree": "BSc",
        "field": "Computer Science",
        "institution": "University of Nairobi",
        "start_date": date(2016, 9, 1),
        "end_date": date(2020, 7, 1),
        # Older entries store bare names; newer ones store objects
        "skills": ["Python", "(SQL)", {"name": "Algorithms", "proficiency": "Advanced"}],
    },
]

# Skills with no content behind them yet; stay visible regardless
MANUAL_SKILLS = [
    ("Figma", "Intermediate", 60),
    ("Git", "Advanced", 85),
]


async def seed():
    """Run the seed process."""
    print("Seeding database...")

    # Initialize tables
    await init_db()
    print("  Tables created")

    async with async_session_maker() as db:

        # ── Manual skills ──────────────────────────────────
        created = 0
        for name, proficiency, level in MANUAL_SKILLS:
            key = clean_name(name).lower()
            existing = await db.execute(select(Skill).where(Skill.name_key == key))
            if existing.scalar_one_or_none():
                continue
            db.add(Skill(
                name=clean_name(name),
                name_key=key,
                category=guess_category(name),
                proficiency=proficiency,
                level=level,
                sources=[{"type": SkillSourceType.MANUAL.value, "reference_id": None}],
            ))
            created += 1
        await db.flush()
        print(f"  Created {created} manual skills")

        # ── Projects ───────────────────────────────────────
        existing = await db.execute(select(Project).limit(1))
        if existing.scalar_one_or_none():
            print("  Projects already exist, skipping...")
        else:
            for i, data in enumerate(PROJECTS):
                db.add(Project(order=i, skills=[], **data))
            await db.flush()
            print(f"  Created {len(PROJECTS)} projects")

        # ── Certifications ─────────────────────────────────
        existing = await db.execute(select(Certification).limit(1))
        if existing.scalar_one_or_none():
            print("  Certifications already exist, skipping...")
        else:
            for i, data in enumerate(CERTIFICATIONS):
                db.add(Certification(order=i, **data))
            await db.flush()
            print(f"  Created {len(CERTIFICATIONS)} certifications")

        # ── Education ──────────────────────────────────────
        existing = await db.execute(select(Education).limit(1))
        if existing.scalar_one_or_none():
            print("  Education entries already exist, skipping...")
        else:
            for i, data in enumerate(EDUCATION):
                db.add(Education(order=i, **data))
            await db.flush()
            print(f"  Created {len(EDUCATION)} education entries")

        await db.commit()

        # ── Skill graph ────────────────────────────────────
        # Sync creates skills and sources; the sweep then applies the
        # visibility rule (the inactive project's skills end up hidden).
        sync_service = SkillSyncService()
        result = await sync_service.sync_all_entities(db)
        print(f"  Synced skills: {result.total_skills} total")
        cleanup = await sync_service.cleanup_orphaned_references(db)
        print(f"  Visibility: {cleanup.deactivated_skills} skills hidden")

    token = create_admin_token()
    print()
    print("Seed complete!")
    print(f"  Admin token: {token}")


if __name__ == "__main__":
    asyncio.run(seed())
