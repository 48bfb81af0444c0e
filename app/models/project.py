"""
Project model - portfolio projects.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy import String, Boolean, Integer, Text, Date
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import ActiveMixin, BaseModel, JSONType


class Project(BaseModel, ActiveMixin):
    """
    Portfolio project.

    `technologies` holds free-text names and is the ground truth for the
    project's skills. `skills` mirrors it with resolved Skill ids (as strings)
    and is rewritten by skill sync.
    """

    __tablename__ = "projects"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), default="personal")

    technologies: Mapped[List[str]] = mapped_column(JSONType, default=list)
    skills: Mapped[List[str]] = mapped_column(JSONType, default=list)

    github_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    live_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    featured: Mapped[bool] = mapped_column(Boolean, default=False)
    order: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<Project {self.title}>"
