"""
Education model - degrees and academic entries.
"""
from datetime import date
from typing import Any, List, Optional
from sqlalchemy import String, Integer, Date, Float
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import ActiveMixin, BaseModel, JSONType


class Education(BaseModel, ActiveMixin):
    """
    Education entity.

    `skills` tolerates every shape ever written to it: plain names,
    Skill id strings, and {"name", ...} / {"id", ...} objects.
    """

    __tablename__ = "education"

    degree: Mapped[str] = mapped_column(String(255), nullable=False)
    field: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    institution: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    gpa: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    skills: Mapped[List[Any]] = mapped_column(JSONType, default=list)

    order: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<Education {self.degree}>"
