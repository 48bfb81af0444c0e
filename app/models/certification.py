"""
Certification model - certificates and courses.
"""
from datetime import date
from typing import Any, Dict, List, Optional
from sqlalchemy import String, Integer, Date
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import ActiveMixin, BaseModel, JSONType


class Certification(BaseModel, ActiveMixin):
    """
    Certification entity.

    Skills are embedded objects: {"name", "proficiency", "verified"}.
    The name is the join key; rows imported from older data may also
    carry an "id" key.
    """

    __tablename__ = "certifications"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    issuer: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    credential_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    credential_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    issue_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    skills: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, default=list)

    order: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<Certification {self.title}>"
