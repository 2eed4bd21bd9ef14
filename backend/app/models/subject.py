from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Subject(Base):
    __tablename__ = "subjects"

    code: Mapped[str] = mapped_column(String(50), primary_key=True)
    school_id: Mapped[str] = mapped_column(String(36), ForeignKey("schools.id"), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    subject_group: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
