from __future__ import annotations
import datetime as dt
from sqlalchemy import String, Integer, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from .db import Base

UTC = dt.timezone.utc
def utcnow() -> dt.datetime:
    return dt.datetime.now(tz=UTC)

class FormRecord(Base):
    __tablename__ = "forms"
    id: Mapped[str] = mapped_column(String(32), primary_key=True)  # uuid4 hex, issued on first save
    title: Mapped[str] = mapped_column(Text)
    question_count: Mapped[int] = mapped_column(Integer, default=0)
    form_json: Mapped[str] = mapped_column(Text)  # wire-shaped Form resource without id
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

class ResponseRecord(Base):
    __tablename__ = "responses"
    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    form_id: Mapped[str] = mapped_column(String(32), index=True)
    answers_json: Mapped[str] = mapped_column(Text)  # {"<position>": answer}
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

class RespondentState(Base):
    """One in-progress fill-out per Telegram user; dropped on submit or /cancel."""
    __tablename__ = "respondent_state"
    tg_user_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    form_id: Mapped[str] = mapped_column(String(32), ForeignKey("forms.id"))
    cursor: Mapped[int] = mapped_column(Integer, default=0)          # question position on screen
    active_blank: Mapped[int] = mapped_column(Integer, default=0)    # cloze blank the next text message fills
    capture_json: Mapped[str] = mapped_column(Text, default="[]")    # JSON list, one capture state per question
    started_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (Index("ix_respondent_form", "form_id"),)
