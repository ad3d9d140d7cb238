from __future__ import annotations

import datetime as dt
import json
import logging
import secrets
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .capture import ResponseDocument
from .errors import NotFound, TransportFailure, ValidationError
from .models import FormRecord, RespondentState, ResponseRecord
from .variants import Form, form_from_dict, form_to_dict

logger = logging.getLogger(__name__)

# Direct pass-through to the document store: single-document creates, no retries, no cache.


@dataclass(frozen=True)
class FormSummary:
    id: str
    title: str
    question_count: int
    created_at: dt.datetime


def _new_id() -> str:
    return secrets.token_hex(16)


@asynccontextmanager
async def _storage_op(s: AsyncSession, op: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.warning("gateway_failed op=%s err=%s", op, exc)
        try:
            await s.rollback()
        except SQLAlchemyError:
            logger.exception("gateway_rollback_failed op=%s", op)
        raise TransportFailure(op, exc) from exc


async def save_form(s: AsyncSession, form: Form) -> str:
    if not (form.title or "").strip():
        raise ValidationError("form title is required")
    form_id = _new_id()
    payload = form_to_dict(form)
    async with _storage_op(s, "save_form"):
        s.add(
            FormRecord(
                id=form_id,
                title=form.title,
                question_count=len(form.questions),
                form_json=json.dumps(payload, ensure_ascii=False),
            )
        )
        await s.commit()
    logger.info("form_saved form_id=%s questions=%s", form_id, len(form.questions))
    return form_id


async def load_form(s: AsyncSession, form_id: str) -> Form:
    async with _storage_op(s, "load_form"):
        row = await s.get(FormRecord, form_id) if form_id else None
    if row is None:
        raise NotFound("form", form_id)
    return form_from_dict(json.loads(row.form_json))


async def list_forms(s: AsyncSession, *, limit: int = 50) -> list[FormSummary]:
    async with _storage_op(s, "list_forms"):
        rows = (
            await s.execute(
                select(FormRecord).order_by(FormRecord.created_at.desc(), FormRecord.id).limit(limit)
            )
        ).scalars().all()
    return [
        FormSummary(id=r.id, title=r.title, question_count=r.question_count, created_at=r.created_at)
        for r in rows
    ]


async def save_response(s: AsyncSession, document: ResponseDocument) -> str:
    if not document.form_id:
        raise ValidationError("response needs a formId")
    if not isinstance(document.answers, dict):
        raise ValidationError("response answers must be a mapping")
    response_id = _new_id()
    payload = document.to_dict()
    async with _storage_op(s, "save_response"):
        s.add(
            ResponseRecord(
                id=response_id,
                form_id=document.form_id,
                answers_json=json.dumps(payload["answers"], ensure_ascii=False),
            )
        )
        await s.commit()
    logger.info(
        "response_saved response_id=%s form_id=%s answers=%s",
        response_id,
        document.form_id,
        len(document.answers),
    )
    return response_id


async def load_response(s: AsyncSession, response_id: str) -> ResponseDocument:
    async with _storage_op(s, "load_response"):
        row = await s.get(ResponseRecord, response_id) if response_id else None
    if row is None:
        raise NotFound("response", response_id)
    return ResponseDocument.from_dict({"formId": row.form_id, "answers": json.loads(row.answers_json)})


# ---------------- respondent sessions ----------------

async def load_respondent(s: AsyncSession, user_id: int) -> RespondentState | None:
    async with _storage_op(s, "load_respondent"):
        return await s.get(RespondentState, user_id)


async def store_respondent(s: AsyncSession, st: RespondentState) -> None:
    async with _storage_op(s, "store_respondent"):
        s.add(st)
        await s.commit()


async def drop_respondent(s: AsyncSession, st: RespondentState) -> None:
    async with _storage_op(s, "drop_respondent"):
        await s.delete(st)
        await s.commit()
