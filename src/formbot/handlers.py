from __future__ import annotations
import json
import logging

from aiogram import Dispatcher, F
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .capture import (
    CaptureState,
    CategorizeCapture,
    ClozeCapture,
    ComprehensionCapture,
    assign,
    capture_from_dict,
    capture_to_dict,
    select,
    set_answer,
    start_form_capture,
    submit,
)
from .config import Settings
from .errors import NotFound, TransportFailure, ValidationError
from .gateway import (
    drop_respondent,
    list_forms,
    load_form,
    load_respondent,
    save_response,
    store_respondent,
)
from .i18n import t
from .keyboards import kb_for, kb_nav_only
from .models import RespondentState, utcnow
from .render import render_intro, render_question
from .variants import Form

logger = logging.getLogger(__name__)

FORM_DEEP_LINK_PREFIX = "FORM_"

# ---------------- helpers ----------------
def _load_states(st: RespondentState) -> list[CaptureState]:
    return [capture_from_dict(raw) for raw in json.loads(st.capture_json or "[]")]

def _store_states(st: RespondentState, states: list[CaptureState]) -> None:
    st.capture_json = json.dumps([capture_to_dict(x) for x in states], ensure_ascii=False)
    st.updated_at = utcnow()

def _parse_ints(data: str, count: int) -> list[int] | None:
    # "<prefix>:<int>:<int>..." -> ints, None when malformed
    parts = (data or "").split(":")[1:]
    if len(parts) != count:
        return None
    try:
        return [int(p) for p in parts]
    except ValueError:
        return None

async def _ask(target: Message, form: Form, st: RespondentState, states: list[CaptureState], ui_lang: str) -> None:
    total = len(form.questions)
    if not total:
        await target.answer(**render_intro(form, ui_lang).as_kwargs(), reply_markup=kb_nav_only(0, 0, ui_lang))
        return
    pos = min(max(st.cursor, 0), total - 1)
    state = states[pos]
    content = render_question(form, pos, state, ui_lang, active_blank=st.active_blank)
    await target.answer(
        **content.as_kwargs(),
        reply_markup=kb_for(pos, total, state, ui_lang, active_blank=st.active_blank),
    )

async def _respondent(s: AsyncSession, user_id: int) -> tuple[RespondentState, Form] | None:
    """Active fill-out of ``user_id`` with its form; raises TransportFailure when storage is down."""
    st = await load_respondent(s, user_id)
    if st is None:
        return None
    try:
        form = await load_form(s, st.form_id)
    except NotFound:
        logger.warning("respondent_form_missing user_id=%s form_id=%s", user_id, st.form_id)
        await drop_respondent(s, st)
        return None
    return st, form

async def _storage_failed(c: CallbackQuery, ui_lang: str) -> None:
    await c.answer()
    await c.message.answer(t("storage_failed", ui_lang))

async def start_respondent(
    target: Message,
    s: AsyncSession,
    *,
    user_id: int,
    form_id: str,
    ui_lang: str,
) -> bool:
    """Fetch the form and open a fresh capture session for ``user_id``; any earlier one is replaced."""
    try:
        form = await load_form(s, form_id)
    except NotFound:
        await target.answer(t("form_not_found", ui_lang))
        return False
    except TransportFailure:
        await target.answer(t("load_failed", ui_lang))
        return False

    states = start_form_capture(form)
    try:
        st = await load_respondent(s, user_id)
        if st is None:
            st = RespondentState(tg_user_id=user_id, form_id=form_id)
        st.form_id = form_id
        st.cursor = 0
        st.active_blank = 0
        st.started_at = utcnow()
        _store_states(st, states)
        await store_respondent(s, st)
    except TransportFailure:
        await target.answer(t("storage_failed", ui_lang))
        return False
    logger.info(
        "respondent_started user_id=%s form_id=%s questions=%s",
        user_id,
        form_id,
        len(form.questions),
    )
    if form.questions:
        await target.answer(**render_intro(form, ui_lang).as_kwargs())
    await _ask(target, form, st, states, ui_lang)
    return True

# ---------------- registration ----------------
def register_handlers(dp: Dispatcher, *, settings: Settings, sessionmaker: async_sessionmaker[AsyncSession]):
    lang = settings.ui_lang

    @dp.message(CommandStart())
    async def on_start(m: Message, command: CommandObject):
        arg = (command.args or "").strip()
        if arg.startswith(FORM_DEEP_LINK_PREFIX):
            async with sessionmaker() as s:
                await start_respondent(
                    m, s, user_id=m.from_user.id, form_id=arg[len(FORM_DEEP_LINK_PREFIX):], ui_lang=lang
                )
            return
        await m.answer(t("welcome", lang))

    @dp.message(Command("form"))
    async def on_form(m: Message, command: CommandObject):
        form_id = (command.args or "").strip()
        if not form_id:
            await m.answer(t("welcome", lang))
            return
        async with sessionmaker() as s:
            await start_respondent(m, s, user_id=m.from_user.id, form_id=form_id, ui_lang=lang)

    @dp.message(Command("forms"))
    async def on_forms(m: Message):
        if m.from_user.id not in settings.author_ids:
            await m.answer("Forbidden")
            return
        async with sessionmaker() as s:
            try:
                forms = await list_forms(s)
            except TransportFailure:
                await m.answer(t("load_failed", lang))
                return
        if not forms:
            await m.answer(t("forms_empty", lang))
            return
        lines = [t("forms_header", lang)]
        lines.extend(f"{f.id}: {f.title} ({f.question_count})" for f in forms)
        await m.answer("\n".join(lines))

    @dp.message(Command("cancel"))
    async def on_cancel(m: Message):
        async with sessionmaker() as s:
            try:
                st = await load_respondent(s, m.from_user.id)
                if st is None:
                    await m.answer(t("no_active_form", lang))
                    return
                await drop_respondent(s, st)
            except TransportFailure:
                await m.answer(t("storage_failed", lang))
                return
        logger.info("respondent_cancelled user_id=%s", m.from_user.id)
        await m.answer(t("cancelled", lang))

    # ---------- categorize: move an option into a category ----------
    @dp.callback_query(F.data.startswith("cat:"))
    async def on_categorize(c: CallbackQuery):
        ints = _parse_ints(c.data, 3)
        async with sessionmaker() as s:
            try:
                found = await _respondent(s, c.from_user.id)
                if not found or ints is None:
                    await c.answer(t("no_active_form", lang) if not found else None)
                    return
                st, form = found
                pos, oi, ci = ints
                states = _load_states(st)
                if not 0 <= pos < len(states) or not isinstance(states[pos], CategorizeCapture):
                    await c.answer()
                    return
                state = states[pos]
                if not (0 <= oi < len(state.options) and 0 <= ci < len(state.assigned)):
                    await c.answer()
                    return
                states[pos] = assign(state, state.options[oi], state.assigned[ci][0])
                st.cursor = pos
                _store_states(st, states)
                await store_respondent(s, st)
            except TransportFailure:
                await _storage_failed(c, lang)
                return
            await c.answer()
            await _ask(c.message, form, st, states, lang)

    # ---------- cloze: choose which blank the next text message fills ----------
    @dp.callback_query(F.data.startswith("blank:"))
    async def on_blank(c: CallbackQuery):
        ints = _parse_ints(c.data, 2)
        async with sessionmaker() as s:
            try:
                found = await _respondent(s, c.from_user.id)
                if not found or ints is None:
                    await c.answer(t("no_active_form", lang) if not found else None)
                    return
                st, form = found
                pos, blank = ints
                states = _load_states(st)
                if not 0 <= pos < len(states) or not isinstance(states[pos], ClozeCapture):
                    await c.answer()
                    return
                if not 0 <= blank < len(states[pos].answers):
                    await c.answer()
                    return
                st.cursor = pos
                st.active_blank = blank
                st.updated_at = utcnow()
                await store_respondent(s, st)
            except TransportFailure:
                await _storage_failed(c, lang)
                return
            await c.answer()
            await _ask(c.message, form, st, states, lang)

    # ---------- comprehension: radio selection per sub-question ----------
    @dp.callback_query(F.data.startswith("sel:"))
    async def on_select(c: CallbackQuery):
        ints = _parse_ints(c.data, 3)
        async with sessionmaker() as s:
            try:
                found = await _respondent(s, c.from_user.id)
                if not found or ints is None:
                    await c.answer(t("no_active_form", lang) if not found else None)
                    return
                st, form = found
                pos, si, oi = ints
                states = _load_states(st)
                if not 0 <= pos < len(states) or not isinstance(states[pos], ComprehensionCapture):
                    await c.answer()
                    return
                state = states[pos]
                if not 0 <= si < len(state.choices):
                    await c.answer()
                    return
                prompt, options = state.choices[si]
                if not 0 <= oi < len(options):
                    await c.answer()
                    return
                states[pos] = select(state, prompt, options[oi])
                st.cursor = pos
                _store_states(st, states)
                await store_respondent(s, st)
            except TransportFailure:
                await _storage_failed(c, lang)
                return
            await c.answer()
            await _ask(c.message, form, st, states, lang)

    @dp.callback_query(F.data.in_({"nav:prev", "nav:next"}))
    async def on_nav(c: CallbackQuery):
        step = -1 if c.data == "nav:prev" else 1
        async with sessionmaker() as s:
            try:
                found = await _respondent(s, c.from_user.id)
                if not found:
                    await c.answer(t("no_active_form", lang))
                    return
                st, form = found
                total = len(form.questions)
                st.cursor = min(max(st.cursor + step, 0), max(total - 1, 0))
                st.active_blank = 0
                st.updated_at = utcnow()
                await store_respondent(s, st)
            except TransportFailure:
                await _storage_failed(c, lang)
                return
            await c.answer()
            await _ask(c.message, form, st, _load_states(st), lang)

    @dp.callback_query(F.data == "submit")
    async def on_submit(c: CallbackQuery):
        async with sessionmaker() as s:
            try:
                st = await load_respondent(s, c.from_user.id)
            except TransportFailure:
                await _storage_failed(c, lang)
                return
            if st is None:
                await c.answer(t("no_active_form", lang))
                return
            document = submit(st.form_id, _load_states(st))
            try:
                response_id = await save_response(s, document)
            except (TransportFailure, ValidationError):
                # respondent state stays, so pressing Submit again retries by hand
                await c.answer()
                await c.message.answer(t("submit_failed", lang))
                return
            try:
                await drop_respondent(s, st)
            except TransportFailure:
                # the response is stored; a leftover row only means a later submit would store it twice
                logger.warning("respondent_drop_failed user_id=%s response_id=%s", c.from_user.id, response_id)
        logger.info(
            "respondent_submitted user_id=%s form_id=%s response_id=%s",
            c.from_user.id,
            document.form_id,
            response_id,
        )
        await c.answer()
        await c.message.answer(t("submitted", lang))

    # ---------- anything else with buttons: stale or foreign keyboards ----------
    @dp.callback_query()
    async def on_unknown_callback(c: CallbackQuery):
        logger.info("callback_ignored user_id=%s data=%r", c.from_user.id, c.data)
        await c.answer()

    # ---------- free text: cloze answers ----------
    @dp.message(F.text)
    async def on_text(m: Message):
        async with sessionmaker() as s:
            try:
                found = await _respondent(s, m.from_user.id)
                if not found:
                    await m.answer(t("no_active_form", lang))
                    return
                st, form = found
                states = _load_states(st)
                pos = st.cursor
                if not 0 <= pos < len(states) or not isinstance(states[pos], ClozeCapture):
                    await m.answer(t("use_buttons", lang))
                    return
                state = states[pos]
                if not state.answers:
                    await m.answer(t("no_blanks", lang))
                    return
                blank = min(max(st.active_blank, 0), len(state.answers) - 1)
                states[pos] = set_answer(state, blank, m.text.strip())
                st.active_blank = min(blank + 1, len(state.answers) - 1)
                _store_states(st, states)
                await store_respondent(s, st)
            except TransportFailure:
                await m.answer(t("storage_failed", lang))
                return
            await _ask(m, form, st, states, lang)
