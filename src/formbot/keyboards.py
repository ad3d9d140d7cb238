from __future__ import annotations
from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder
from .capture import CaptureState, CategorizeCapture, ClozeCapture, ComprehensionCapture
from .i18n import t

# callback data: cat:<pos>:<option>:<category> | blank:<pos>:<blank> | sel:<pos>:<sub>:<option>
#                nav:prev | nav:next | submit

def _nav_row(pos: int, total: int, ui_lang: str) -> list[InlineKeyboardButton]:
    row = []
    if pos > 0:
        row.append(InlineKeyboardButton(text=t("btn_prev", ui_lang), callback_data="nav:prev"))
    if pos < total - 1:
        row.append(InlineKeyboardButton(text=t("btn_next", ui_lang), callback_data="nav:next"))
    else:
        row.append(InlineKeyboardButton(text=t("btn_submit", ui_lang), callback_data="submit"))
    return row

def kb_categorize(pos: int, total: int, state: CategorizeCapture, ui_lang: str) -> InlineKeyboardMarkup:
    b = InlineKeyboardBuilder()
    for oi, option in enumerate(state.options):
        for ci, (category, placed) in enumerate(state.assigned):
            mark = "✅ " if option in placed else ""
            b.button(text=f"{mark}{option} → {category}", callback_data=f"cat:{pos}:{oi}:{ci}")
    b.adjust(max(len(state.assigned), 1))
    b.row(*_nav_row(pos, total, ui_lang))
    return b.as_markup()

def kb_cloze(pos: int, total: int, state: ClozeCapture, active_blank: int, ui_lang: str) -> InlineKeyboardMarkup:
    b = InlineKeyboardBuilder()
    for i in range(len(state.answers)):
        mark = "▶ " if i == active_blank else ""
        b.button(text=mark + t("btn_blank", ui_lang, n=i + 1), callback_data=f"blank:{pos}:{i}")
    b.adjust(4)
    b.row(*_nav_row(pos, total, ui_lang))
    return b.as_markup()

def kb_comprehension(pos: int, total: int, state: ComprehensionCapture, ui_lang: str) -> InlineKeyboardMarkup:
    b = InlineKeyboardBuilder()
    for si, (prompt, options) in enumerate(state.choices):
        chosen = state.selection(prompt)
        for oi, option in enumerate(options):
            mark = "✅ " if option == chosen else ""
            b.button(text=f"{mark}{si + 1}. {option}", callback_data=f"sel:{pos}:{si}:{oi}")
    b.adjust(2)
    b.row(*_nav_row(pos, total, ui_lang))
    return b.as_markup()

def kb_for(pos: int, total: int, state: CaptureState, ui_lang: str, *, active_blank: int = 0) -> InlineKeyboardMarkup:
    if isinstance(state, CategorizeCapture):
        return kb_categorize(pos, total, state, ui_lang)
    if isinstance(state, ClozeCapture):
        return kb_cloze(pos, total, state, active_blank, ui_lang)
    if isinstance(state, ComprehensionCapture):
        return kb_comprehension(pos, total, state, ui_lang)
    raise TypeError(f"not a capture state: {type(state).__name__}")

def kb_nav_only(pos: int, total: int, ui_lang: str) -> InlineKeyboardMarkup:
    b = InlineKeyboardBuilder()
    b.row(*_nav_row(pos, total, ui_lang))
    return b.as_markup()
