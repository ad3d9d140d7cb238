from __future__ import annotations

from aiogram.utils.formatting import Bold, Code, Italic, Text

from .capture import (
    CaptureState,
    CategorizeCapture,
    ClozeCapture,
    ComprehensionCapture,
    available_options,
    progress,
)
from .i18n import t
from .variants import Categorize, Cloze, Comprehension, Form, Question, split_cloze

# Plain text + entities (no parse_mode), so author-written text never needs escaping.


def render_intro(form: Form, lang: str) -> Text:
    parts: list[object] = [Bold(form.title)]
    if form.header_image:
        parts.extend(["\n", form.header_image])
    parts.extend(["\n", t("questions_count", lang, total=len(form.questions))])
    return Text(*parts)


def _header(question: Question, pos: int, total: int, state: CaptureState, lang: str) -> list[object]:
    done, slots = progress(state)
    parts: list[object] = [
        Bold(t("question_header", lang, n=pos + 1, total=total)),
        f" ({question.type}, {done}/{slots})",
        "\n",
        question.prompt,
    ]
    if question.image:
        parts.extend(["\n", question.image])
    return parts


def _categorize_body(state: CategorizeCapture, lang: str) -> list[object]:
    left = available_options(state)
    parts: list[object] = ["\n\n", Bold(t("available", lang)), " "]
    parts.append(", ".join(left) if left else Italic(t("nothing_left", lang)))
    for cat, opts in state.assigned:
        parts.extend(["\n", Bold(f"{cat}:"), " ", ", ".join(opts) if opts else "-"])
    return parts


def _cloze_body(question: Cloze, state: ClozeCapture, lang: str, active_blank: int) -> list[object]:
    pieces = split_cloze(question.cloze_text)
    parts: list[object] = ["\n\n"]
    for i, piece in enumerate(pieces):
        parts.append(piece)
        if i < len(pieces) - 1:
            answer = state.answers[i] if i < len(state.answers) else ""
            marker = "▶" if i == active_blank else ""
            parts.append(Code(f"{marker}[{i + 1}] {answer or '____'}"))
    if state.answers:
        blank = min(max(active_blank, 0), len(state.answers) - 1)
        parts.extend(["\n\n", Italic(t("blank_prompt", lang, n=blank + 1))])
    else:
        parts.extend(["\n\n", Italic(t("no_blanks", lang))])
    return parts


def _comprehension_body(question: Comprehension, state: ComprehensionCapture, lang: str) -> list[object]:
    parts: list[object] = ["\n\n", question.comprehension_text]
    for i, (prompt, _) in enumerate(state.choices, start=1):
        chosen = state.selection(prompt)
        parts.extend(["\n\n", Bold(f"{i}. {prompt}"), "\n"])
        parts.append(Code(chosen) if chosen is not None else Italic(t("not_selected", lang)))
    return parts


def render_question(
    form: Form,
    pos: int,
    state: CaptureState,
    lang: str,
    *,
    active_blank: int = 0,
) -> Text:
    question = form.questions[pos]
    parts = _header(question, pos, len(form.questions), state, lang)
    if isinstance(question, Categorize) and isinstance(state, CategorizeCapture):
        parts.extend(_categorize_body(state, lang))
    elif isinstance(question, Cloze) and isinstance(state, ClozeCapture):
        parts.extend(_cloze_body(question, state, lang, active_blank))
    elif isinstance(question, Comprehension) and isinstance(state, ComprehensionCapture):
        parts.extend(_comprehension_body(question, state, lang))
    else:
        raise TypeError(f"capture state {type(state).__name__} does not match {question.type}")
    return Text(*parts)
