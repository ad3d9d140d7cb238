from __future__ import annotations

from dataclasses import replace
from typing import Sequence, TypeVar

from .errors import OutOfRange
from .variants import (
    Categorize,
    Cloze,
    Comprehension,
    Form,
    Question,
    SubQuestion,
    coerce_correct_answer,
    count_blanks,
    create_question,
    default_sub_question,
    fit_answers,
)

# Every edit returns a new value; nothing here mutates its input.

T = TypeVar("T")
Q = TypeVar("Q", Categorize, Cloze, Comprehension)


def _check_index(what: str, items: Sequence[object], index: int) -> None:
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(items):
        raise OutOfRange(what, index, len(items))


def _set_at(items: tuple[T, ...], index: int, value: T, what: str) -> tuple[T, ...]:
    _check_index(what, items, index)
    return items[:index] + (value,) + items[index + 1:]


def _drop_at(items: tuple[T, ...], index: int, what: str) -> tuple[T, ...]:
    _check_index(what, items, index)
    return items[:index] + items[index + 1:]


def _fresh_label(prefix: str, existing: Sequence[str] | set[str], start: int = 1) -> str:
    # first "<prefix> N" from start that is not already taken, so remove-then-add never duplicates
    n = start
    while f"{prefix} {n}" in existing:
        n += 1
    return f"{prefix} {n}"


# ---------------- form ----------------

def new_form(title: str = "", header_image: str | None = None) -> Form:
    return Form(title=title, header_image=header_image)


def set_title(form: Form, title: str) -> Form:
    return replace(form, title=title)


def set_header_image(form: Form, url: str | None) -> Form:
    return replace(form, header_image=url or None)


def add_question(form: Form, kind: str) -> Form:
    question = create_question(kind, form.next_key)
    return replace(form, questions=form.questions + (question,), next_key=form.next_key + 1)


def remove_question(form: Form, index: int) -> Form:
    return replace(form, questions=_drop_at(form.questions, index, "question"))


def replace_question(form: Form, index: int, question: Question) -> Form:
    """Positional replace; the caller hands in a value that already satisfies its variant's invariants."""
    return replace(form, questions=_set_at(form.questions, index, question, "question"))


def edit_prompt(question: Q, text: str) -> Q:
    return replace(question, prompt=text)


def edit_image(question: Q, url: str | None) -> Q:
    return replace(question, image=url or None)


# ---------------- categorize ----------------

def add_category(question: Categorize) -> Categorize:
    label = _fresh_label("Category", question.categories)
    return replace(question, categories=question.categories + (label,))


def edit_category(question: Categorize, index: int, text: str) -> Categorize:
    return replace(question, categories=_set_at(question.categories, index, text, "category"))


def remove_category(question: Categorize, index: int) -> Categorize:
    return replace(question, categories=_drop_at(question.categories, index, "category"))


def add_option(question: Categorize) -> Categorize:
    label = _fresh_label("Option", question.options)
    return replace(question, options=question.options + (label,))


def edit_option(question: Categorize, index: int, text: str) -> Categorize:
    return replace(question, options=_set_at(question.options, index, text, "option"))


def remove_option(question: Categorize, index: int) -> Categorize:
    return replace(question, options=_drop_at(question.options, index, "option"))


# ---------------- cloze ----------------

def edit_cloze_text(question: Cloze, text: str) -> Cloze:
    """Replace the sentence and resize ``answers`` to its blank count.

    Growing pads empty strings at the tail, shrinking truncates from the tail.
    Answers at retained indices are kept as they are, even when the blanks
    moved around inside the text.
    """
    return replace(question, cloze_text=text, answers=fit_answers(question.answers, count_blanks(text)))


def edit_cloze_answer(question: Cloze, blank_index: int, text: str) -> Cloze:
    return replace(question, answers=_set_at(question.answers, blank_index, text, "blank"))


# ---------------- comprehension ----------------

def edit_comprehension_text(question: Comprehension, text: str) -> Comprehension:
    return replace(question, comprehension_text=text)


def add_sub_question(question: Comprehension) -> Comprehension:
    taken = {s.prompt for s in question.sub_questions}
    label = _fresh_label("New Sub-Question", taken, start=len(question.sub_questions) + 1)
    sub = default_sub_question(label)
    return replace(question, sub_questions=question.sub_questions + (sub,))


def edit_sub_question(question: Comprehension, sub_index: int, updated: SubQuestion) -> Comprehension:
    """Replace one sub-question; a correct answer missing from the new options falls back to the first option."""
    _check_index("sub-question", question.sub_questions, sub_index)
    if not updated.options:
        raise ValueError("sub-question needs at least one option")
    updated = coerce_correct_answer(replace(updated, options=tuple(updated.options)))
    return replace(question, sub_questions=_set_at(question.sub_questions, sub_index, updated, "sub-question"))


def remove_sub_question(question: Comprehension, sub_index: int) -> Comprehension:
    return replace(question, sub_questions=_drop_at(question.sub_questions, sub_index, "sub-question"))


def _sub(question: Comprehension, sub_index: int) -> SubQuestion:
    _check_index("sub-question", question.sub_questions, sub_index)
    return question.sub_questions[sub_index]


def edit_sub_prompt(question: Comprehension, sub_index: int, text: str) -> Comprehension:
    sub = _sub(question, sub_index)
    return edit_sub_question(question, sub_index, replace(sub, prompt=text))


def add_sub_option(question: Comprehension, sub_index: int) -> Comprehension:
    sub = _sub(question, sub_index)
    label = _fresh_label("Option", sub.options)
    return edit_sub_question(question, sub_index, replace(sub, options=sub.options + (label,)))


def edit_sub_option(question: Comprehension, sub_index: int, option_index: int, text: str) -> Comprehension:
    sub = _sub(question, sub_index)
    options = _set_at(sub.options, option_index, text, "option")
    return edit_sub_question(question, sub_index, replace(sub, options=options))


def remove_sub_option(question: Comprehension, sub_index: int, option_index: int) -> Comprehension:
    sub = _sub(question, sub_index)
    options = _drop_at(sub.options, option_index, "option")
    if not options:
        raise ValueError("cannot remove the only option of a sub-question")
    return edit_sub_question(question, sub_index, replace(sub, options=options))


def set_correct_answer(question: Comprehension, sub_index: int, option: str) -> Comprehension:
    sub = _sub(question, sub_index)
    if option not in sub.options:
        raise ValueError(f"{option!r} is not an option of sub-question {sub_index}")
    return edit_sub_question(question, sub_index, replace(sub, correct_answer=option))
