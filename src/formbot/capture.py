from __future__ import annotations

import copy
from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence, Union

from .errors import OutOfRange
from .variants import (
    CATEGORIZE,
    CLOZE,
    COMPREHENSION,
    Categorize,
    Cloze,
    Comprehension,
    Form,
    Question,
    count_blanks,
)

# Respondent-side state for one question. Each state starts empty (there is no
# resume of earlier answers) and changes only through assign / set_answer / select.


@dataclass(frozen=True)
class CategorizeCapture:
    options: tuple[str, ...]
    assigned: tuple[tuple[str, tuple[str, ...]], ...]  # (category, options in drop order)

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(cat for cat, _ in self.assigned)

    def in_category(self, category: str) -> tuple[str, ...]:
        for cat, opts in self.assigned:
            if cat == category:
                return opts
        raise OutOfRange("category", category)


@dataclass(frozen=True)
class ClozeCapture:
    answers: tuple[str, ...]


@dataclass(frozen=True)
class ComprehensionCapture:
    choices: tuple[tuple[str, tuple[str, ...]], ...]  # (sub-question prompt, allowed options)
    selected: tuple[tuple[str, str | None], ...]

    def selection(self, prompt: str) -> str | None:
        for p, opt in self.selected:
            if p == prompt:
                return opt
        raise OutOfRange("sub-question", prompt)


CaptureState = Union[CategorizeCapture, ClozeCapture, ComprehensionCapture]


@dataclass(frozen=True)
class ResponseDocument:
    form_id: str
    answers: dict[int, Any]  # question position -> variant-shaped answer

    def to_dict(self) -> dict[str, Any]:
        return {
            "formId": self.form_id,
            "answers": {str(pos): copy.deepcopy(ans) for pos, ans in sorted(self.answers.items())},
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ResponseDocument":
        answers = raw.get("answers") or {}
        return cls(
            form_id=str(raw.get("formId") or ""),
            answers={int(pos): ans for pos, ans in answers.items()},
        )


def _unique(items: Sequence[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return tuple(out)


def start_capture(question: Question) -> CaptureState:
    if isinstance(question, Categorize):
        return CategorizeCapture(
            options=tuple(question.options),
            assigned=tuple((cat, ()) for cat in _unique(question.categories)),
        )
    if isinstance(question, Cloze):
        return ClozeCapture(answers=("",) * count_blanks(question.cloze_text))
    if isinstance(question, Comprehension):
        # sub-questions sharing a prompt share one selection
        merged: dict[str, list[str]] = {}
        for sub in question.sub_questions:
            merged.setdefault(sub.prompt, []).extend(sub.options)
        return ComprehensionCapture(
            choices=tuple((prompt, _unique(opts)) for prompt, opts in merged.items()),
            selected=tuple((prompt, None) for prompt in merged),
        )
    raise TypeError(f"not a question: {type(question).__name__}")


def start_form_capture(form: Form) -> list[CaptureState]:
    return [start_capture(q) for q in form.questions]


# ---------------- categorize ----------------

def assign(state: CategorizeCapture, option: str, category: str) -> CategorizeCapture:
    """Move ``option`` into ``category``, taking it out of whichever category held it."""
    if option not in state.options:
        raise OutOfRange("option", option)
    if category not in state.categories:
        raise OutOfRange("category", category)
    assigned = []
    for cat, opts in state.assigned:
        kept = tuple(o for o in opts if o != option)
        if cat == category:
            kept = kept + (option,)
        assigned.append((cat, kept))
    return replace(state, assigned=tuple(assigned))


def available_options(state: CategorizeCapture) -> list[str]:
    placed = {o for _, opts in state.assigned for o in opts}
    return [o for o in state.options if o not in placed]


# ---------------- cloze ----------------

def set_answer(state: ClozeCapture, blank_index: int, text: str) -> ClozeCapture:
    if not isinstance(blank_index, int) or not 0 <= blank_index < len(state.answers):
        raise OutOfRange("blank", blank_index, len(state.answers))
    answers = state.answers[:blank_index] + (text,) + state.answers[blank_index + 1:]
    return replace(state, answers=answers)


# ---------------- comprehension ----------------

def select(state: ComprehensionCapture, prompt: str, option: str) -> ComprehensionCapture:
    """Radio semantics: the new option replaces any earlier selection for ``prompt``."""
    allowed = dict(state.choices).get(prompt)
    if allowed is None:
        raise OutOfRange("sub-question", prompt)
    if option not in allowed:
        raise OutOfRange("option", option)
    selected = tuple((p, option if p == prompt else cur) for p, cur in state.selected)
    return replace(state, selected=selected)


# ---------------- export ----------------

def progress(state: CaptureState) -> tuple[int, int]:
    """(answered, total) slots for one question."""
    if isinstance(state, CategorizeCapture):
        return len(state.options) - len(available_options(state)), len(state.options)
    if isinstance(state, ClozeCapture):
        return sum(1 for a in state.answers if a.strip()), len(state.answers)
    if isinstance(state, ComprehensionCapture):
        return sum(1 for _, opt in state.selected if opt is not None), len(state.selected)
    raise TypeError(f"not a capture state: {type(state).__name__}")


def export_answer(state: CaptureState) -> Any:
    if isinstance(state, CategorizeCapture):
        return {cat: list(opts) for cat, opts in state.assigned}
    if isinstance(state, ClozeCapture):
        return list(state.answers)
    if isinstance(state, ComprehensionCapture):
        return {prompt: opt for prompt, opt in state.selected}
    raise TypeError(f"not a capture state: {type(state).__name__}")


def aggregate(form_id: str, answers: Mapping[int, Any] | Sequence[Any]) -> ResponseDocument:
    """Assemble the submitted document; positions are the question indices of the form."""
    if isinstance(answers, Mapping):
        by_pos = {int(pos): copy.deepcopy(ans) for pos, ans in answers.items()}
    else:
        by_pos = {pos: copy.deepcopy(ans) for pos, ans in enumerate(answers)}
    return ResponseDocument(form_id=form_id, answers=by_pos)


def submit(form_id: str, states: Sequence[CaptureState]) -> ResponseDocument:
    return aggregate(form_id, [export_answer(st) for st in states])


# ---------------- serialization ----------------

def capture_to_dict(state: CaptureState) -> dict[str, Any]:
    if isinstance(state, CategorizeCapture):
        return {
            "type": CATEGORIZE,
            "options": list(state.options),
            "assigned": [[cat, list(opts)] for cat, opts in state.assigned],
        }
    if isinstance(state, ClozeCapture):
        return {"type": CLOZE, "answers": list(state.answers)}
    if isinstance(state, ComprehensionCapture):
        return {
            "type": COMPREHENSION,
            "choices": [[prompt, list(opts)] for prompt, opts in state.choices],
            "selected": [[prompt, opt] for prompt, opt in state.selected],
        }
    raise TypeError(f"not a capture state: {type(state).__name__}")


def capture_from_dict(raw: dict[str, Any]) -> CaptureState:
    kind = raw.get("type")
    if kind == CATEGORIZE:
        return CategorizeCapture(
            options=tuple(raw.get("options") or ()),
            assigned=tuple((str(cat), tuple(opts)) for cat, opts in raw.get("assigned") or ()),
        )
    if kind == CLOZE:
        return ClozeCapture(answers=tuple(raw.get("answers") or ()))
    if kind == COMPREHENSION:
        return ComprehensionCapture(
            choices=tuple((str(p), tuple(opts)) for p, opts in raw.get("choices") or ()),
            selected=tuple((str(p), opt) for p, opt in raw.get("selected") or ()),
        )
    raise ValueError(f"unknown capture type: {kind!r}")
