from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

CATEGORIZE = "Categorize"
CLOZE = "Cloze"
COMPREHENSION = "Comprehension"
QUESTION_TYPES = (CATEGORIZE, CLOZE, COMPREHENSION)

BLANK = "_"


@dataclass(frozen=True)
class Categorize:
    type: ClassVar[str] = CATEGORIZE
    prompt: str
    categories: tuple[str, ...]
    options: tuple[str, ...]
    image: str | None = None
    key: int = 0


@dataclass(frozen=True)
class Cloze:
    type: ClassVar[str] = CLOZE
    prompt: str
    cloze_text: str
    answers: tuple[str, ...]  # one per blank, positional
    image: str | None = None
    key: int = 0


@dataclass(frozen=True)
class SubQuestion:
    prompt: str
    options: tuple[str, ...]
    correct_answer: str


@dataclass(frozen=True)
class Comprehension:
    type: ClassVar[str] = COMPREHENSION
    prompt: str
    comprehension_text: str
    sub_questions: tuple[SubQuestion, ...]
    image: str | None = None
    key: int = 0


Question = Union[Categorize, Cloze, Comprehension]

VARIANTS: dict[str, type] = {
    CATEGORIZE: Categorize,
    CLOZE: Cloze,
    COMPREHENSION: Comprehension,
}


@dataclass(frozen=True)
class Form:
    title: str = ""
    header_image: str | None = None
    questions: tuple[Question, ...] = ()
    # seed for the next question key; only grows, so keys are never reused within one Form value
    next_key: int = field(default=0, compare=False)


def count_blanks(text: str) -> int:
    return (text or "").count(BLANK)


def split_cloze(text: str) -> list[str]:
    """Text fragments around the blanks; a respondent gets ``len(parts) - 1`` inputs."""
    return (text or "").split(BLANK)


def fit_answers(answers: tuple[str, ...] | list[str], count: int) -> tuple[str, ...]:
    """Pad with empty strings or truncate from the tail so that ``len == count``."""
    answers = tuple(answers)
    if len(answers) < count:
        return answers + ("",) * (count - len(answers))
    return answers[:count]


def coerce_correct_answer(sub: SubQuestion) -> SubQuestion:
    if not sub.options:
        return sub
    if sub.correct_answer in sub.options:
        return sub
    return SubQuestion(prompt=sub.prompt, options=sub.options, correct_answer=sub.options[0])


def question_type(question: Question) -> str:
    if isinstance(question, (Categorize, Cloze, Comprehension)):
        return question.type
    raise TypeError(f"not a question: {type(question).__name__}")


def default_sub_question(prompt: str) -> SubQuestion:
    return SubQuestion(
        prompt=prompt,
        options=("Option 1", "Option 2"),
        correct_answer="Option 1",
    )


def create_question(kind: str, seed_index: int) -> Question:
    """Default-populated question of the given variant; invariants hold from creation."""
    if kind == CATEGORIZE:
        return Categorize(
            prompt="Drag the following items to their correct categories:",
            categories=("Category 1", "Category 2"),
            options=("Option 1", "Option 2"),
            key=seed_index,
        )
    if kind == CLOZE:
        return Cloze(
            prompt="Fill in the blanks:",
            cloze_text="Fill in the blanks: _ is a programming language.",
            answers=("",),
            key=seed_index,
        )
    if kind == COMPREHENSION:
        return Comprehension(
            prompt="Read the following passage:",
            comprehension_text="Once upon a time...",
            sub_questions=(
                SubQuestion(
                    prompt="What is the main idea of the passage?",
                    options=("Option A", "Option B"),
                    correct_answer="Option A",
                ),
            ),
            key=seed_index,
        )
    raise ValueError(f"unknown question type: {kind!r}")


# ---------------- wire codec ----------------

def _str_tuple(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, (list, tuple)):
        return tuple("" if x is None else str(x) for x in raw)
    return ()


def _opt_str(raw: Any) -> str | None:
    if raw is None or raw == "":
        return None
    return str(raw)


def _with_image(out: dict[str, Any], image: str | None) -> dict[str, Any]:
    if image:
        out["image"] = image
    return out


def sub_question_to_dict(sub: SubQuestion) -> dict[str, Any]:
    return {
        "prompt": sub.prompt,
        "options": list(sub.options),
        "correctAnswer": sub.correct_answer,
    }


def sub_question_from_dict(raw: dict[str, Any]) -> SubQuestion:
    # older documents used "question" for the sub-question text
    prompt = raw.get("prompt")
    if prompt is None:
        prompt = raw.get("question", "")
    options = _str_tuple(raw.get("options"))
    correct = raw.get("correctAnswer")
    sub = SubQuestion(
        prompt=str(prompt),
        options=options,
        correct_answer="" if correct is None else str(correct),
    )
    return coerce_correct_answer(sub)


def question_to_dict(question: Question) -> dict[str, Any]:
    if isinstance(question, Categorize):
        out = {
            "type": CATEGORIZE,
            "prompt": question.prompt,
            "categories": list(question.categories),
            "options": list(question.options),
        }
    elif isinstance(question, Cloze):
        out = {
            "type": CLOZE,
            "prompt": question.prompt,
            "clozeText": question.cloze_text,
            "answers": list(question.answers),
        }
    elif isinstance(question, Comprehension):
        out = {
            "type": COMPREHENSION,
            "prompt": question.prompt,
            "comprehensionText": question.comprehension_text,
            "subQuestions": [sub_question_to_dict(sq) for sq in question.sub_questions],
        }
    else:
        raise TypeError(f"not a question: {type(question).__name__}")
    return _with_image(out, question.image)


def question_from_dict(raw: dict[str, Any], *, key: int = 0) -> Question:
    if not isinstance(raw, dict):
        raise ValueError("question must be an object")
    kind = raw.get("type")
    prompt = str(raw.get("prompt") or "")
    image = _opt_str(raw.get("image"))
    if kind == CATEGORIZE:
        return Categorize(
            prompt=prompt,
            categories=_str_tuple(raw.get("categories")),
            options=_str_tuple(raw.get("options")),
            image=image,
            key=key,
        )
    if kind == CLOZE:
        text = str(raw.get("clozeText") or "")
        return Cloze(
            prompt=prompt,
            cloze_text=text,
            answers=fit_answers(_str_tuple(raw.get("answers")), count_blanks(text)),
            image=image,
            key=key,
        )
    if kind == COMPREHENSION:
        subs = raw.get("subQuestions") or []
        if not isinstance(subs, list):
            raise ValueError("subQuestions must be a list")
        return Comprehension(
            prompt=prompt,
            comprehension_text=str(raw.get("comprehensionText") or ""),
            sub_questions=tuple(sub_question_from_dict(sq) for sq in subs if isinstance(sq, dict)),
            image=image,
            key=key,
        )
    raise ValueError(f"unknown question type: {kind!r}")


def form_to_dict(form: Form) -> dict[str, Any]:
    out: dict[str, Any] = {
        "title": form.title,
        "questions": [question_to_dict(q) for q in form.questions],
    }
    if form.header_image:
        out["headerImage"] = form.header_image
    return out


def form_from_dict(raw: dict[str, Any]) -> Form:
    if not isinstance(raw, dict):
        raise ValueError("form must be an object")
    questions = raw.get("questions") or []
    if not isinstance(questions, list):
        raise ValueError("questions must be a list")
    decoded = tuple(question_from_dict(q, key=i) for i, q in enumerate(questions))
    return Form(
        title=str(raw.get("title") or ""),
        header_image=_opt_str(raw.get("headerImage")),
        questions=decoded,
        next_key=len(decoded),
    )
