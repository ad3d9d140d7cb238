from __future__ import annotations

from dataclasses import dataclass

from .variants import Categorize, Cloze, Comprehension, Form, count_blanks


@dataclass(frozen=True)
class ValidationIssue:
    severity: str  # "error" | "warning"
    message: str
    question_index: int | None = None
    sub_index: int | None = None


def _check_categorize(q: Categorize, idx: int) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not q.categories:
        issues.append(ValidationIssue("error", "categorize question has no categories", idx))
    seen: set[str] = set()
    for cat in q.categories:
        if not cat.strip():
            issues.append(ValidationIssue("error", "category name is empty", idx))
        elif cat in seen:
            issues.append(ValidationIssue("error", f"duplicate category {cat!r}", idx))
        seen.add(cat)
    if not q.options:
        issues.append(ValidationIssue("warning", "categorize question has no options", idx))
    if len(set(q.options)) != len(q.options):
        issues.append(ValidationIssue("warning", "duplicate options are indistinguishable when assigned", idx))
    return issues


def _check_cloze(q: Cloze, idx: int) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    blanks = count_blanks(q.cloze_text)
    if len(q.answers) != blanks:
        issues.append(
            ValidationIssue("error", f"cloze has {blanks} blanks but {len(q.answers)} answers", idx)
        )
    if blanks == 0:
        issues.append(ValidationIssue("warning", "cloze text has no blanks", idx))
    return issues


def _check_comprehension(q: Comprehension, idx: int) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not q.sub_questions:
        issues.append(ValidationIssue("warning", "comprehension question has no sub-questions", idx))
    prompts: set[str] = set()
    for sub_idx, sub in enumerate(q.sub_questions):
        if not sub.options:
            issues.append(ValidationIssue("error", "sub-question has no options", idx, sub_idx))
        elif sub.correct_answer not in sub.options:
            issues.append(ValidationIssue("error", "correct answer is not one of the options", idx, sub_idx))
        if sub.prompt in prompts:
            # answers are keyed by sub-question prompt, so duplicates share one selection
            issues.append(ValidationIssue("warning", f"duplicate sub-question prompt {sub.prompt!r}", idx, sub_idx))
        prompts.add(sub.prompt)
    return issues


def check_form(form: Form) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not form.title.strip():
        issues.append(ValidationIssue("error", "form title is empty"))
    for idx, q in enumerate(form.questions):
        if isinstance(q, Categorize):
            issues.extend(_check_categorize(q, idx))
        elif isinstance(q, Cloze):
            issues.extend(_check_cloze(q, idx))
        elif isinstance(q, Comprehension):
            issues.extend(_check_comprehension(q, idx))
    return issues


def has_errors(issues: list[ValidationIssue]) -> bool:
    return any(issue.severity == "error" for issue in issues)


def format_issue(issue: ValidationIssue) -> str:
    """One console line, 1-based positions: ``ERROR: question 2 sub-question 1 <message>``."""
    where = "" if issue.question_index is None else f" question {issue.question_index + 1}"
    if issue.sub_index is not None:
        where += f" sub-question {issue.sub_index + 1}"
    return f"{issue.severity.upper()}:{where} {issue.message}"
