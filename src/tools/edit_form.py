import argparse
import json
import sys
from pathlib import Path

from formbot import authoring as ed
from formbot.validation import check_form, format_issue
from formbot.variants import (
    QUESTION_TYPES,
    Categorize,
    Cloze,
    Comprehension,
    Form,
    form_from_dict,
    form_to_dict,
)

# Positions on the command line are 1-based, as in the issue lines printed by validation.


class UsageError(Exception):
    pass


def _pos(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise argparse.ArgumentTypeError("positions start at 1")
    return value - 1


def _question(form: Form, index: int, kind: type):
    if not 0 <= index < len(form.questions):
        raise UsageError(f"question {index + 1} does not exist (form has {len(form.questions)})")
    question = form.questions[index]
    if not isinstance(question, kind):
        raise UsageError(f"question {index + 1} is {question.type}, not {kind.type}")
    return question


def _on_question(kind: type, op):
    """Wrap a per-question authoring op as ``(form, args) -> form``."""
    def apply(form: Form, args: argparse.Namespace) -> Form:
        question = _question(form, args.q, kind)
        return ed.replace_question(form, args.q, op(question, args))
    return apply


ANY = (Categorize, Cloze, Comprehension)

COMMANDS = {
    # form level
    "title": (("text",), lambda f, a: ed.set_title(f, a.text)),
    "header-image": (("url",), lambda f, a: ed.set_header_image(f, a.url)),
    "add-question": (("kind",), lambda f, a: ed.add_question(f, a.kind)),
    "remove-question": (("q",), lambda f, a: ed.remove_question(f, a.q)),
    "prompt": (("q", "text"), _on_question(ANY, lambda q, a: ed.edit_prompt(q, a.text))),
    "image": (("q", "url"), _on_question(ANY, lambda q, a: ed.edit_image(q, a.url))),
    # categorize
    "add-category": (("q",), _on_question(Categorize, lambda q, a: ed.add_category(q))),
    "edit-category": (("q", "i", "text"), _on_question(Categorize, lambda q, a: ed.edit_category(q, a.i, a.text))),
    "remove-category": (("q", "i"), _on_question(Categorize, lambda q, a: ed.remove_category(q, a.i))),
    "add-option": (("q",), _on_question(Categorize, lambda q, a: ed.add_option(q))),
    "edit-option": (("q", "i", "text"), _on_question(Categorize, lambda q, a: ed.edit_option(q, a.i, a.text))),
    "remove-option": (("q", "i"), _on_question(Categorize, lambda q, a: ed.remove_option(q, a.i))),
    # cloze
    "cloze-text": (("q", "text"), _on_question(Cloze, lambda q, a: ed.edit_cloze_text(q, a.text))),
    "cloze-answer": (("q", "i", "text"), _on_question(Cloze, lambda q, a: ed.edit_cloze_answer(q, a.i, a.text))),
    # comprehension
    "passage": (("q", "text"), _on_question(Comprehension, lambda q, a: ed.edit_comprehension_text(q, a.text))),
    "add-sub": (("q",), _on_question(Comprehension, lambda q, a: ed.add_sub_question(q))),
    "remove-sub": (("q", "s"), _on_question(Comprehension, lambda q, a: ed.remove_sub_question(q, a.s))),
    "sub-prompt": (("q", "s", "text"), _on_question(Comprehension, lambda q, a: ed.edit_sub_prompt(q, a.s, a.text))),
    "add-sub-option": (("q", "s"), _on_question(Comprehension, lambda q, a: ed.add_sub_option(q, a.s))),
    "edit-sub-option": (
        ("q", "s", "i", "text"),
        _on_question(Comprehension, lambda q, a: ed.edit_sub_option(q, a.s, a.i, a.text)),
    ),
    "remove-sub-option": (
        ("q", "s", "i"),
        _on_question(Comprehension, lambda q, a: ed.remove_sub_option(q, a.s, a.i)),
    ),
    "correct": (("q", "s", "text"), _on_question(Comprehension, lambda q, a: ed.set_correct_answer(q, a.s, a.text))),
}

_ARG_HELP = {
    "q": "question position",
    "s": "sub-question position",
    "i": "category/option/blank position",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Apply one authoring edit to a form JSON draft")
    parser.add_argument("path")
    sub = parser.add_subparsers(dest="command", required=True)
    new = sub.add_parser("new", help="start an empty draft (overwrites path)")
    new.add_argument("--title", default="")
    new.add_argument("--header-image", default=None)
    sub.add_parser("show", help="print the draft and its issues")
    for name, (params, _) in COMMANDS.items():
        cmd = sub.add_parser(name)
        for param in params:
            if param == "kind":
                cmd.add_argument(param, choices=QUESTION_TYPES)
            elif param in _ARG_HELP:
                cmd.add_argument(param, type=_pos, help=_ARG_HELP[param])
            else:
                cmd.add_argument(param)
    return parser


def _summary(form: Form) -> list[str]:
    lines = [f"Title: {form.title or '(empty)'}"]
    for n, q in enumerate(form.questions, start=1):
        lines.append(f"{n}. [{q.type}] {q.prompt}")
        if isinstance(q, Categorize):
            lines.append("   categories: " + " | ".join(q.categories))
            lines.append("   options: " + " | ".join(q.options))
        elif isinstance(q, Cloze):
            lines.append(f"   text: {q.cloze_text}")
            lines.append("   answers: " + " | ".join(q.answers))
        else:
            for s, sub in enumerate(q.sub_questions, start=1):
                marked = [f"*{o}" if o == sub.correct_answer else o for o in sub.options]
                lines.append(f"   {s}) {sub.prompt}: " + " | ".join(marked))
    return lines


def main(argv: list[str]) -> int:
    args = build_parser().parse_args(argv)
    path = Path(args.path)

    if args.command == "new":
        form = ed.new_form(args.title, args.header_image)
    else:
        if not path.exists():
            print(f"ERROR: {path} does not exist; start one with `new`")
            return 1
        form = form_from_dict(json.loads(path.read_text(encoding="utf-8")))
        if args.command == "show":
            print("\n".join(_summary(form)))
            for issue in check_form(form):
                print(format_issue(issue))
            return 0
        try:
            form = COMMANDS[args.command][1](form, args)
        except (UsageError, ValueError, IndexError) as exc:
            # the draft on disk is left as it was
            print(f"ERROR: {exc}")
            return 1

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(form_to_dict(form), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    for issue in check_form(form):
        print(format_issue(issue))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
