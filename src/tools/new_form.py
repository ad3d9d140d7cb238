import argparse
import json
import sys
from pathlib import Path

from formbot.authoring import add_question, new_form
from formbot.variants import QUESTION_TYPES, Form, form_to_dict

def starter_form(title: str) -> Form:
    form = new_form(title)
    for kind in QUESTION_TYPES:
        form = add_question(form, kind)
    return form

def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(description="Write a starter form with one question of each type")
    parser.add_argument("path")
    parser.add_argument("--title", default="Untitled form")
    args = parser.parse_args(argv)
    path = Path(args.path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = form_to_dict(starter_form(args.title))
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    print(f"Wrote {path}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
