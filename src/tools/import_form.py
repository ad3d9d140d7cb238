import argparse
import asyncio
import json
import sys
from pathlib import Path

from formbot.config import load_database_url
from formbot.db import ensure_schema, ensure_sqlite_dir, make_engine, make_sessionmaker
from formbot.errors import ValidationError
from formbot.gateway import save_form
from formbot.validation import check_form, format_issue, has_errors
from formbot.variants import form_from_dict

async def import_form(path: str, database_url: str) -> str | None:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    form = form_from_dict(raw)
    issues = check_form(form)
    for issue in issues:
        print(format_issue(issue))
    if has_errors(issues):
        return None

    ensure_sqlite_dir(database_url)
    engine = make_engine(database_url)
    try:
        await ensure_schema(engine)
        Session = make_sessionmaker(engine)
        async with Session() as s:
            return await save_form(s, form)
    finally:
        await engine.dispose()

def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(description="Save a form JSON document and print its id")
    parser.add_argument("path")
    parser.add_argument("--database-url", default=None)
    args = parser.parse_args(argv)
    try:
        form_id = asyncio.run(import_form(args.path, args.database_url or load_database_url()))
    except ValidationError as exc:
        print(f"ERROR: {exc}")
        return 1
    if form_id is None:
        return 1
    print(form_id)
    print(f"Share with respondents: /start FORM_{form_id}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
