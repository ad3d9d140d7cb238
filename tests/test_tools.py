import asyncio
import json
from pathlib import Path

from formbot.db import make_engine, make_sessionmaker
from formbot.gateway import load_form
from formbot.variants import QUESTION_TYPES, form_from_dict
from src.tools import edit_form, import_form, new_form


def test_starter_form_has_one_question_per_type(tmp_path: Path) -> None:
    path = tmp_path / "forms" / "starter.json"
    assert new_form.main([str(path), "--title", "Quiz"]) == 0
    form = form_from_dict(json.loads(path.read_text(encoding="utf-8")))
    assert form.title == "Quiz"
    assert [q.type for q in form.questions] == list(QUESTION_TYPES)


def test_import_form_saves_valid_document(tmp_path: Path) -> None:
    path = tmp_path / "quiz.json"
    path.write_text(json.dumps({"title": "Quiz", "questions": [
        {"type": "Cloze", "prompt": "Fill", "clozeText": "_ is fun", "answers": ["Python"]},
    ]}), encoding="utf-8")
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'db' / 'forms.db'}"

    async def _run():
        form_id = await import_form.import_form(str(path), database_url)
        assert form_id
        engine = make_engine(database_url)
        async with make_sessionmaker(engine)() as s:
            form = await load_form(s, form_id)
        await engine.dispose()
        return form

    form = asyncio.run(_run())
    assert form.title == "Quiz"
    assert form.questions[0].answers == ("Python",)


def test_import_form_refuses_documents_with_errors(tmp_path: Path, capsys) -> None:
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"title": "", "questions": [
        {"type": "Categorize", "prompt": "Sort", "categories": [], "options": ["a"]},
    ]}), encoding="utf-8")
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'forms.db'}"

    assert import_form.main([str(path), "--database-url", database_url]) == 1
    out = capsys.readouterr().out
    assert "ERROR:" in out
    assert not (tmp_path / "forms.db").exists()


def _draft(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def test_edit_form_builds_draft_through_authoring_ops(tmp_path: Path) -> None:
    path = tmp_path / "draft.json"
    steps = [
        ["new", "--title", "Quiz"],
        ["add-question", "Categorize"],
        ["add-category", "1"],
        ["remove-category", "1", "1"],
        ["add-category", "1"],
        ["add-question", "Cloze"],
        ["cloze-text", "2", "_ loves _"],
        ["cloze-answer", "2", "2", "Python"],
        ["add-question", "Comprehension"],
        ["add-sub-option", "3", "1"],
        ["correct", "3", "1", "Option 1"],
    ]
    for step in steps:
        assert edit_form.main([str(path), *step]) == 0, step

    payload = _draft(path)
    cat, cloze, comp = payload["questions"]
    assert cat["categories"] == ["Category 2", "Category 3", "Category 1"]
    assert cloze["answers"] == ["", "Python"]
    sub = comp["subQuestions"][0]
    assert sub["options"] == ["Option A", "Option B", "Option 1"]
    assert sub["correctAnswer"] == "Option 1"


def test_edit_form_refuses_bad_edits_and_keeps_draft(tmp_path: Path, capsys) -> None:
    path = tmp_path / "draft.json"
    edit_form.main([str(path), "new", "--title", "Quiz"])
    edit_form.main([str(path), "add-question", "Cloze"])
    before = path.read_text(encoding="utf-8")
    capsys.readouterr()

    assert edit_form.main([str(path), "add-category", "1"]) == 1
    assert "question 1 is Cloze, not Categorize" in capsys.readouterr().out
    assert edit_form.main([str(path), "cloze-answer", "1", "5", "x"]) == 1
    assert edit_form.main([str(path), "remove-question", "3"]) == 1
    assert path.read_text(encoding="utf-8") == before

    assert edit_form.main([str(tmp_path / "missing.json"), "show"]) == 1


def test_edit_form_show_prints_issues(tmp_path: Path, capsys) -> None:
    path = tmp_path / "draft.json"
    edit_form.main([str(path), "new"])
    edit_form.main([str(path), "add-question", "Comprehension"])
    capsys.readouterr()
    assert edit_form.main([str(path), "show"]) == 0
    out = capsys.readouterr().out
    assert "1. [Comprehension] Read the following passage:" in out
    assert "*Option A" in out
    assert "ERROR: form title is empty" in out
