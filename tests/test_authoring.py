import pytest

from formbot import authoring as ed
from formbot.errors import OutOfRange
from formbot.variants import (
    CATEGORIZE,
    CLOZE,
    COMPREHENSION,
    Cloze,
    SubQuestion,
    count_blanks,
    create_question,
)


def _cloze(text: str, answers: tuple[str, ...]) -> Cloze:
    return Cloze(prompt="Fill in the blanks:", cloze_text=text, answers=answers)


def test_cloze_text_edit_grows_and_shrinks_answers():
    q = _cloze("_ is a _.", ("JavaScript", "fun"))
    grown = ed.edit_cloze_text(q, "_ is a _ and _.")
    assert grown.answers == ("JavaScript", "fun", "")
    shrunk = ed.edit_cloze_text(grown, "_ is a _.")
    assert shrunk.answers == ("JavaScript", "fun")
    assert q.answers == ("JavaScript", "fun")


@pytest.mark.parametrize(
    "text",
    ["no blanks here", "_", "__ double", "_ _ _ _ _", "tail _", ""],
)
def test_cloze_answers_track_blank_count(text):
    q = ed.edit_cloze_text(_cloze("_ and _", ("a", "b")), text)
    assert len(q.answers) == count_blanks(text)
    assert q.answers[:2] == ("a", "b")[: len(q.answers)]


def test_cloze_answers_stay_positional_when_blank_moves():
    # tail truncation keeps slot 0 even though the first blank was deleted
    q = ed.edit_cloze_text(_cloze("_ is a _.", ("JavaScript", "fun")), "Python is a _.")
    assert q.answers == ("JavaScript",)


def test_cloze_answer_edit_does_not_resize():
    q = _cloze("_ and _", ("", ""))
    q = ed.edit_cloze_answer(q, 1, "b")
    assert q.answers == ("", "b")
    with pytest.raises(OutOfRange):
        ed.edit_cloze_answer(q, 2, "c")


def test_categorize_edits_return_new_values():
    q = create_question(CATEGORIZE, 0)
    q2 = ed.add_category(q)
    assert q2.categories == ("Category 1", "Category 2", "Category 3")
    q3 = ed.edit_category(q2, 0, "Fruit")
    assert q3.categories[0] == "Fruit"
    q4 = ed.remove_category(q3, 1)
    assert q4.categories == ("Fruit", "Category 3")
    q5 = ed.remove_option(ed.edit_option(ed.add_option(q4), 2, "Apple"), 0)
    assert q5.options == ("Option 2", "Apple")
    assert q.categories == ("Category 1", "Category 2")
    assert q.options == ("Option 1", "Option 2")


def test_categorize_index_errors():
    q = create_question(CATEGORIZE, 0)
    with pytest.raises(OutOfRange):
        ed.remove_category(q, 5)
    with pytest.raises(OutOfRange):
        ed.edit_option(q, -1, "x")
    with pytest.raises(IndexError):
        ed.remove_option(q, 2)


def test_category_removal_is_per_question():
    form = ed.add_question(ed.add_question(ed.new_form("T"), CATEGORIZE), CATEGORIZE)
    first = ed.remove_category(form.questions[0], 0)
    form2 = ed.replace_question(form, 0, first)
    assert form2.questions[0].categories == ("Category 2",)
    assert form2.questions[1].categories == ("Category 1", "Category 2")
    assert form.questions[0].categories == ("Category 1", "Category 2")


def test_form_add_remove_never_reuses_keys():
    form = ed.add_question(ed.add_question(ed.new_form("T"), CLOZE), CLOZE)
    assert [q.key for q in form.questions] == [0, 1]
    removed = form.questions[1]
    form = ed.remove_question(form, 1)
    form = ed.add_question(form, CLOZE)
    assert [q.key for q in form.questions] == [0, 2]
    assert form.questions[1] != removed


def test_form_index_errors():
    form = ed.add_question(ed.new_form("T"), COMPREHENSION)
    with pytest.raises(OutOfRange):
        ed.remove_question(form, 1)
    with pytest.raises(OutOfRange):
        ed.replace_question(form, -1, create_question(CLOZE, 9))
    assert len(form.questions) == 1


def test_form_level_fields():
    form = ed.set_header_image(ed.set_title(ed.new_form(), "Quiz"), "")
    assert form.title == "Quiz"
    assert form.header_image is None
    q = ed.edit_image(ed.edit_prompt(create_question(CLOZE, 0), "New prompt"), "https://x/y.png")
    assert q.prompt == "New prompt"
    assert q.image == "https://x/y.png"


def test_sub_question_edit_resets_dangling_correct_answer():
    q = create_question(COMPREHENSION, 0)
    updated = SubQuestion(prompt="Why?", options=("Yes", "No"), correct_answer="Option A")
    q2 = ed.edit_sub_question(q, 0, updated)
    assert q2.sub_questions[0].correct_answer == "Yes"

    kept = SubQuestion(prompt="Why?", options=("Yes", "No"), correct_answer="No")
    assert ed.edit_sub_question(q, 0, kept).sub_questions[0].correct_answer == "No"

    with pytest.raises(ValueError):
        ed.edit_sub_question(q, 0, SubQuestion(prompt="Why?", options=(), correct_answer=""))
    with pytest.raises(OutOfRange):
        ed.edit_sub_question(q, 3, kept)


def test_sub_option_edits_keep_correct_answer_valid():
    q = create_question(COMPREHENSION, 0)
    q = ed.set_correct_answer(q, 0, "Option B")
    renamed = ed.edit_sub_option(q, 0, 1, "Beta")
    assert renamed.sub_questions[0].options == ("Option A", "Beta")
    assert renamed.sub_questions[0].correct_answer == "Option A"

    q = ed.add_sub_option(q, 0)
    assert q.sub_questions[0].options[-1] == "Option 1"
    q = ed.remove_sub_option(q, 0, 1)
    assert q.sub_questions[0].options == ("Option A", "Option 1")
    assert q.sub_questions[0].correct_answer == "Option A"

    with pytest.raises(ValueError):
        ed.set_correct_answer(q, 0, "Nope")


def test_cannot_remove_last_sub_option():
    q = ed.remove_sub_option(create_question(COMPREHENSION, 0), 0, 0)
    with pytest.raises(ValueError):
        ed.remove_sub_option(q, 0, 0)


def test_sub_question_add_and_remove():
    q = ed.add_sub_question(create_question(COMPREHENSION, 0))
    assert q.sub_questions[1].prompt == "New Sub-Question 2"
    assert q.sub_questions[1].correct_answer == "Option 1"
    q = ed.edit_sub_prompt(q, 1, "Who?")
    assert q.sub_questions[1].prompt == "Who?"
    q = ed.remove_sub_question(q, 0)
    assert [s.prompt for s in q.sub_questions] == ["Who?"]
    q = ed.edit_comprehension_text(q, "A new passage.")
    assert q.comprehension_text == "A new passage."


def test_remove_then_add_never_duplicates_labels():
    q = ed.add_category(ed.remove_category(create_question(CATEGORIZE, 0), 0))
    assert q.categories == ("Category 2", "Category 1")
    q = ed.add_option(ed.remove_option(q, 0))
    assert q.options == ("Option 2", "Option 1")
    q = ed.add_category(ed.edit_category(q, 1, "Category 3"))
    assert len(set(q.categories)) == len(q.categories)


def test_added_sub_options_and_prompts_stay_distinct():
    q = ed.edit_sub_option(create_question(COMPREHENSION, 0), 0, 0, "Option 1")
    q = ed.add_sub_option(q, 0)
    assert q.sub_questions[0].options == ("Option 1", "Option B", "Option 2")
    q = ed.add_sub_question(ed.add_sub_question(q))
    q = ed.add_sub_question(ed.remove_sub_question(q, 1))
    prompts = [s.prompt for s in q.sub_questions]
    assert len(set(prompts)) == len(prompts)
