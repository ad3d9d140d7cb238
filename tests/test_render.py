from formbot.authoring import add_question, new_form
from formbot.capture import assign, select, set_answer, start_form_capture
from formbot.keyboards import kb_for, kb_nav_only
from formbot.render import render_intro, render_question
from formbot.variants import CATEGORIZE, CLOZE, COMPREHENSION


def _form():
    form = new_form("Quiz", header_image="https://example.com/h.png")
    for kind in (CATEGORIZE, CLOZE, COMPREHENSION):
        form = add_question(form, kind)
    return form


def _callbacks(markup) -> list[str]:
    return [b.callback_data for row in markup.inline_keyboard for b in row]


def test_intro_lists_title_and_count():
    text = render_intro(_form(), "en").as_kwargs()["text"]
    assert "Quiz" in text
    assert "https://example.com/h.png" in text
    assert "Questions: 3" in text


def test_categorize_screen_shows_pool_and_categories():
    form = _form()
    states = start_form_capture(form)
    st = assign(states[0], "Option 2", "Category 1")
    text = render_question(form, 0, st, "en").as_kwargs()["text"]
    assert "Question 1 of 3" in text
    assert "Not placed yet: Option 1" in text
    assert "Category 1: Option 2" in text
    data = _callbacks(kb_for(0, 3, st, "en"))
    assert "cat:0:1:0" in data
    assert "nav:next" in data
    assert "nav:prev" not in data


def test_cloze_screen_numbers_blanks():
    form = _form()
    st = set_answer(start_form_capture(form)[1], 0, "Python")
    text = render_question(form, 1, st, "en").as_kwargs()["text"]
    assert "[1] Python is a programming language." in text
    assert "Reply with the answer for blank 1." in text
    assert _callbacks(kb_for(1, 3, st, "en", active_blank=0)) == ["blank:1:0", "nav:prev", "nav:next"]


def test_comprehension_screen_marks_selection_and_submit():
    form = _form()
    st = select(start_form_capture(form)[2], "What is the main idea of the passage?", "Option B")
    text = render_question(form, 2, st, "uk").as_kwargs()["text"]
    assert "Once upon a time..." in text
    assert "Option B" in text
    markup = kb_for(2, 3, st, "en")
    labels = [b.text for row in markup.inline_keyboard for b in row]
    assert "✅ 1. Option B" in labels
    assert _callbacks(markup)[-1] == "submit"


def test_empty_form_offers_submit_only():
    assert _callbacks(kb_nav_only(0, 0, "en")) == ["submit"]
