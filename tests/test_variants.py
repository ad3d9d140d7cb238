import pytest

from formbot.variants import (
    CATEGORIZE,
    CLOZE,
    COMPREHENSION,
    QUESTION_TYPES,
    Categorize,
    Cloze,
    Comprehension,
    Form,
    count_blanks,
    create_question,
    form_from_dict,
    form_to_dict,
    question_from_dict,
    question_type,
    split_cloze,
)


@pytest.mark.parametrize("kind", QUESTION_TYPES)
def test_created_questions_hold_their_invariants(kind):
    q = create_question(kind, 7)
    assert q.key == 7
    assert question_type(q) == kind
    if isinstance(q, Cloze):
        assert len(q.answers) == count_blanks(q.cloze_text)
    if isinstance(q, Comprehension):
        for sub in q.sub_questions:
            assert sub.options
            assert sub.correct_answer in sub.options
    if isinstance(q, Categorize):
        assert len(set(q.categories)) == len(q.categories)
        assert all(c for c in q.categories)


def test_default_seeds():
    cat = create_question(CATEGORIZE, 0)
    assert cat.categories == ("Category 1", "Category 2")
    assert cat.options == ("Option 1", "Option 2")

    cloze = create_question(CLOZE, 0)
    assert cloze.answers == ("",)
    assert count_blanks(cloze.cloze_text) == 1

    comp = create_question(COMPREHENSION, 0)
    assert len(comp.sub_questions) == 1
    assert comp.sub_questions[0].options == ("Option A", "Option B")
    assert comp.sub_questions[0].correct_answer == "Option A"


def test_unknown_type_rejected():
    with pytest.raises(ValueError):
        create_question("Essay", 0)
    with pytest.raises(ValueError):
        question_from_dict({"type": "Essay", "prompt": "?"})


def test_split_cloze_gives_one_input_per_blank():
    parts = split_cloze("_ is a _.")
    assert parts == ["", " is a ", "."]
    assert len(parts) - 1 == count_blanks("_ is a _.")
    assert split_cloze("") == [""]


def test_decode_pads_short_cloze_answers():
    q = question_from_dict({"type": "Cloze", "prompt": "p", "clozeText": "_ and _", "answers": ["a"]})
    assert q.answers == ("a", "")


def test_decode_accepts_legacy_sub_question_text_and_fixes_correct_answer():
    q = question_from_dict(
        {
            "type": "Comprehension",
            "prompt": "Read",
            "comprehensionText": "Text",
            "subQuestions": [{"question": "Q?", "options": ["x", "y"], "correctAnswer": "z"}],
        }
    )
    assert q.sub_questions[0].prompt == "Q?"
    assert q.sub_questions[0].correct_answer == "x"


def test_wire_shape_uses_resource_field_names():
    form = Form(
        title="Quiz",
        header_image="https://example.com/h.png",
        questions=(create_question(CLOZE, 0), create_question(COMPREHENSION, 1)),
    )
    payload = form_to_dict(form)
    assert payload["title"] == "Quiz"
    assert payload["headerImage"] == "https://example.com/h.png"
    assert payload["questions"][0]["clozeText"].endswith("programming language.")
    assert payload["questions"][0]["answers"] == [""]
    sub = payload["questions"][1]["subQuestions"][0]
    assert set(sub) == {"prompt", "options", "correctAnswer"}
    assert "image" not in payload["questions"][0]
    assert "key" not in payload["questions"][0]


def test_decoded_form_gets_positional_keys():
    payload = {
        "title": "T",
        "questions": [
            {"type": "Categorize", "prompt": "a", "categories": ["x"], "options": ["o"]},
            {"type": "Cloze", "prompt": "b", "clozeText": "_", "answers": ["y"]},
        ],
    }
    form = form_from_dict(payload)
    assert [q.key for q in form.questions] == [0, 1]
    assert form.next_key == 2
    assert form.header_image is None
    assert form_to_dict(form) == payload
