import uuid
from types import SimpleNamespace

import pytest

from app.services.grader import compute_score, grade_response


def make_question(question_type, answers, points=1):
    return SimpleNamespace(
        id=uuid.uuid4(),
        type=question_type,
        points=points,
        answers=[
            SimpleNamespace(id=uuid.uuid4(), text=text, is_correct=is_correct)
            for text, is_correct in answers
        ],
    )


@pytest.fixture
def multiple_choice():
    return make_question(
        "multiple_choice",
        [("A", True), ("B", False), ("C", False), ("D", False)],
        points=2,
    )


def test_multiple_choice_correct_answer_earns_points(multiple_choice):
    correct = multiple_choice.answers[0]

    result = grade_response(multiple_choice, answer_id=correct.id)

    assert result.is_correct is True
    assert result.points_earned == 2
    assert result.answer_id == correct.id
    assert result.selected_text == "A"


@pytest.mark.parametrize("index", [1, 2, 3])
def test_multiple_choice_wrong_answer_earns_nothing(multiple_choice, index):
    result = grade_response(multiple_choice, answer_id=multiple_choice.answers[index].id)

    assert result.is_correct is False
    assert result.points_earned == 0


def test_multiple_choice_unknown_answer_is_incorrect_not_an_error(multiple_choice):
    unknown = uuid.uuid4()

    result = grade_response(multiple_choice, answer_id=unknown)

    assert result.is_correct is False
    assert result.points_earned == 0
    assert result.answer_id == unknown
    assert result.selected_text is None


def test_multiple_choice_without_answer_id(multiple_choice):
    assert grade_response(multiple_choice, text="A").is_correct is False


def test_true_false_is_case_insensitive():
    question = make_question("true_false", [("True", True), ("False", False)])

    assert grade_response(question, text="true").is_correct is True
    assert grade_response(question, text="TRUE").points_earned == 1
    assert grade_response(question, text="false").is_correct is False
    assert grade_response(question, text=None).is_correct is False


def test_true_false_records_submitted_text():
    question = make_question("true_false", [("True", False), ("False", True)])

    result = grade_response(question, text="False")

    assert result.selected_text == "False"
    assert result.answer_id is None
    assert result.is_correct is True


def test_fill_in_blank_ignores_case_and_surrounding_whitespace():
    question = make_question("fill_in_blank", [("Paris", True)], points=3)

    result = grade_response(question, text=" paris ")

    assert result.is_correct is True
    assert result.points_earned == 3


def test_fill_in_blank_accepts_any_correct_variant():
    question = make_question(
        "fill_in_blank",
        [("pH", True), ("potential of hydrogen", True), ("acidity", False)],
    )

    assert grade_response(question, text="Potential of Hydrogen").is_correct is True
    assert grade_response(question, text="PH").is_correct is True
    assert grade_response(question, text="acidity").is_correct is False
    assert grade_response(question, text="").is_correct is False
    assert grade_response(question).is_correct is False


def test_grading_does_not_touch_the_question(multiple_choice):
    before = [(a.id, a.text, a.is_correct) for a in multiple_choice.answers]

    grade_response(multiple_choice, answer_id=multiple_choice.answers[1].id)

    assert [(a.id, a.text, a.is_correct) for a in multiple_choice.answers] == before


def test_compute_score():
    assert compute_score(2, 5) == 40.0
    assert compute_score(5, 5) == 100.0
    assert compute_score(0, 0) == 0.0
