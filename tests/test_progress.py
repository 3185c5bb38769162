from datetime import timedelta

import pytest

from app.models.certificate_db.certificate_db import Certificate
from app.models.certificate_db.course_completion_db import CourseCompletion
from app.schemas.quiz.quiz_base import ResponseIn, SubmitAttemptIn
from app.services.progress import (
    certificate_summary,
    list_certificates,
    list_in_progress,
    overall_progress,
    percentage,
    quiz_status_map,
)
from conftest import quiz_data


def take_quiz(engine, user, quiz, correct=True):
    started = engine.start_attempt(user, quiz.id)
    question = quiz.questions[0]
    choice = next(a for a in question.answers if a.is_correct == correct)
    return engine.submit_attempt(
        user,
        quiz.id,
        SubmitAttemptIn(
            attempt_id=started.attempt_id,
            answers=[ResponseIn(question_id=question.id, answer_id=choice.id)],
        ),
    )


@pytest.fixture
def four_quiz_course(factory):
    return factory.course(
        title="Drip Irrigation",
        quizzes=[quiz_data(title=f"Quiz {n}") for n in range(1, 5)],
    )


def test_percentage_rounds_half_up():
    assert percentage(3, 4) == 75
    assert percentage(1, 8) == 13
    assert percentage(1, 3) == 33
    assert percentage(0, 0) == 0


def test_overall_progress():
    assert overall_progress(0, 0) == 0
    assert overall_progress(1, 1) == 50
    assert overall_progress(2, 1) == 67
    assert overall_progress(3, 0) == 100


def test_three_of_four_quizzes_is_seventy_five_percent(attempt_engine, student, factory, four_quiz_course, db):
    for quiz in factory.quizzes(four_quiz_course)[:3]:
        take_quiz(attempt_engine, student, quiz)

    in_progress = list_in_progress(db, student.id)

    assert len(in_progress) == 1
    entry = in_progress[0]
    assert entry.id == four_quiz_course.id
    assert entry.progress == 75
    assert entry.chapters_completed == 3
    assert entry.total_chapters == 4
    assert entry.title == "Drip Irrigation Certificate"
    assert entry.estimated_completion == "Ongoing"


def test_retaking_a_passed_quiz_counts_it_once(attempt_engine, student, factory, four_quiz_course, db, clock):
    first = factory.quizzes(four_quiz_course)[0]
    take_quiz(attempt_engine, student, first)
    clock.advance(days=1)
    take_quiz(attempt_engine, student, first)

    (entry,) = list_in_progress(db, student.id)

    assert entry.chapters_completed == 1
    assert entry.progress == 25


def test_failed_attempts_alone_are_not_progress(attempt_engine, student, factory, four_quiz_course, db):
    take_quiz(attempt_engine, student, factory.quizzes(four_quiz_course)[0], correct=False)

    assert list_in_progress(db, student.id) == []


def test_completed_courses_are_not_in_progress(attempt_engine, student, factory, four_quiz_course, db, clock):
    take_quiz(attempt_engine, student, factory.quizzes(four_quiz_course)[0])
    db.add(CourseCompletion(user_id=student.id, course_id=four_quiz_course.id, completed_at=clock.now))
    db.commit()

    assert list_in_progress(db, student.id) == []


def test_certificates_are_deduplicated_per_course(attempt_engine, student, factory, db, clock):
    course = factory.course(title="Composting", quizzes=[quiz_data(title="A"), quiz_data(title="B")])
    first_quiz, second_quiz = factory.quizzes(course)

    take_quiz(attempt_engine, student, first_quiz)
    earliest = clock.now
    clock.advance(days=2)
    take_quiz(attempt_engine, student, first_quiz)
    clock.advance(days=2)
    take_quiz(attempt_engine, student, second_quiz)

    certificates = list_certificates(db, student.id)

    assert db.query(Certificate).filter(Certificate.user_id == student.id).count() == 3
    assert len(certificates) == 1
    assert certificates[0].issued_at == earliest


def test_certificates_from_different_courses_are_all_listed(attempt_engine, student, factory, db, clock):
    first = factory.quiz(title="Seeds")
    clock.advance(hours=1)
    second = factory.quiz(title="Harvest")
    take_quiz(attempt_engine, student, second)
    clock.advance(hours=1)
    take_quiz(attempt_engine, student, first)

    certificates = list_certificates(db, student.id)

    assert [c.attempt.quiz.title for c in certificates] == ["Harvest", "Seeds"]


def test_certificate_summary(attempt_engine, student, factory, four_quiz_course, db, clock):
    finished = factory.course(title="Beekeeping", quizzes=[quiz_data()])
    take_quiz(attempt_engine, student, factory.quizzes(finished)[0])
    clock.advance(days=1)
    take_quiz(attempt_engine, student, factory.quizzes(four_quiz_course)[0])

    summary = certificate_summary(db, student)

    assert [entry.title for entry in summary.completed] == [
        "Beekeeping Certificate",
        "Drip Irrigation Certificate",
    ]
    assert [entry.id for entry in summary.in_progress] == [four_quiz_course.id]
    assert summary.overall_progress == 67

    beekeeping = summary.completed[0]
    assert beekeeping.completed_date == "March 1, 2026"
    assert beekeeping.score == 100
    assert beekeeping.issuer == "AgriSkills Academy"
    assert beekeeping.description == "Comprehensive certification in Beekeeping - General"
    expected_expiry = clock.now - timedelta(days=1) + timedelta(days=730)
    assert beekeeping.valid_until == f"{expected_expiry:%B} {expected_expiry.day}, {expected_expiry.year}"


def test_summary_for_a_new_learner(db, student):
    summary = certificate_summary(db, student)

    assert summary.overall_progress == 0
    assert summary.completed == []
    assert summary.in_progress == []


def test_quiz_status_map(attempt_engine, student, factory, four_quiz_course, db, clock):
    chapters = four_quiz_course.chapters
    quizzes = factory.quizzes(four_quiz_course)
    take_quiz(attempt_engine, student, quizzes[0], correct=False)
    clock.advance(minutes=5)
    passed = take_quiz(attempt_engine, student, quizzes[0])
    take_quiz(attempt_engine, student, quizzes[1], correct=False)

    status = quiz_status_map(db, student.id, [chapter.id for chapter in chapters[:3]])

    first, second, third = (status[str(chapter.id)] for chapter in chapters[:3])
    assert first.passed is True
    assert first.score == 100.0
    assert first.attempt_date == passed.completed_at
    assert second.passed is False
    assert second.score == 0.0
    assert third.passed is False
    assert third.score is None
