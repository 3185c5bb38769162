from typing import List, Optional
from sqlalchemy.orm import Session
from app.core.database import SessionLocal
from app.models.content_db.chapter_db import Chapter
from app.models.content_db.course_db import Course
from app.models.content_db.topic_db import Subtopic, Topic
from app.models.quiz_db.question_db import Question
from app.models.quiz_db.quiz_answer_db import QuizAnswer
from app.models.quiz_db.quiz_db import Quiz


demo_course = {
    "topic": "Soil Health",
    "subtopic": "Soil Basics",
    "course": "Understanding Soil",
    "chapters": [
        {
            "title": "What is soil made of?",
            "quiz": {
                "title": "Soil composition",
                "passing_score": 70,
                "time_limit": 10,
                "questions": [
                    {
                        "text": "Which component gives soil most of its fertility?",
                        "type": "multiple_choice",
                        "points": 2,
                        "answers": [
                            {"text": "Organic matter", "is_correct": True},
                            {"text": "Sand", "is_correct": False},
                            {"text": "Gravel", "is_correct": False},
                            {"text": "Clay pipes", "is_correct": False},
                        ],
                    },
                    {
                        "text": "Earthworms improve soil aeration.",
                        "type": "true_false",
                        "points": 1,
                        "answers": [
                            {"text": "True", "is_correct": True},
                            {"text": "False", "is_correct": False},
                        ],
                    },
                ],
            },
        },
        {
            "title": "Measuring soil acidity",
            "quiz": {
                "title": "Soil pH",
                "passing_score": 60,
                "time_limit": None,
                "questions": [
                    {
                        "text": "The scale used to measure acidity is called the ___ scale.",
                        "type": "fill_in_blank",
                        "points": 3,
                        "answers": [
                            {"text": "pH", "is_correct": True},
                            {"text": "potential of hydrogen", "is_correct": True},
                        ],
                    },
                ],
            },
        },
    ],
}


def add_quiz(db: Session, chapter: Chapter, data: dict) -> Quiz:
    quiz = Quiz(
        chapter=chapter,
        title=data["title"],
        description=data.get("description"),
        passing_score=data.get("passing_score", 70),
        time_limit=data.get("time_limit"),
        is_active=data.get("is_active", True),
    )
    db.add(quiz)
    for order_index, question_data in enumerate(data.get("questions", [])):
        question = Question(
            quiz=quiz,
            text=question_data["text"],
            type=question_data.get("type", "multiple_choice"),
            points=question_data.get("points", 1),
            order_index=order_index,
        )
        for answer_index, answer_data in enumerate(question_data.get("answers", [])):
            question.answers.append(QuizAnswer(
                text=answer_data["text"],
                is_correct=answer_data.get("is_correct", False),
                order_index=answer_index,
            ))
        db.add(question)
    db.flush()
    return quiz


def add_course(
    db: Session,
    course_title: str,
    chapters: List[dict],
    subtopic: Optional[Subtopic] = None,
    topic_title: str = "General",
    subtopic_title: str = "General",
) -> Course:
    if subtopic is None:
        topic = Topic(title=topic_title)
        subtopic = Subtopic(title=subtopic_title, topic=topic)
        db.add(topic)

    course = Course(title=course_title, subtopic=subtopic)
    db.add(course)
    for order_index, chapter_data in enumerate(chapters):
        chapter = Chapter(title=chapter_data["title"], order_index=order_index, course=course)
        db.add(chapter)
        if chapter_data.get("quiz"):
            add_quiz(db, chapter, chapter_data["quiz"])
    db.flush()
    return course


def seed_demo_content():
    db: Session = SessionLocal()
    try:
        exists = db.query(Course).filter(Course.title == demo_course["course"]).first()
        if not exists:
            add_course(
                db,
                demo_course["course"],
                demo_course["chapters"],
                topic_title=demo_course["topic"],
                subtopic_title=demo_course["subtopic"],
            )
            db.commit()
    finally:
        db.close()
    print("✅ Demo course seeded!")


if __name__ == "__main__":
    seed_demo_content()
