# Importing this module registers every mapped class on Base.metadata.
from app.models.user_db.user_db import User
from app.models.content_db.topic_db import Topic, Subtopic
from app.models.content_db.course_db import Course
from app.models.content_db.chapter_db import Chapter
from app.models.quiz_db.quiz_db import Quiz
from app.models.quiz_db.question_db import Question
from app.models.quiz_db.quiz_answer_db import QuizAnswer
from app.models.quiz_db.quiz_attempt_db import QuizAttempt
from app.models.quiz_db.quiz_response_db import QuizResponse
from app.models.certificate_db.certificate_db import Certificate
from app.models.certificate_db.course_completion_db import CourseCompletion

__all__ = [
    "User",
    "Topic",
    "Subtopic",
    "Course",
    "Chapter",
    "Quiz",
    "Question",
    "QuizAnswer",
    "QuizAttempt",
    "QuizResponse",
    "Certificate",
    "CourseCompletion",
]
