from enum import Enum


class QuestionType(str, Enum):
    multiple_choice = "multiple_choice"
    true_false = "true_false"
    fill_in_blank = "fill_in_blank"
