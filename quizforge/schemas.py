from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


QuestionType = Literal["multiple-choice", "true-false", "short-answer"]
Difficulty = Literal["easy", "medium", "hard"]

QUESTION_TYPES: Tuple[str, ...] = ("multiple-choice", "true-false", "short-answer")
DIFFICULTIES: Tuple[str, ...] = ("easy", "medium", "hard")
TRUE_FALSE_CHOICES = ["True", "False"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExtractedDocument(CamelModel):
    """Text pulled out of one uploaded file; read-only input to the pipeline."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    name: str
    text: str = ""
    size: int = 0
    media_type: str


class SentenceRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    sentence: str
    terms: Tuple[str, ...]
    complexity: int
    source_document_id: Optional[int] = None


class QuizQuestion(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    text: str
    type: QuestionType
    choices: Optional[List[str]] = None
    correct_answer: str
    source_document_id: Optional[int] = None
    difficulty: Difficulty

    @model_validator(mode="after")
    def check_choices(self):
        if self.type == "multiple-choice":
            if not self.choices or self.choices.count(self.correct_answer) != 1:
                raise ValueError("multiple-choice answer must appear exactly once in choices")
        elif self.type == "true-false":
            if self.choices != TRUE_FALSE_CHOICES or self.correct_answer not in TRUE_FALSE_CHOICES:
                raise ValueError("true-false questions use the choices ['True', 'False']")
        elif self.choices is not None:
            raise ValueError("short-answer questions carry no choices")
        return self


class QuizConfig(CamelModel):
    title: str = "Generated Quiz"
    type: Literal["multiple-choice", "true-false", "short-answer", "mixed"] = "mixed"
    number_of_questions: int = 10
    difficulty: Literal["easy", "medium", "hard", "mixed"] = "medium"
    topics: str = ""
    include_answer_key: bool = True
    shuffle_questions: bool = True
    include_images: bool = False


class QuizResult(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    title: str
    type: str
    difficulty: str
    questions: List[QuizQuestion]
    include_answer_key: bool
    created_at: datetime
