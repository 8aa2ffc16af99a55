from datetime import datetime, timezone
from typing import List, Optional

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, JSON


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    original_name: str
    size: int
    media_type: str = Field(description="pdf, image or video")
    processed_content: Optional[str] = None
    uploaded_at: datetime = Field(default_factory=utcnow)


class Quiz(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    public_id: str = Field(index=True, unique=True)
    title: str
    type: str = Field(description="multiple-choice, true-false, short-answer or mixed")
    difficulty: str = Field(description="easy, medium, hard or mixed")
    include_answer_key: bool = True
    number_of_questions: int
    created_at: datetime = Field(default_factory=utcnow)


class Question(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    quiz_id: int = Field(foreign_key="quiz.id", index=True)
    public_id: str
    position: int
    text: str
    type: str
    choices: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    correct_answer: str
    source_document_id: Optional[int] = None
    difficulty: str
