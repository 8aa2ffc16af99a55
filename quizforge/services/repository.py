"""
Persistence of uploaded documents and generated quizzes
"""
from typing import Dict, List

import structlog
from sqlmodel import Session, func, select

from quizforge.errors import NotFound
from quizforge.models import Document, Question, Quiz
from quizforge.schemas import ExtractedDocument, QuizResult

logger = structlog.get_logger()


def create_document(session: Session, name: str, size: int, media_type: str, text: str) -> Document:
    document = Document(original_name=name, size=size, media_type=media_type, processed_content=text)
    session.add(document)
    session.commit()
    session.refresh(document)
    logger.info("document_stored", document_id=document.id, name=name, chars=len(text or ""))
    return document


def get_document(session: Session, document_id: int) -> Document:
    document = session.get(Document, document_id)
    if document is None:
        raise NotFound("Document", document_id)
    return document


def to_extracted(document: Document) -> ExtractedDocument:
    return ExtractedDocument(
        id=document.id,
        name=document.original_name,
        text=document.processed_content or "",
        size=document.size,
        media_type=document.media_type,
    )


def lookup_document(session: Session, document_id: int) -> ExtractedDocument:
    return to_extracted(get_document(session, document_id))


def document_to_dict(document: Document) -> Dict:
    return {
        "id": document.id,
        "originalName": document.original_name,
        "size": document.size,
        "type": document.media_type,
        "characters": len(document.processed_content or ""),
        "uploadedAt": document.uploaded_at.isoformat(),
    }


def persist_quiz(session: Session, result: QuizResult, requested: int) -> int:
    """Store a generated quiz and its questions; returns the stored quiz id."""
    quiz = Quiz(
        public_id=result.id,
        title=result.title,
        type=result.type,
        difficulty=result.difficulty,
        include_answer_key=result.include_answer_key,
        number_of_questions=requested,
        created_at=result.created_at,
    )
    session.add(quiz)
    session.flush()

    for position, q in enumerate(result.questions):
        session.add(Question(
            quiz_id=quiz.id,
            public_id=q.id,
            position=position,
            text=q.text,
            type=q.type,
            choices=q.choices,
            correct_answer=q.correct_answer,
            source_document_id=q.source_document_id,
            difficulty=q.difficulty,
        ))
    session.commit()
    logger.info("quiz_stored", quiz_id=quiz.id, questions=len(result.questions))
    return quiz.id


def get_quiz_with_questions(session: Session, quiz_id: int) -> Dict:
    quiz = session.get(Quiz, quiz_id)
    if quiz is None:
        raise NotFound("Quiz", quiz_id)

    questions: List[Question] = session.exec(
        select(Question).where(Question.quiz_id == quiz_id).order_by(Question.position)
    ).all()

    return {
        "id": quiz.id,
        "publicId": quiz.public_id,
        "title": quiz.title,
        "type": quiz.type,
        "difficulty": quiz.difficulty,
        "numberOfQuestions": quiz.number_of_questions,
        "includeAnswerKey": quiz.include_answer_key,
        "createdAt": quiz.created_at.isoformat(),
        "questions": [
            {
                "id": q.public_id,
                "text": q.text,
                "type": q.type,
                "choices": q.choices,
                "correctAnswer": q.correct_answer if quiz.include_answer_key else None,
                "sourceFileId": q.source_document_id,
                "difficulty": q.difficulty,
            }
            for q in questions
        ],
    }


def count_rows(session: Session, model) -> int:
    return session.exec(select(func.count()).select_from(model)).one()
