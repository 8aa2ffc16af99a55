from typing import Any, Dict

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Request
from pydantic import ValidationError
from sqlmodel import Session

from quizforge.db import get_session
from quizforge.errors import GenerationFailure, NotFound
from quizforge.middleware.rate_limit import generation_limit
from quizforge.schemas import QuizConfig
from quizforge.services.monitoring import QUESTIONS_PER_QUIZ, QUIZ_GENERATION_REQUESTS
from quizforge.services.quiz_generator import QuizGenerator
from quizforge.services.repository import get_quiz_with_questions, lookup_document, persist_quiz

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["quizzes"])


def get_quiz_generator() -> QuizGenerator:
    return QuizGenerator()


@router.post("/generate-quiz")
@generation_limit()
def generate_quiz(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
    generator: QuizGenerator = Depends(get_quiz_generator),
):
    """Generate a quiz from previously uploaded files and store it"""
    raw_config = payload.get("config")
    file_ids = payload.get("fileIds")

    if not raw_config:
        raise HTTPException(status_code=400, detail="Quiz configuration is required")
    if not file_ids or not isinstance(file_ids, list):
        raise HTTPException(status_code=400, detail="At least one file is required")

    try:
        config = QuizConfig.model_validate(raw_config)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid quiz configuration: {e.errors(include_url=False, include_context=False)}")

    documents = []
    for file_id in file_ids:
        try:
            parsed_id = int(file_id)
        except (TypeError, ValueError):
            logger.warning("invalid_file_id", file_id=file_id)
            continue
        try:
            documents.append(lookup_document(session, parsed_id))
        except NotFound:
            logger.warning("file_not_found", file_id=parsed_id)

    if not documents:
        raise HTTPException(status_code=404, detail="No valid files found")

    try:
        result = generator.generate_quiz(documents, config)
    except GenerationFailure as e:
        QUIZ_GENERATION_REQUESTS.labels(type=config.type, status="rejected").inc()
        raise HTTPException(status_code=400, detail=str(e))

    QUIZ_GENERATION_REQUESTS.labels(type=config.type, status="success").inc()
    QUESTIONS_PER_QUIZ.observe(len(result.questions))

    quiz_id = persist_quiz(session, result, config.number_of_questions)
    stored = get_quiz_with_questions(session, quiz_id)
    stored["includeAnswerKey"] = config.include_answer_key
    return stored


@router.get("/quizzes/{quiz_id}")
def get_quiz(quiz_id: int, session: Session = Depends(get_session)):
    try:
        return get_quiz_with_questions(session, quiz_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
