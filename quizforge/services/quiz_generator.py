"""
Quiz generation: the attempt loop over the ranked sentence pool and the
assembly of the final quiz.
"""
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import structlog

from quizforge.config import MAX_QUESTIONS
from quizforge.errors import GenerationFailure
from quizforge.schemas import (
    QUESTION_TYPES, ExtractedDocument, QuizConfig, QuizQuestion, QuizResult, SentenceRecord,
)
from quizforge.services.logging import log_performance
from quizforge.services.sentences import candidate_sentences, rank_sentences, slice_by_difficulty
from quizforge.services.synthesizers import (
    make_multiple_choice, make_short_answer, make_true_false, new_id,
)

logger = structlog.get_logger()

MIN_TERMS = 5
ATTEMPTS_PER_QUESTION = 3


@dataclass
class GenerationRun:
    questions: List[QuizQuestion] = field(default_factory=list)
    attempts: int = 0
    exhausted: bool = False


class QuizGenerator:
    """
    Builds quizzes from extracted documents.

    The random source is injected so a seeded generator reproduces the same
    quiz; nothing is shared between calls besides that source.
    """

    def __init__(self, rng: Optional[random.Random] = None, max_questions: int = MAX_QUESTIONS):
        self.rng = rng or random.Random()
        self.max_questions = max_questions

    def build_pool(self, documents: Sequence[ExtractedDocument], config: QuizConfig) -> List[SentenceRecord]:
        sentences = candidate_sentences(documents, config.topics)
        ranked = rank_sentences(sentences, documents)
        pool = slice_by_difficulty(ranked, config.difficulty, self.rng)
        if not pool and ranked:
            # Tiny corpora can leave a tier empty; use every sentence instead
            logger.info("difficulty_slice_widened", difficulty=config.difficulty, ranked=len(ranked))
            pool = ranked
        return pool

    def synthesize(self, record: SentenceRecord, question_type: str, difficulty: str) -> QuizQuestion:
        if question_type == "multiple-choice":
            return make_multiple_choice(record.sentence, record.terms, record.source_document_id, difficulty, self.rng)
        if question_type == "true-false":
            return make_true_false(record.sentence, record.source_document_id, difficulty, self.rng)
        return make_short_answer(record.sentence, record.terms, record.source_document_id, difficulty, self.rng)

    def run(self, pool: Sequence[SentenceRecord], config: QuizConfig) -> GenerationRun:
        """Attempt synthesis until the requested count or the attempt budget is reached."""
        wanted = config.number_of_questions
        max_attempts = wanted * ATTEMPTS_PER_QUESTION
        run = GenerationRun()
        if not pool:
            logger.warning("no_usable_sentences", difficulty=config.difficulty)
            return run

        seen_texts = set()
        while len(run.questions) < wanted and run.attempts < max_attempts:
            run.attempts += 1

            question_type = config.type
            if question_type == "mixed":
                question_type = self.rng.choice(QUESTION_TYPES)

            record = pool[self.rng.randrange(len(pool))]
            if len(record.terms) < MIN_TERMS:
                continue

            question = self.synthesize(record, question_type, config.difficulty)
            if question.text in seen_texts:
                continue
            seen_texts.add(question.text)
            run.questions.append(question)

        run.exhausted = len(run.questions) < wanted
        if config.shuffle_questions:
            self.rng.shuffle(run.questions)

        logger.info(
            "generation_finished",
            requested=wanted,
            generated=len(run.questions),
            attempts=run.attempts,
            exhausted=run.exhausted,
        )
        return run

    def assemble(self, config: QuizConfig, questions: List[QuizQuestion]) -> QuizResult:
        return QuizResult(
            id=new_id(self.rng),
            title=config.title,
            type=config.type,
            difficulty=config.difficulty,
            questions=questions,
            include_answer_key=config.include_answer_key,
            created_at=datetime.now(timezone.utc),
        )

    @log_performance("generate_quiz", summarize=lambda result: {"questions": len(result.questions)})
    def generate_quiz(self, documents: Sequence[ExtractedDocument], config: QuizConfig) -> QuizResult:
        if not documents:
            raise GenerationFailure("At least one document is required to generate a quiz")
        if config.number_of_questions <= 0:
            raise GenerationFailure(
                f"numberOfQuestions must be a positive integer, got {config.number_of_questions}"
            )
        if config.number_of_questions > self.max_questions:
            raise GenerationFailure(
                f"numberOfQuestions must be at most {self.max_questions}, got {config.number_of_questions}"
            )

        logger.info(
            "generating_quiz",
            title=config.title,
            type=config.type,
            difficulty=config.difficulty,
            requested=config.number_of_questions,
            documents=len(documents),
        )
        pool = self.build_pool(documents, config)
        run = self.run(pool, config)
        return self.assemble(config, run.questions)
