"""
Tests for the generation loop and quiz assembly
"""
import random
from unittest.mock import patch

import pytest

from quizforge.config import MAX_QUESTIONS
from quizforge.errors import GenerationFailure
from quizforge.schemas import DIFFICULTIES, ExtractedDocument, QuizConfig
from quizforge.services.quiz_generator import ATTEMPTS_PER_QUESTION, QuizGenerator
from quizforge.services.sentences import fallback_sentences


BIOLOGY = (
    "The cell membrane controls what enters and leaves the cell. "
    "Mitochondria release energy from glucose during cellular respiration. "
    "Chloroplasts capture light energy and convert it into chemical energy. "
    "The nucleus stores genetic information in long strands of DNA. "
    "Ribosomes assemble proteins from amino acids inside the cytoplasm. "
    "Enzymes speed up chemical reactions without being used up themselves. "
    "Plant cells have a rigid wall made of cellulose around the membrane. "
    "Cells divide by mitosis to produce two identical daughter cells."
)


def make_doc(doc_id, text, name="biology.pdf", size=4096, media_type="pdf"):
    return ExtractedDocument(id=doc_id, name=name, text=text, size=size, media_type=media_type)


class TestScenarios:
    def test_single_sentence_true_false_easy(self):
        docs = [make_doc(1, "The mitochondria is the powerhouse of the cell.")]
        config = QuizConfig(type="true-false", number_of_questions=1, difficulty="easy", topics="")

        result = QuizGenerator(random.Random(0)).generate_quiz(docs, config)

        assert len(result.questions) == 1
        question = result.questions[0]
        assert question.choices == ["True", "False"]
        assert question.difficulty == "easy"
        assert question.source_document_id in (1, None)

    def test_empty_text_uses_fallback_sentences(self):
        docs = [make_doc(4, "", name="photo.png", size=1024, media_type="image")]
        config = QuizConfig(type="short-answer", number_of_questions=3)

        result = QuizGenerator(random.Random(1)).generate_quiz(docs, config)

        assert 1 <= len(result.questions) <= 3
        fallback = fallback_sentences(docs)
        for q in result.questions:
            assert q.type == "short-answer"
            assert q.source_document_id is None
            # Every question is a blanked fallback sentence
            assert any(q.text == s.replace(q.correct_answer, "_______", 1) for s in fallback)

    def test_loop_exhausts_attempt_budget(self):
        docs = [make_doc(1, "aa bb cc dd alpha beta.")]
        config = QuizConfig(type="short-answer", number_of_questions=50, difficulty="mixed")
        generator = QuizGenerator(random.Random(2))

        run = generator.run(generator.build_pool(docs, config), config)

        assert run.attempts == 50 * ATTEMPTS_PER_QUESTION
        assert run.exhausted
        assert len(run.questions) == 2


class TestGenerationLoop:
    def test_question_texts_are_unique(self):
        config = QuizConfig(type="mixed", number_of_questions=15, difficulty="mixed")
        result = QuizGenerator(random.Random(3)).generate_quiz([make_doc(1, BIOLOGY)], config)

        texts = [q.text for q in result.questions]
        assert len(texts) == len(set(texts))
        assert len(texts) <= 15

    def test_short_sentences_are_skipped(self):
        docs = [make_doc(1, "Cells divide. Tiny.")]
        config = QuizConfig(type="multiple-choice", number_of_questions=2)
        generator = QuizGenerator(random.Random(0))

        run = generator.run(generator.build_pool(docs, config), config)

        assert run.questions == []
        assert run.attempts == 2 * ATTEMPTS_PER_QUESTION

    def test_empty_pool_returns_nothing(self):
        config = QuizConfig(number_of_questions=5)
        run = QuizGenerator(random.Random(0)).run([], config)
        assert run.questions == []
        assert run.attempts == 0

    def test_mixed_difficulty_resolves_per_question(self):
        config = QuizConfig(type="multiple-choice", number_of_questions=8, difficulty="mixed")
        result = QuizGenerator(random.Random(4)).generate_quiz([make_doc(1, BIOLOGY)], config)

        assert result.questions
        for q in result.questions:
            assert q.difficulty in DIFFICULTIES

    def test_source_ids_are_valid_or_none(self):
        docs = [make_doc(1, BIOLOGY[:200]), make_doc(2, BIOLOGY[200:])]
        config = QuizConfig(type="mixed", number_of_questions=10, difficulty="mixed")
        result = QuizGenerator(random.Random(5)).generate_quiz(docs, config)

        for q in result.questions:
            assert q.source_document_id in (1, 2, None)

    def test_seeded_generators_agree(self):
        config = QuizConfig(type="mixed", number_of_questions=6, difficulty="mixed")
        docs = [make_doc(1, BIOLOGY)]

        first = QuizGenerator(random.Random(42)).generate_quiz(docs, config)
        second = QuizGenerator(random.Random(42)).generate_quiz(docs, config)

        assert first.id == second.id
        assert [(q.id, q.text, q.correct_answer) for q in first.questions] == \
            [(q.id, q.text, q.correct_answer) for q in second.questions]


class TestShuffle:
    CONFIG = dict(type="true-false", number_of_questions=4, difficulty="easy")

    def run_with(self, shuffle_questions):
        rng = random.Random(6)
        generator = QuizGenerator(rng)
        config = QuizConfig(shuffle_questions=shuffle_questions, **self.CONFIG)
        pool = generator.build_pool([make_doc(1, BIOLOGY)], config)
        with patch.object(rng, "shuffle", wraps=rng.shuffle) as shuffle:
            generator.run(pool, config)
        return shuffle

    def test_final_order_shuffled_by_default(self):
        assert self.run_with(True).call_count == 1

    def test_shuffle_can_be_disabled(self):
        self.run_with(False).assert_not_called()


class TestAssembly:
    def test_result_echoes_config(self):
        config = QuizConfig(title="Cells", type="multiple-choice", number_of_questions=3,
                            difficulty="hard", include_answer_key=False)
        result = QuizGenerator(random.Random(8)).generate_quiz([make_doc(1, BIOLOGY)], config)

        assert result.title == "Cells"
        assert result.type == "multiple-choice"
        assert result.difficulty == "hard"
        assert result.include_answer_key is False
        assert result.created_at.tzinfo is not None

    def test_requires_documents(self):
        with pytest.raises(GenerationFailure):
            QuizGenerator(random.Random(0)).generate_quiz([], QuizConfig())

    def test_requires_positive_count(self):
        with pytest.raises(GenerationFailure):
            QuizGenerator(random.Random(0)).generate_quiz([make_doc(1, BIOLOGY)], QuizConfig(number_of_questions=0))

    def test_rejects_counts_above_the_cap(self):
        config = QuizConfig(type="short-answer", number_of_questions=MAX_QUESTIONS + 1)
        with pytest.raises(GenerationFailure):
            QuizGenerator(random.Random(0)).generate_quiz([make_doc(1, "aa bb cc dd alpha beta.")], config)

    def test_cap_is_configurable_and_inclusive(self):
        generator = QuizGenerator(random.Random(0), max_questions=2)
        docs = [make_doc(1, BIOLOGY)]

        assert len(generator.generate_quiz(docs, QuizConfig(number_of_questions=2)).questions) <= 2
        with pytest.raises(GenerationFailure):
            generator.generate_quiz(docs, QuizConfig(number_of_questions=3))
