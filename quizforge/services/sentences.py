"""
Sentence pool preparation: segmentation, topic filtering, complexity ranking
and difficulty slicing.
"""
import random
from typing import List, Optional, Sequence

import structlog
from nltk.tokenize.punkt import PunktParameters, PunktSentenceTokenizer

from quizforge.schemas import ExtractedDocument, SentenceRecord
from quizforge.services.language import normalize_whitespace, tokenize_terms

logger = structlog.get_logger()


# -------------------- SEGMENTATION --------------------

# Stored the way Punkt expects them: lower-case, without the final period
ABBREVIATIONS = {
    "dr", "mr", "mrs", "ms", "prof",
    "e.g", "i.e", "etc",
    "fig", "eq", "vol",
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
    "ph.d", "m.d", "b.a", "m.a", "a.m", "p.m",
}


def build_segmenter(abbreviations=ABBREVIATIONS) -> PunktSentenceTokenizer:
    params = PunktParameters()
    params.abbrev_types = set(abbreviations)
    return PunktSentenceTokenizer(params)


SEGMENTER = build_segmenter()


def split_sentences(text: str, segmenter: PunktSentenceTokenizer = SEGMENTER) -> List[str]:
    if not text or not text.strip():
        return []
    sentences = [normalize_whitespace(s) for s in segmenter.tokenize(text)]
    return [s for s in sentences if s]


def combine_document_text(documents: Sequence[ExtractedDocument]) -> str:
    return "\n\n".join(doc.text for doc in documents if doc.text)


# -------------------- TOPIC FILTER --------------------

MIN_TOPIC_SENTENCES = 5

GENERIC_STATEMENTS = [
    "Quizzes are effective tools for learning and knowledge assessment.",
    "Multiple-choice questions test recognition of correct answers among alternatives.",
    "True-false questions evaluate understanding of factual statements.",
    "Short-answer questions require recall and formulation of concise responses.",
    "Good quiz questions are clear, unambiguous, and focus on important concepts.",
]


def parse_topics(topics: Optional[str]) -> List[str]:
    if not topics or not topics.strip():
        return []
    keywords = [k.strip().lower() for k in topics.split(",")]
    return [k for k in keywords if k]


def filter_by_topics(sentences: List[str], topics: Optional[str], minimum: int = MIN_TOPIC_SENTENCES) -> List[str]:
    """Keep sentences mentioning a topic keyword, or all of them when too few match."""
    keywords = parse_topics(topics)
    if not keywords:
        return sentences

    relevant = [s for s in sentences if any(k in s.lower() for k in keywords)]
    if len(relevant) < minimum:
        logger.info("topic_filter_fallback", keywords=keywords, matched=len(relevant), total=len(sentences))
        return sentences
    return relevant


def fallback_sentences(documents: Sequence[ExtractedDocument]) -> List[str]:
    described = [
        f"This file is called {doc.name} and has a size of {doc.size} bytes."
        for doc in documents
    ]
    return described + GENERIC_STATEMENTS


def candidate_sentences(documents: Sequence[ExtractedDocument], topics: Optional[str]) -> List[str]:
    sentences = split_sentences(combine_document_text(documents))
    logger.info("sentences_segmented", count=len(sentences), documents=len(documents))

    relevant = filter_by_topics(sentences, topics)
    if not relevant:
        logger.info("using_fallback_sentences", documents=len(documents))
        relevant = fallback_sentences(documents)
    return relevant


# -------------------- RANKING / SLICING --------------------

def rank_sentences(sentences: Sequence[str], documents: Sequence[ExtractedDocument] = ()) -> List[SentenceRecord]:
    normalized = [(doc, normalize_whitespace(doc.text)) for doc in documents if doc.text]
    records = []
    for sentence in sentences:
        terms = tuple(tokenize_terms(sentence))
        source = next((doc.id for doc, text in normalized if sentence in text), None)
        records.append(SentenceRecord(
            sentence=sentence,
            terms=terms,
            complexity=len(terms),
            source_document_id=source,
        ))
    # sorted() is stable, so equal complexities keep their reading order
    return sorted(records, key=lambda r: r.complexity)


def difficulty_bounds(n: int, difficulty: str):
    if difficulty == "easy":
        return 0, n * 4 // 10
    if difficulty == "medium":
        return n * 3 // 10, n * 7 // 10
    if difficulty == "hard":
        return n * 6 // 10, n
    raise ValueError(f"No slice bounds for difficulty: {difficulty}")


def slice_by_difficulty(ranked: List[SentenceRecord], difficulty: str, rng: random.Random) -> List[SentenceRecord]:
    if difficulty == "mixed":
        shuffled = list(ranked)
        rng.shuffle(shuffled)
        return shuffled
    start, end = difficulty_bounds(len(ranked), difficulty)
    return ranked[start:end]
