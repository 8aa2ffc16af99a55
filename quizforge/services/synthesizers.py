"""
Question synthesizers: each turns one ranked sentence into one quiz question.
"""
import random
import uuid
from typing import List, Optional, Sequence

from quizforge.schemas import DIFFICULTIES, TRUE_FALSE_CHOICES, QuizQuestion
from quizforge.services.language import (
    blank_first, has_verb, negate_verb_phrase, noun_spans, replace_span,
)

BLANK = "_______"

STOP_TERMS = {"the", "and", "but", "for", "yet", "nor", "so", "as", "at"}

GENERIC_OPTIONS = [
    "option A", "option B", "option C", "option D",
    "alternative", "choice", "selection", "possibility",
]

REPLACEMENT_NOUNS = ["thing", "item", "object", "concept", "idea"]

DISTRACTOR_COUNT = 3


def new_id(rng: random.Random) -> str:
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def resolve_difficulty(difficulty: str, rng: random.Random) -> str:
    if difficulty == "mixed":
        return rng.choice(DIFFICULTIES)
    return difficulty


# -------------------- TERM SELECTION --------------------

def select_term(terms: Sequence[str], difficulty: str, rng: random.Random) -> str:
    """
    Pick the term to blank out of a sentence.

    Easy questions draw from the shortest third of the candidate terms and
    hard ones from the longest third; medium picks from all of them.
    Always returns a non-empty string.
    """
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"Term selection needs a concrete difficulty, got: {difficulty}")

    filtered = [t for t in terms if len(t) > 2 and t.lower() not in STOP_TERMS]
    if not filtered:
        return terms[0] if terms and terms[0] else "term"

    if difficulty == "medium":
        return rng.choice(filtered)

    ordered = sorted(filtered, key=len, reverse=(difficulty == "hard"))
    third = len(ordered) // 3
    if third == 0:
        return ordered[0]
    return ordered[rng.randrange(third)]


# -------------------- MULTIPLE CHOICE --------------------

def build_distractors(term: str, terms: Sequence[str], rng: random.Random) -> List[str]:
    pool = list(terms)
    rng.shuffle(pool)

    distractors: List[str] = []
    for t in pool:
        if t != term and len(t) > 2 and t not in distractors:
            distractors.append(t)
        if len(distractors) == DISTRACTOR_COUNT:
            return distractors

    padding = [o for o in GENERIC_OPTIONS if o != term and o not in distractors]
    rng.shuffle(padding)
    return distractors + padding[:DISTRACTOR_COUNT - len(distractors)]


def make_multiple_choice(sentence: str, terms: Sequence[str], source_document_id: Optional[int],
                         difficulty: str, rng: random.Random) -> QuizQuestion:
    level = resolve_difficulty(difficulty, rng)
    term = select_term(terms, level, rng)

    choices = [term] + build_distractors(term, terms, rng)
    rng.shuffle(choices)

    return QuizQuestion(
        id=new_id(rng),
        text=blank_first(sentence, term, BLANK),
        type="multiple-choice",
        choices=choices,
        correct_answer=term,
        source_document_id=source_document_id,
        difficulty=level,
    )


# -------------------- TRUE / FALSE --------------------

def falsify(sentence: str, rng: random.Random) -> str:
    """Turn a statement into a false one: negate a verb, swap a noun, or prefix a denial."""
    if rng.random() < 0.5 and has_verb(sentence):
        negated = negate_verb_phrase(sentence)
        if negated is not None:
            return negated

    nouns = noun_spans(sentence)
    if nouns:
        span = rng.choice(nouns)
        noun = sentence[span[0]:span[1]].lower()
        replacement = rng.choice([n for n in REPLACEMENT_NOUNS if n != noun])
        return replace_span(sentence, span, replacement)

    return "It is not the case that " + sentence.lower()


def make_true_false(sentence: str, source_document_id: Optional[int],
                    difficulty: str, rng: random.Random) -> QuizQuestion:
    level = resolve_difficulty(difficulty, rng)
    if rng.random() < 0.5:
        text, answer = sentence, "True"
    else:
        text, answer = falsify(sentence, rng), "False"

    return QuizQuestion(
        id=new_id(rng),
        text=text,
        type="true-false",
        choices=list(TRUE_FALSE_CHOICES),
        correct_answer=answer,
        source_document_id=source_document_id,
        difficulty=level,
    )


# -------------------- SHORT ANSWER --------------------

def make_short_answer(sentence: str, terms: Sequence[str], source_document_id: Optional[int],
                      difficulty: str, rng: random.Random) -> QuizQuestion:
    level = resolve_difficulty(difficulty, rng)
    term = select_term(terms, level, rng)

    if term in sentence:
        text = blank_first(sentence, term, BLANK)
    else:
        text = f'What is meant by "{term}" in the context of this material?'

    return QuizQuestion(
        id=new_id(rng),
        text=text,
        type="short-answer",
        correct_answer=term,
        source_document_id=source_document_id,
        difficulty=level,
    )
