"""
Word-level helpers for the question synthesizers: term tokenization,
a lightweight part-of-speech tagger, verb negation and noun lookup.

Everything here works on nltk components that need no downloaded corpora,
so the service runs offline.
"""
import re
from typing import List, Optional, Sequence, Tuple

from nltk.tag import RegexpTagger, UnigramTagger
from nltk.tokenize import RegexpTokenizer


# -------------------- TOKENIZATION --------------------

TERM_TOKENIZER = RegexpTokenizer(r"\w+(?:[-'’]\w+)*")


def tokenize_terms(sentence: str) -> List[str]:
    return TERM_TOKENIZER.tokenize(sentence)


def term_spans(sentence: str) -> List[Tuple[int, int]]:
    return list(TERM_TOKENIZER.span_tokenize(sentence))


# -------------------- TAGGING --------------------

AUXILIARIES = {
    "is": "VBZ", "are": "VBP", "was": "VBD", "were": "VBD", "am": "VBP",
    "has": "VBZ", "have": "VBP", "had": "VBD",
    "does": "VBZ", "do": "VBP", "did": "VBD",
}
MODALS = {"can", "could", "will", "would", "shall", "should", "may", "might", "must"}

IRREGULAR_PAST = {
    "went": "go", "made": "make", "took": "take", "gave": "give", "found": "find",
    "became": "become", "began": "begin", "wrote": "write", "said": "say", "saw": "see",
    "came": "come", "got": "get", "knew": "know", "thought": "think", "told": "tell",
    "left": "leave", "led": "lead", "held": "hold", "brought": "bring", "built": "build",
    "grew": "grow", "ran": "run", "stood": "stand", "fell": "fall", "kept": "keep",
    "meant": "mean", "sent": "send", "spent": "spend", "won": "win", "lost": "lose",
    "paid": "pay", "felt": "feel", "chose": "choose", "drove": "drive", "rose": "rise",
    "taught": "teach", "caught": "catch", "fought": "fight", "sought": "seek", "struck": "strike",
}

FUNCTION_WORDS = {
    **{w: "DT" for w in ("the", "a", "an", "this", "that", "these", "those", "each", "every", "some", "any", "no", "all", "both")},
    **{w: "IN" for w in (
        "of", "in", "on", "at", "by", "for", "with", "from", "to", "into", "onto", "over", "under",
        "between", "among", "through", "during", "about", "against", "before", "after", "within",
        "without", "across", "along", "around", "because", "since", "until", "while", "than", "per", "via",
    )},
    **{w: "CC" for w in ("and", "or", "but", "nor", "yet", "so")},
    **{w: "PRP" for w in ("it", "he", "she", "they", "we", "you", "i", "them", "him", "her", "us", "me", "itself", "themselves")},
    **{w: "PRP$" for w in ("its", "his", "their", "our", "your", "my")},
    **{w: "WDT" for w in ("which", "who", "whom", "whose", "what", "when", "where", "why", "how")},
    **{w: "RB" for w in ("not", "n't", "never", "very", "also", "often", "always", "only", "usually", "too", "then", "there", "here")},
    "to": "TO",
}

LEXICON = {
    **FUNCTION_WORDS,
    **AUXILIARIES,
    **{w: "MD" for w in MODALS},
    **{w: "VBD" for w in IRREGULAR_PAST},
}

# Suffix heuristics in the style of the nltk book's regexp tagger
SUFFIX_PATTERNS = [
    (r"^-?[0-9]+(?:[.,][0-9]+)*$", "CD"),
    (r".*ing$", "VBG"),
    (r".*ed$", "VBD"),
    (r".*(?:ly)$", "RB"),
    (r".*(?:ous|ful|ive|able|ible|al|ic)$", "JJ"),
    (r".*(?:ates|izes|ises|ifies)$", "VBZ"),
    (r".*(?:ss|us|is)$", "NN"),
    (r".*s$", "NNS"),
    (r".*", "NN"),
]

TAGGER = UnigramTagger(model=LEXICON, backoff=RegexpTagger(SUFFIX_PATTERNS))

VERB_TAGS = {"MD", "VB", "VBD", "VBZ", "VBP", "VBG", "VBN"}
FINITE_VERB_TAGS = {"VBD", "VBZ", "VBP"}
NOUN_TAGS = {"NN", "NNS", "NNP"}


def tag_terms(terms: Sequence[str]) -> List[Tuple[str, str]]:
    """Tag terms, keeping the original casing in the output."""
    tagged = TAGGER.tag([t.lower() for t in terms])
    return [(term, tag) for term, (_, tag) in zip(terms, tagged)]


def has_verb(sentence: str) -> bool:
    return any(tag in VERB_TAGS for _, tag in tag_terms(tokenize_terms(sentence)))


def noun_spans(sentence: str) -> List[Tuple[int, int]]:
    spans = term_spans(sentence)
    tagged = tag_terms([sentence[s:e] for s, e in spans])
    return [
        span for span, (word, tag) in zip(spans, tagged)
        if tag in NOUN_TAGS and len(word) > 2 and word.isalpha()
    ]


# -------------------- NEGATION --------------------

def base_form(word: str) -> str:
    """Best-effort infinitive for a finite verb form."""
    w = word.lower()
    if w in IRREGULAR_PAST:
        return IRREGULAR_PAST[w]
    if w == "has":
        return "have"
    if w.endswith("ied") or w.endswith("ies"):
        return w[:-3] + "y"
    if w.endswith("ed"):
        stem = w[:-2]
        if len(stem) > 2 and stem[-1] == stem[-2] and stem[-1] not in "lsz":
            return stem[:-1]
        if stem.endswith(("c", "g", "v", "z", "u", "at", "iz", "is")):
            return stem + "e"
        return stem
    if w.endswith(("sses", "shes", "ches", "xes", "zzes", "oes")):
        return w[:-2]
    if w.endswith("s") and not w.endswith("ss"):
        return w[:-1]
    return w


def _match_case(original: str, replacement: str) -> str:
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def negate_verb_phrase(sentence: str) -> Optional[str]:
    """
    Negate the first verb phrase of a sentence.

    Auxiliaries and modals take a following "not" (or lose one they already
    have); a bare finite verb is rewritten with do-support. Returns None when
    no verb is found.
    """
    spans = term_spans(sentence)
    tagged = tag_terms([sentence[s:e] for s, e in spans])

    for i, (word, tag) in enumerate(tagged):
        lower = word.lower()
        if lower in AUXILIARIES or lower in MODALS:
            _, end = spans[i]
            if i + 1 < len(tagged) and tagged[i + 1][0].lower() == "not":
                _, not_end = spans[i + 1]
                return sentence[:end] + sentence[not_end:]
            return sentence[:end] + " not" + sentence[end:]

    for i, (word, tag) in enumerate(tagged):
        if tag in FINITE_VERB_TAGS:
            start, end = spans[i]
            if tag == "VBD":
                phrase = f"did not {base_form(word)}"
            elif tag == "VBZ":
                phrase = f"does not {base_form(word)}"
            else:
                phrase = f"do not {word.lower()}"
            return sentence[:start] + _match_case(word, phrase) + sentence[end:]

    for i, (word, tag) in enumerate(tagged):
        if tag in VERB_TAGS:
            start, end = spans[i]
            return sentence[:start] + _match_case(word, "not " + word.lower()) + sentence[end:]

    return None


def replace_span(sentence: str, span: Tuple[int, int], replacement: str) -> str:
    start, end = span
    return sentence[:start] + replacement + sentence[end:]


def blank_first(sentence: str, term: str, marker: str = "_______") -> str:
    return sentence.replace(term, marker, 1)


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()
