"""Tokenization and domain vocabulary utilities."""
from __future__ import annotations

import re
from typing import Iterable, List, Set


# Latin alphanumerics plus the CJK Unified Ideographs block; everything else separates tokens.
_TOKEN_SPLIT = re.compile(r"[^a-z0-9一-龥]+", re.IGNORECASE)

AI_TOPIC_VOCABULARY = [
    "artificial intelligence",
    "machine learning",
    "deep learning",
    "neural network",
    "large language model",
    "language model",
    "llm",
    "transformer",
    "reinforcement learning",
    "natural language processing",
    "computer vision",
    "generative",
    "chatgpt",
    "gpt-",
    "人工智慧",
    "人工智能",
    "機器學習",
    "机器学习",
    "深度學習",
    "深度学习",
]

# Topic-lock query suffixes appended to the seed.
AI_QUERY_SUFFIXES = [
    "Artificial Intelligence",
    "machine learning",
    "deep learning",
    "large language model LLM",
]

# Abbreviation / zh-Hant term -> English long form used for query variants.
QUERY_SYNONYMS = [
    (re.compile(r"人工智慧|\bAI\b"), "Artificial Intelligence"),
    (re.compile(r"機器學習|\bML\b"), "Machine Learning"),
]


def token_set(text: str) -> Set[str]:
    return {tok for tok in _TOKEN_SPLIT.split((text or "").lower()) if len(tok) > 1}


def vocabulary_hits(text: str, vocabulary: Iterable[str]) -> int:
    blob = (text or "").lower()
    return sum(1 for term in vocabulary if term and term.lower() in blob)


def matches_vocabulary(text: str, vocabulary: Iterable[str]) -> bool:
    blob = (text or "").lower()
    return any(term and term.lower() in blob for term in vocabulary)


def clean_query(query: str) -> str:
    return re.sub(r"\s+", " ", str(query or "")).strip()


def limit_words(query: str, max_words: int) -> str:
    words = clean_query(query).split(" ")
    return " ".join(words[:max_words])


def uniq_strings(values: Iterable[str]) -> List[str]:
    """Trim, drop empties and drop case-insensitive repeats, keeping first-seen order."""
    seen = set()
    result = []
    for value in values:
        cleaned = clean_query(value)
        norm = cleaned.lower()
        if not cleaned or norm in seen:
            continue
        seen.add(norm)
        result.append(cleaned)
    return result
