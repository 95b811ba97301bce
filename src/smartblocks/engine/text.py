"""Plain-text heuristics over block content: keywords, topics, entities, sentiment, readability"""

import math
import re

from markdown_it import MarkdownIt

from smartblocks.core.models import ReadabilityMetrics, Sentiment


WORD_RE = re.compile(r"[A-Za-z][A-Za-z'-]*")
SENTENCE_RE = re.compile(r'[.!?]+')
VOWEL_GROUP_RE = re.compile(r'[aeiouy]+')

COMMON_TOPICS = ('technology', 'science', 'business', 'health', 'education')
POSITIVE_WORDS = {'good', 'great', 'excellent', 'amazing', 'wonderful'}
NEGATIVE_WORDS = {'bad', 'terrible', 'awful', 'horrible', 'disappointing'}

_md = MarkdownIt('commonmark')


def plain_text(markdown: str) -> str:
    """Render markdown to prose text, dropping markup and code blocks."""
    parts = []
    for tok in _md.parse(markdown):
        if tok.type != 'inline' or not tok.children:
            continue
        pieces = []
        for child in tok.children:
            if child.type in ('text', 'code_inline'):
                pieces.append(child.content)
            elif child.type in ('softbreak', 'hardbreak'):
                pieces.append(' ')
        parts.append(''.join(pieces))
    return '\n'.join(p for p in parts if p)


def words(text: str) -> list[str]:
    return WORD_RE.findall(text)


def extract_keywords(content: str, limit: int = 10) -> list[str]:
    """First distinct lowercased words longer than four characters."""
    seen = dict.fromkeys(w.lower() for w in words(plain_text(content)) if len(w) > 4)
    return list(seen)[:limit]


def extract_topics(content: str) -> list[str]:
    lowered = [w.lower() for w in words(content)]
    return [topic for topic in COMMON_TOPICS if any(topic in w for w in lowered)]


def extract_entities(content: str, limit: int = 5) -> list[str]:
    """Capitalized words, excluding those that only open a sentence."""
    entities = []
    for sentence in SENTENCE_RE.split(plain_text(content)):
        for w in words(sentence)[1:]:
            if w[0].isupper() and len(w) > 2 and w not in entities:
                entities.append(w)
    return entities[:limit]


def analyze_sentiment(content: str) -> Sentiment:
    lowered = [w.lower() for w in words(content)]
    positive = sum(w in POSITIVE_WORDS for w in lowered)
    negative = sum(w in NEGATIVE_WORDS for w in lowered)
    if positive > negative:
        return Sentiment.positive
    if negative > positive:
        return Sentiment.negative
    return Sentiment.neutral


def count_syllables(word: str) -> int:
    word = word.lower().strip("'-")
    if not word:
        return 0
    count = len(VOWEL_GROUP_RE.findall(word))
    if word.endswith('e') and not word.endswith(('le', 'ee')) and count > 1:
        count -= 1
    return max(count, 1)


def calculate_readability(content: str) -> ReadabilityMetrics:
    """Standard grade-level formulas; all zero for text without words."""
    text = plain_text(content)
    ws = words(text)
    if not ws:
        return ReadabilityMetrics()

    n_words = len(ws)
    n_sentences = max(len([s for s in SENTENCE_RE.split(text) if words(s)]), 1)
    n_letters = sum(len(w) for w in ws)
    syllables = [count_syllables(w) for w in ws]
    n_syllables = sum(syllables)
    n_complex = sum(1 for s in syllables if s >= 3)

    wps = n_words / n_sentences
    flesch_kincaid = 0.39 * wps + 11.8 * (n_syllables / n_words) - 15.59
    gunning_fog = 0.4 * (wps + 100 * n_complex / n_words)
    coleman_liau = 0.0588 * (100 * n_letters / n_words) - 0.296 * (100 * n_sentences / n_words) - 15.8
    smog = 1.043 * math.sqrt(n_complex * 30 / n_sentences) + 3.1291
    automated = 4.71 * (n_letters / n_words) + 0.5 * wps - 21.43

    grades = [flesch_kincaid, gunning_fog, coleman_liau, smog, automated]
    return ReadabilityMetrics(
        flesch_kincaid=round(flesch_kincaid, 2),
        gunning_fog=round(gunning_fog, 2),
        coleman_liau=round(coleman_liau, 2),
        smog=round(smog, 2),
        automated_readability=round(automated, 2),
        average_grade=round(sum(grades) / len(grades), 2),
    )
