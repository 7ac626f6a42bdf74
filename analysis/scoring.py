"""Content scoring engine.

Turns generated text plus a keyword list into the metrics stored on a
completed job: word count, reading time, a Flesch-style readability score,
per-keyword density and the composite "solid score" (0-100).

Everything here is pure and deterministic; identical input always yields an
identical ``ScoringResult``.
"""
import math
import re
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Sequence

_NON_WORD = re.compile(r"[^\w\s]")
_SENTENCE_BREAK = re.compile(r"[.!?]+")
_VOWEL_GROUP = re.compile(r"[aeiouy]+")

DEFAULT_READING_SPEED_WPM = 200


@dataclass
class ScoringResult:
    """Metrics computed for one piece of content."""
    word_count: int
    reading_time: int
    readability_score: float
    keyword_density: Dict[str, float] = field(default_factory=dict)
    solid_score: int = 0

    def to_dict(self) -> Dict:
        return asdict(self)


def tokenize(text: str) -> List[str]:
    """Lower-case, turn punctuation into whitespace and split."""
    return [token for token in _NON_WORD.sub(" ", text.lower()).split() if token]


def count_sentences(text: str) -> int:
    """Number of segments between runs of sentence terminators."""
    return len(_SENTENCE_BREAK.split(text))


def count_syllables(tokens: Sequence[str]) -> int:
    """Vowel-group runs per token, at least one per token."""
    return sum(max(1, len(_VOWEL_GROUP.findall(token))) for token in tokens)


def count_phrase(tokens: Sequence[str], phrase: Sequence[str]) -> int:
    """Count non-overlapping occurrences of ``phrase`` in ``tokens``."""
    size = len(phrase)
    if size == 0:
        return 0

    phrase = list(phrase)
    count = 0
    i = 0
    while i <= len(tokens) - size:
        if list(tokens[i:i + size]) == phrase:
            count += 1
            i += size
        else:
            i += 1
    return count


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ScoringEngine:
    """Scores content with fixed banding rules."""

    def __init__(self, reading_speed_wpm: int = DEFAULT_READING_SPEED_WPM):
        if reading_speed_wpm <= 0:
            raise ValueError("reading_speed_wpm must be positive")
        self.reading_speed_wpm = reading_speed_wpm

    def analyze(self, text: str, keywords: Sequence[str] = ()) -> ScoringResult:
        """Compute all metrics for ``text`` against ``keywords``."""
        text = text or ""
        tokens = tokenize(text)
        word_count = len(tokens)

        reading_time = math.ceil(word_count / self.reading_speed_wpm)
        readability = self.readability(text, tokens)
        density = self.keyword_density(tokens, keywords or ())

        solid_score = self.solid_score(word_count, reading_time, readability, density)

        return ScoringResult(
            word_count=word_count,
            reading_time=reading_time,
            readability_score=readability,
            keyword_density=density,
            solid_score=solid_score
        )

    def readability(self, text: str, tokens: Sequence[str]) -> float:
        """Flesch Reading Ease, clamped to [0, 100]; 0 for empty input."""
        words = len(tokens)
        sentences = count_sentences(text)
        if words == 0 or sentences == 0:
            return 0.0

        syllables = count_syllables(tokens)
        score = 206.835 - 1.015 * (words / sentences) - 84.6 * (syllables / words)
        return max(0.0, min(100.0, score))

    def keyword_density(self, tokens: Sequence[str], keywords: Sequence[str]) -> Dict[str, float]:
        """Percentage of the token stream taken by each keyword phrase."""
        density: Dict[str, float] = {}
        total = len(tokens)

        for keyword in keywords:
            phrase = tokenize(keyword)
            if not phrase:
                continue
            matches = count_phrase(tokens, phrase)
            density[keyword] = (matches / total) * 100 if total else 0.0

        return density

    def solid_score(
        self,
        word_count: int,
        reading_time: int,
        readability: float,
        keyword_density: Dict[str, float]
    ) -> int:
        """Sum the banded components into a 0-100 score.

        The keyword component is the mean of per-keyword bands and is left
        out entirely when there are no keywords.
        """
        score = 0.0

        # Word count (optimal: 1000-2500 words)
        if 1000 <= word_count <= 2500:
            score += 25
        elif word_count >= 500:
            score += 15
        else:
            score += 5

        # Reading time (optimal: 3-10 minutes)
        if 3 <= reading_time <= 10:
            score += 20
        elif reading_time >= 2:
            score += 12
        else:
            score += 5

        # Readability (optimal: 60-80)
        if 60 <= readability <= 80:
            score += 25
        elif readability >= 40:
            score += 15
        else:
            score += 5

        if keyword_density:
            bands = [self._density_points(value) for value in keyword_density.values()]
            score += sum(bands) / len(bands)

        return max(0, min(100, _round_half_up(score)))

    @staticmethod
    def _density_points(density: float) -> int:
        # Optimal density: 1-3%
        if 1 <= density <= 3:
            return 30
        if density >= 0.5:
            return 20
        return 5


def score_label(score: int) -> str:
    """Human readable bucket for a solid score."""
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Needs Improvement"
    return "Poor"


def recommendations(result: ScoringResult) -> List[str]:
    """Editing advice derived from a scoring result."""
    advice = []

    if result.word_count < 1000:
        advice.append("Consider adding more content (aim for 1000+ words)")
    elif result.word_count > 2500:
        advice.append("Consider condensing content for better engagement")

    if result.reading_time > 10:
        advice.append("Content may be too long for most readers")
    elif result.reading_time < 3:
        advice.append("Consider expanding content for more depth")

    if result.readability_score < 60:
        advice.append("Improve readability by using shorter sentences and simpler words")

    for keyword, density in result.keyword_density.items():
        if density > 3:
            advice.append(f'Keyword "{keyword}" density is too high ({density:.1f}%)')
        elif density < 0.5:
            advice.append(f'Consider using keyword "{keyword}" more frequently')

    return advice
