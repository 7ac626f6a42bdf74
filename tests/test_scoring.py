"""Scoring engine unit tests."""
import pytest

from analysis.scoring import (
    ScoringEngine,
    ScoringResult,
    count_phrase,
    count_sentences,
    count_syllables,
    recommendations,
    score_label,
    tokenize
)


class TestTextHelpers:
    """Tests for tokenizing and counting helpers."""

    def test_tokenize_lowercases_and_strips_punctuation(self):
        """Test punctuation becomes whitespace."""
        assert tokenize("Hello, World! It's-fine.") == ["hello", "world", "it", "s", "fine"]

    def test_tokenize_empty(self):
        """Test empty text has no tokens."""
        assert tokenize("") == []
        assert tokenize("  ...  ") == []

    def test_count_sentences_includes_trailing_segment(self):
        """Test a terminated sentence counts its trailing empty segment."""
        assert count_sentences("One. Two!") == 3
        assert count_sentences("No terminator") == 1

    def test_count_syllables_minimum_one_per_token(self):
        """Test words without vowels still count one syllable."""
        assert count_syllables(["rhythm"]) == 1
        assert count_syllables(["tsk", "brr"]) == 2
        assert count_syllables(["reading"]) == 2

    def test_count_phrase_non_overlapping(self):
        """Test phrase matches do not overlap."""
        assert count_phrase(["go", "go", "go", "go"], ["go", "go"]) == 2
        assert count_phrase(["go", "go", "go"], ["go", "go"]) == 1

    def test_count_phrase_empty_phrase(self):
        """Test an empty phrase never matches."""
        assert count_phrase(["a", "b"], []) == 0


class TestScoringEngine:
    """Tests for ScoringEngine."""

    @pytest.fixture
    def engine(self):
        """Create scoring engine."""
        return ScoringEngine()

    def test_rejects_non_positive_reading_speed(self):
        """Test reading speed must be positive."""
        with pytest.raises(ValueError):
            ScoringEngine(reading_speed_wpm=0)

    def test_empty_text(self, engine):
        """Test empty content scores zero everywhere."""
        result = engine.analyze("", [])

        assert result.word_count == 0
        assert result.reading_time == 0
        assert result.readability_score == 0.0
        assert result.keyword_density == {}
        # Lowest band of each of the three always-present components
        assert result.solid_score == 15

    def test_keyword_density_percentage(self, engine):
        """Test density is matches over total tokens."""
        result = engine.analyze("the quick fox and the quick brown dog", ["quick"])

        assert result.word_count == 8
        assert result.keyword_density == {"quick": 25.0}

    def test_keyword_density_case_insensitive(self, engine):
        """Test keywords match regardless of case."""
        result = engine.analyze("Python python PYTHON rocks", ["PYTHON"])
        assert result.keyword_density["PYTHON"] == 75.0

    def test_multi_word_keyword(self, engine):
        """Test multi-word keywords match as phrases."""
        result = engine.analyze("go go go go", ["go go"])
        assert result.keyword_density["go go"] == 50.0

    def test_keyword_without_tokens_is_skipped(self, engine):
        """Test a keyword that tokenizes to nothing is left out."""
        result = engine.analyze("some words here", ["!!!", "words"])
        assert "!!!" not in result.keyword_density
        assert "words" in result.keyword_density

    def test_keyword_on_empty_text(self, engine):
        """Test density is zero when there are no tokens."""
        result = engine.analyze("", ["anything"])
        assert result.keyword_density == {"anything": 0.0}

    def test_readability_formula(self, engine):
        """Test the Flesch formula on a hand-counted text."""
        # 6 words, 3 sentence segments, 11 syllables
        result = engine.analyze("Reading is fun. Writing takes practice.")
        assert result.readability_score == pytest.approx(49.705)

    def test_readability_simple_text_is_high(self, engine):
        """Test short simple sentences read easily."""
        result = engine.analyze("The cat sat on the mat. The dog ran to the cat.")
        assert result.readability_score > 80

    def test_readability_clamped_to_zero(self, engine):
        """Test dense polysyllabic text clamps at zero."""
        result = engine.analyze("Extraordinary organizations institutionalize collaboration.")
        assert result.readability_score == 0.0

    def test_reading_time_rounds_up(self, engine):
        """Test reading time is ceil(words / wpm)."""
        assert engine.analyze("word " * 200).reading_time == 1
        assert engine.analyze("word " * 201).reading_time == 2

    def test_custom_reading_speed(self):
        """Test reading speed is configurable."""
        engine = ScoringEngine(reading_speed_wpm=100)
        assert engine.analyze("word " * 250).reading_time == 3

    def test_deterministic(self, engine):
        """Test identical input gives identical output."""
        text = "Urban gardens grow food. Urban gardening builds community!"
        keywords = ["urban", "garden"]
        assert engine.analyze(text, keywords) == engine.analyze(text, keywords)

    def test_long_unpunctuated_text_bands(self, engine):
        """Test banding on 1000 single-syllable words with no terminator."""
        text = "word " * 1000

        result = engine.analyze(text)
        # 25 (word count) + 20 (5 minutes) + 5 (readability clamps to 0)
        assert result.solid_score == 50

        with_keyword = engine.analyze(text, ["word"])
        # 100% density lands in the 0.5+ band
        assert with_keyword.solid_score == 70


class TestSolidScore:
    """Tests for the composite score."""

    @pytest.fixture
    def engine(self):
        """Create scoring engine."""
        return ScoringEngine()

    def test_perfect_score(self, engine):
        """Test every component in its optimal band."""
        assert engine.solid_score(1500, 5, 70.0, {"seo": 2.0}) == 100

    def test_keyword_bands_are_averaged(self, engine):
        """Test the keyword component is the mean of per-keyword bands."""
        # 25 + 20 + 25 + (30 + 5) / 2 = 87.5, rounded half up
        assert engine.solid_score(1500, 5, 70.0, {"a": 2.0, "b": 0.0}) == 88

    def test_no_keywords_omits_component(self, engine):
        """Test the keyword component is absent without keywords."""
        assert engine.solid_score(1500, 5, 70.0, {}) == 70

    def test_middle_bands(self, engine):
        """Test the second band of each component."""
        assert engine.solid_score(600, 2, 50.0, {"a": 0.7}) == 15 + 12 + 15 + 20

    def test_score_always_in_range(self, engine):
        """Test the score stays within 0-100 across band edges."""
        for words in (0, 499, 500, 999, 1000, 2500, 2501):
            for minutes in (0, 1, 2, 3, 10, 11):
                for readability in (0.0, 39.9, 40.0, 60.0, 80.0, 80.1, 100.0):
                    for density in ({}, {"k": 0.0}, {"k": 0.5}, {"k": 1.0}, {"k": 3.0}, {"k": 50.0}):
                        score = engine.solid_score(words, minutes, readability, density)
                        assert 0 <= score <= 100


class TestScoreReporting:
    """Tests for labels and recommendations."""

    def test_score_label(self):
        """Test label buckets."""
        assert score_label(95) == "Excellent"
        assert score_label(80) == "Excellent"
        assert score_label(60) == "Good"
        assert score_label(40) == "Needs Improvement"
        assert score_label(39) == "Poor"

    def test_recommendations_for_short_content(self):
        """Test short, hard-to-read content gets advice."""
        result = ScoringResult(
            word_count=300,
            reading_time=2,
            readability_score=30.0,
            keyword_density={"seo": 5.0, "rare": 0.1},
            solid_score=40
        )

        advice = recommendations(result)

        assert any("1000+ words" in line for line in advice)
        assert any("expanding content" in line for line in advice)
        assert any("readability" in line for line in advice)
        assert any('"seo" density is too high' in line for line in advice)
        assert any('keyword "rare" more frequently' in line for line in advice)

    def test_no_recommendations_for_optimal_content(self):
        """Test optimal content gets no advice."""
        result = ScoringResult(
            word_count=1500,
            reading_time=8,
            readability_score=70.0,
            keyword_density={"seo": 2.0},
            solid_score=100
        )
        assert recommendations(result) == []
