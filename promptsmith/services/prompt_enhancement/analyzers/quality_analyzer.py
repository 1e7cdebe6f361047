"""
Enhancement quality analyzer.
Measures what a rewrite improved over the original prompt.
"""

import logging
import re
from functools import lru_cache
from typing import Optional

from nltk.stem import PorterStemmer

from ..interfaces import IQualityAnalyzer
from ..models import (
    AnalysisResult,
    ImprovementBreakdown,
    IssueType,
    QualityResult,
    QualityScores
)
from .patterns import (
    ACTION_VERBS,
    FRAMEWORK_PATTERN,
    STOP_WORDS,
    TECH_OBJECTS,
    VAGUE_WORDS_PATTERN
)
from .vagueness_rules import VaguenessClassifier, calculate_specificity_score

logger = logging.getLogger(__name__)

SPECIFICITY_GAIN_NORMALIZER = 50

# Improvement thresholds
SPECIFICITY_THRESHOLD = 0.15
ACTIONABILITY_THRESHOLD = 0.3
ISSUE_COVERAGE_THRESHOLD = 0.5
RELEVANCE_THRESHOLD = 0.5

# Confidence weights
SPECIFICITY_WEIGHT = 0.35
ACTIONABILITY_WEIGHT = 0.25
ISSUE_COVERAGE_WEIGHT = 0.25
RELEVANCE_WEIGHT = 0.15

_stemmer = PorterStemmer()

_FILE_PATH = re.compile(r"(?:src|lib|app|components?|pages?|utils?)/[\w/.]+|[\w/]+\.[tj]sx?", re.IGNORECASE)
_LINE_NUMBER = re.compile(r"\bline\s+\d+|\bat\s+\d+|:\d+:\d+", re.IGNORECASE)
_NAMED_TOOL = re.compile(r"\b(with|using|via|through)\s+\w+", re.IGNORECASE)
_NUMBERED_STEP = re.compile(r"(?:^|\n)\s*\d+[.)]", re.MULTILINE)
_BULLET = re.compile(r"(?:^|\n)\s*[-•*]", re.MULTILINE)

# Resolution markers per issue type: (full credit, partial credit)
_COVERAGE_MARKERS = {
    IssueType.VAGUE_VERB: (
        (re.compile(r"\b(implement|refactor|debug|optimize|design|integrate|configure|migrate)\b", re.IGNORECASE),),
        re.compile(r"\b(step|phase|requirement|feature|endpoint|component|function)\b", re.IGNORECASE),
    ),
    IssueType.MISSING_CONTEXT: (
        (
            re.compile(r"\b(?:src|lib|app|components?)/[\w/.]+", re.IGNORECASE),
            re.compile(r"[\w/]+\.(ts|js|tsx|jsx|py|java)", re.IGNORECASE),
            re.compile(r"\bline\s+\d+", re.IGNORECASE),
        ),
        re.compile(r"\b(technology|framework|stack|file|directory|module)\b", re.IGNORECASE),
    ),
    IssueType.UNCLEAR_SCOPE: (
        (
            re.compile(r"\bwith\s+\w+(?:\s*,\s*\w+)+", re.IGNORECASE),
            re.compile(r"\b(feature|requirement|constraint|include|exclude)\b", re.IGNORECASE),
        ),
        re.compile(r"\b(should|must|need)\b", re.IGNORECASE),
    ),
}


@lru_cache(maxsize=4096)
def stem(word: str) -> str:
    """Porter stem of a lower-cased word"""
    return _stemmer.stem(word.lower())


_STEMMED_ACTION_VERBS = frozenset(stem(verb) for verb in ACTION_VERBS)
_STEMMED_TECH_OBJECTS = frozenset(stem(obj) for obj in TECH_OBJECTS)


def measure_specificity_gain(original: str, enhanced: str) -> float:
    """Normalized specificity gain; 50 points or more maps to 1.0"""
    raw_gain = calculate_specificity_score(enhanced) - calculate_specificity_score(original)
    return max(0.0, min(raw_gain / SPECIFICITY_GAIN_NORMALIZER, 1.0))


def measure_actionability(enhanced: str) -> float:
    """
    Score how actionable a prompt is without clarifying questions.

    Args:
        enhanced: Enhanced prompt

    Returns:
        float: 0-1, rounded to two decimals
    """
    score = 0.0
    stemmed_words = {stem(word) for word in enhanced.lower().split()}

    # Action verbs (up to 0.20)
    verb_count = len(stemmed_words & _STEMMED_ACTION_VERBS)
    has_verb = verb_count > 0
    score += min(verb_count * 0.1, 0.2)

    # Technical objects (up to 0.20)
    object_count = len(stemmed_words & _STEMMED_TECH_OBJECTS)
    score += min(object_count * 0.05, 0.2)

    # Verb + object combination (up to 0.15)
    if has_verb and object_count > 0:
        score += 0.1
        if object_count >= 2:
            score += 0.05

    # Concrete details (up to 0.15)
    if _FILE_PATH.search(enhanced):
        score += 0.05
    if _LINE_NUMBER.search(enhanced):
        score += 0.05
    if _NAMED_TOOL.search(enhanced):
        score += 0.05

    # Structure (up to 0.12)
    score += min(len(_NUMBERED_STEP.findall(enhanced)) * 0.03, 0.07)
    score += min(len(_BULLET.findall(enhanced)) * 0.02, 0.05)

    # Clarifying questions (up to 0.05)
    score += min(enhanced.count("?") * 0.02, 0.05)

    # Framework and language mentions (up to 0.10)
    frameworks = {match.lower() for match in FRAMEWORK_PATTERN.findall(enhanced)}
    score += min(len(frameworks) * 0.04, 0.1)

    # Penalties
    score -= min(len(VAGUE_WORDS_PATTERN.findall(enhanced)) * 0.05, 0.2)
    if not has_verb:
        score -= 0.1
    if len(enhanced) < 15 and not has_verb and object_count == 0:
        score -= 0.15

    return round(max(0.0, min(score, 1.0)), 2)


def measure_issue_coverage(original_analysis: AnalysisResult, enhanced: str) -> float:
    """
    Fraction of the original issues the rewrite resolves.

    Partial credit of 0.5 is given for weaker resolution markers; an
    analysis without issues is fully covered.
    """
    issues = original_analysis.issues
    if not issues:
        return 1.0

    covered = 0.0
    for issue in issues:
        full_markers, partial_marker = _COVERAGE_MARKERS[issue.type]
        if any(marker.search(enhanced) for marker in full_markers):
            covered += 1
        elif partial_marker.search(enhanced):
            covered += 0.5

    return min(covered / len(issues), 1.0)


def _significant_words(text: str):
    return [
        word for word in re.findall(r"[a-z0-9#+]+", text.lower())
        if len(word) > 2 and word not in STOP_WORDS
    ]


def measure_relevance(original: str, enhanced: str) -> float:
    """
    Share of the original's significant terms preserved in the rewrite.

    A term counts as preserved when the rewrite holds a word with the
    same stem or a word that starts with it. Originals under five
    characters get a neutral 0.5.
    """
    original_trimmed = original.strip().lower()
    if len(original_trimmed) < 5:
        return 0.5

    original_words = _significant_words(original_trimmed)
    if not original_words:
        return 0.5

    enhanced_words = re.findall(r"[a-z0-9#+]+", enhanced.lower())
    enhanced_stems = {stem(word) for word in enhanced_words}

    preserved = 0
    for word in original_words:
        if stem(word) in enhanced_stems or any(candidate.startswith(word) for candidate in enhanced_words):
            preserved += 1

    base_relevance = preserved / len(original_words)

    length_ratio = len(enhanced) / len(original)
    length_bonus = 0.1 if 1 < length_ratio < 20 else 0.0

    return min(base_relevance + length_bonus, 1.0)


class QualityAnalyzer(IQualityAnalyzer):
    """
    Rule-based rewrite quality measurement.
    Pure: the same inputs always produce the same result.
    """

    def __init__(self, classifier: Optional[VaguenessClassifier] = None):
        """
        Initialize analyzer.

        Args:
            classifier: Scorer used when no analysis of the original is supplied
        """
        self.classifier = classifier or VaguenessClassifier()

    def analyze(
        self,
        original: str,
        enhanced: str,
        original_analysis: Optional[AnalysisResult] = None
    ) -> QualityResult:
        """
        Compare a rewrite with its original.

        Args:
            original: Original prompt
            enhanced: Enhanced prompt
            original_analysis: Vagueness analysis of the original, if already computed

        Returns:
            QualityResult: Improvement flags, raw scores and weighted confidence
        """
        if not original or not enhanced:
            return QualityResult(
                improvements=ImprovementBreakdown(),
                scores=QualityScores(),
                confidence=0.0
            )

        analysis = original_analysis or self.classifier.analyze(original)

        scores = QualityScores(
            specificity_gain=measure_specificity_gain(original, enhanced),
            actionability=measure_actionability(enhanced),
            issue_coverage=measure_issue_coverage(analysis, enhanced),
            relevance=measure_relevance(original, enhanced)
        )

        improvements = ImprovementBreakdown(
            added_specificity=scores.specificity_gain >= SPECIFICITY_THRESHOLD,
            made_actionable=scores.actionability >= ACTIONABILITY_THRESHOLD,
            addressed_issues=scores.issue_coverage >= ISSUE_COVERAGE_THRESHOLD,
            stayed_on_topic=scores.relevance >= RELEVANCE_THRESHOLD
        )

        confidence = round(
            SPECIFICITY_WEIGHT * scores.specificity_gain
            + ACTIONABILITY_WEIGHT * scores.actionability
            + ISSUE_COVERAGE_WEIGHT * scores.issue_coverage
            + RELEVANCE_WEIGHT * scores.relevance,
            4
        )

        logger.debug(f"Quality scores {scores.to_dict()} -> confidence {confidence}")

        return QualityResult(improvements=improvements, scores=scores, confidence=confidence)
