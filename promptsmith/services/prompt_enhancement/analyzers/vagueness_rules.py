"""
Rule-based vagueness classifier.
Scores a prompt 0-100 (higher = more vague) from word lists and regexes.
"""

import logging
import re
from typing import List

from ..models import (
    AnalysisResult,
    AnalysisSource,
    IssueSeverity,
    IssueType,
    VaguenessIssue
)
from .patterns import (
    BROAD_TERMS,
    CONTEXT_PATTERNS,
    DETAIL_PATTERNS,
    HIGH_VALUE_PATTERNS,
    LEARNING_VERBS,
    LOW_VALUE_TERMS,
    MEDIUM_VALUE_TERMS,
    REQUIREMENT_PATTERNS,
    VAGUE_REFERENTS,
    VAGUE_VERBS,
    contains_word
)

logger = logging.getLogger(__name__)

MAX_VAGUENESS_SCORE = 100
RULES_CONFIDENCE = 0.7

# Penalty weights
VAGUE_VERB_WEIGHT = 30
LEARNING_VERB_WEIGHT = 25
MISSING_CONTEXT_WEIGHT = 35
VAGUE_REFERENT_WEIGHT = 10
BROAD_SCOPE_WEIGHT = 30
VERY_SHORT_BONUS = 20

# Word-count thresholds
VERY_SHORT_WORDS = 2
SHORT_WORDS = 5
CONTEXT_NEEDED_WORDS = 20

SPECIFICITY_OFFSET_MULTIPLIER = 0.8

# Specificity points and caps
HIGH_VALUE_POINTS, HIGH_VALUE_MAX = 15, 45
MEDIUM_VALUE_POINTS, MEDIUM_VALUE_MAX = 10, 40
LOW_VALUE_POINTS, LOW_VALUE_MAX = 5, 20
REQUIREMENT_POINTS, REQUIREMENT_MAX = 8, 16
LENGTH_BONUS_POINTS, LENGTH_BONUS_MAX, LENGTH_BONUS_DIVISOR = 2, 10, 5


def _distinct_terms(pattern: re.Pattern, text: str) -> int:
    return len({re.sub(r"\s+", " ", match.group(0).lower()) for match in pattern.finditer(text)})


def calculate_specificity_score(prompt: str) -> int:
    """
    Score concrete technical detail in a prompt.

    Args:
        prompt: Prompt text

    Returns:
        int: 0-100, higher = more specific
    """
    text = (prompt or "").strip()
    if not text:
        return 0

    high = sum(1 for pattern in HIGH_VALUE_PATTERNS if pattern.search(text))
    medium = _distinct_terms(MEDIUM_VALUE_TERMS, text)
    low = _distinct_terms(LOW_VALUE_TERMS, text)
    requirements = sum(1 for pattern in REQUIREMENT_PATTERNS if pattern.search(text))
    word_count = len(text.split())

    score = (
        min(high * HIGH_VALUE_POINTS, HIGH_VALUE_MAX)
        + min(medium * MEDIUM_VALUE_POINTS, MEDIUM_VALUE_MAX)
        + min(low * LOW_VALUE_POINTS, LOW_VALUE_MAX)
        + min(requirements * REQUIREMENT_POINTS, REQUIREMENT_MAX)
        + min((word_count // LENGTH_BONUS_DIVISOR) * LENGTH_BONUS_POINTS, LENGTH_BONUS_MAX)
    )
    return min(score, MAX_VAGUENESS_SCORE)


def has_specific_details(prompt: str) -> bool:
    """Check if prompt names concrete technical details"""
    return any(pattern.search(prompt) for pattern in DETAIL_PATTERNS)


class VaguenessClassifier:
    """
    Heuristic vagueness scorer.

    Vague verbs, vague referents, missing context and broad scope add
    penalties; the specificity score is subtracted from the total.
    """

    def __init__(self, threshold: int = 30):
        """
        Initialize classifier.

        Args:
            threshold: Score at or above which a prompt counts as vague
        """
        self.threshold = threshold

    def analyze(self, prompt: str) -> AnalysisResult:
        """
        Analyze a prompt for vagueness.

        Args:
            prompt: User prompt

        Returns:
            AnalysisResult: Score, ordered issues and flags with source RULES
        """
        text = (prompt or "").strip()
        if not text:
            return AnalysisResult(
                score=MAX_VAGUENESS_SCORE,
                issues=(VaguenessIssue(
                    type=IssueType.MISSING_CONTEXT,
                    severity=IssueSeverity.HIGH,
                    description="Prompt is empty",
                    suggestion="Describe what you need help with"
                ),),
                source=AnalysisSource.RULES,
                confidence=1.0,
                has_vague_verb=False,
                has_missing_context=True,
                has_unclear_scope=False,
                specificity_score=0,
                is_vague=True
            )

        issues: List[VaguenessIssue] = []
        words = text.lower().split()
        penalty = 0

        # Check 1: vague verbs
        has_vague_verb = any(contains_word(text, verb) for verb in VAGUE_VERBS)
        if has_vague_verb:
            penalty += VAGUE_VERB_WEIGHT
            issues.append(VaguenessIssue(
                type=IssueType.VAGUE_VERB,
                severity=IssueSeverity.MEDIUM,
                description='Prompt uses vague action verbs like "make", "fix", "do"',
                suggestion="Use specific verbs: implement, refactor, debug, optimize, design"
            ))

        # Check 2: learning requests without objectives
        has_learning_verb = any(contains_word(text, verb) for verb in LEARNING_VERBS)
        if has_learning_verb:
            penalty += LEARNING_VERB_WEIGHT
            issues.append(VaguenessIssue(
                type=IssueType.UNCLEAR_SCOPE,
                severity=IssueSeverity.MEDIUM,
                description="Learning/explanation request lacks structure or learning objectives",
                suggestion="Specify: What aspects? How deep? What format? Examples needed?"
            ))

        # Check 3: missing technical context
        has_context = any(pattern.search(text) for pattern in CONTEXT_PATTERNS)
        has_missing_context = not has_context and len(words) < CONTEXT_NEEDED_WORDS
        if has_missing_context:
            penalty += MISSING_CONTEXT_WEIGHT
            issues.append(VaguenessIssue(
                type=IssueType.MISSING_CONTEXT,
                severity=IssueSeverity.HIGH if len(words) <= VERY_SHORT_WORDS else IssueSeverity.MEDIUM,
                description="Prompt lacks specific context (file paths, code references, project details)",
                suggestion="Specify: Which file? Which function? What technology stack? Current code?"
            ))

        # Check 4: vague referents in short prompts
        has_vague_referent = (
            len(words) < CONTEXT_NEEDED_WORDS
            and any(contains_word(text, referent) for referent in VAGUE_REFERENTS)
        )
        if has_vague_referent:
            penalty += VAGUE_REFERENT_WEIGHT
            issues.append(VaguenessIssue(
                type=IssueType.MISSING_CONTEXT,
                severity=IssueSeverity.LOW,
                description='Prompt refers to an unnamed target ("it", "this", "stuff")',
                suggestion="Name the exact file, function, component or error you mean"
            ))

        # Check 5: broad scope without requirements
        has_broad_terms = any(contains_word(text, term) for term in BROAD_TERMS)
        lacks_requirements = "?" not in text and not has_specific_details(text)
        has_unclear_scope = has_broad_terms and (len(words) < SHORT_WORDS or lacks_requirements)
        if has_unclear_scope:
            penalty += BROAD_SCOPE_WEIGHT
            issues.append(VaguenessIssue(
                type=IssueType.UNCLEAR_SCOPE,
                severity=IssueSeverity.MEDIUM,
                description="Request is too broad without clear requirements or constraints",
                suggestion="Define: What features? What technologies? Success criteria? Constraints?"
            ))

        if len(words) <= VERY_SHORT_WORDS:
            penalty += VERY_SHORT_BONUS

        specificity = calculate_specificity_score(text)
        raw_score = min(penalty, MAX_VAGUENESS_SCORE) - specificity * SPECIFICITY_OFFSET_MULTIPLIER
        score = int(max(0, min(MAX_VAGUENESS_SCORE, round(raw_score))))

        logger.debug(f"Rule score {score} (penalty {penalty}, specificity {specificity}) for: {text[:50]}")

        return AnalysisResult(
            score=score,
            issues=tuple(issues),
            source=AnalysisSource.RULES,
            confidence=RULES_CONFIDENCE,
            has_vague_verb=has_vague_verb,
            has_missing_context=has_missing_context,
            has_unclear_scope=has_unclear_scope,
            specificity_score=specificity,
            is_vague=score >= self.threshold
        )
