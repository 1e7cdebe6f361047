from promptsmith.services.prompt_enhancement.analyzers.quality_analyzer import (
    QualityAnalyzer,
    measure_actionability,
    measure_issue_coverage,
    measure_relevance,
    measure_specificity_gain,
    stem
)
from promptsmith.services.prompt_enhancement.analyzers.vagueness_rules import VaguenessClassifier


def test_stem_normalizes_inflections():
    assert stem("Validating") == stem("validate")
    assert stem("forms") == stem("form")


def test_specificity_gain_is_clamped():
    assert measure_specificity_gain("fix it", "fix it") == 0.0
    assert measure_specificity_gain("src/a.ts fetchUser() TypeError", "fix it") == 0.0
    gain = measure_specificity_gain(
        "fix it",
        "Fix the TypeError in src/auth/login.ts where fetchUser() fails on line 12 with jwt auth"
    )
    assert 0.0 < gain <= 1.0


def test_actionability_rewards_verbs_and_objects():
    weak = measure_actionability("maybe something")
    strong = measure_actionability(
        "Implement a login form component in React:\n"
        "1. validate the email field\n"
        "2. show an error message\n"
        "- use the auth service"
    )

    assert weak == 0.0
    assert strong > 0.5


def test_issue_coverage_without_issues_is_complete():
    analysis = VaguenessClassifier().analyze(
        "Refactor getUserById() in src/users/service.ts to use async/await"
    )
    assert analysis.issues == ()
    assert measure_issue_coverage(analysis, "anything") == 1.0


def test_issue_coverage_counts_resolved_issues():
    analysis = VaguenessClassifier().analyze("fix it")
    unresolved = measure_issue_coverage(analysis, "please fix it")
    resolved = measure_issue_coverage(
        analysis, "Debug the crash in src/app/main.ts and check the file for null access"
    )

    assert unresolved == 0.0
    assert resolved == 1.0


def test_relevance_short_original_is_neutral():
    assert measure_relevance("fix", "anything at all") == 0.5


def test_relevance_keeps_todo_app_terms():
    relevance = measure_relevance("make a todo app", "Implement a todo application with add/remove/complete")

    assert relevance >= 2 / 3


def test_relevance_preserves_terms():
    original = "improve dashboard loading"
    on_topic = measure_relevance(original, "Optimize the dashboard so it loads faster by improving caching")
    off_topic = measure_relevance(original, "Write a haiku about autumn")

    assert on_topic > 0.5
    assert off_topic < 0.5


def test_analyzer_is_deterministic():
    analyzer = QualityAnalyzer()
    enhanced = "Implement input validation for the signup form in src/forms/Signup.tsx using zod"

    first = analyzer.analyze("fix the form", enhanced)
    second = analyzer.analyze("fix the form", enhanced)

    assert first == second
    assert 0.0 <= first.confidence <= 1.0
    expected = round(
        0.35 * first.scores.specificity_gain
        + 0.25 * first.scores.actionability
        + 0.25 * first.scores.issue_coverage
        + 0.15 * first.scores.relevance,
        4
    )
    assert first.confidence == expected


def test_analyzer_handles_empty_input():
    result = QualityAnalyzer().analyze("", "something")

    assert result.confidence == 0.0
    assert result.improvements.count == 0
