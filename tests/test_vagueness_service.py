import json

import pytest

from promptsmith.services.prompt_enhancement.errors import ModelImportError
from promptsmith.services.prompt_enhancement.models import AnalysisSource
from promptsmith.services.vagueness_classification import (
    LabeledPrompt,
    ScoringMode,
    VaguenessService,
    generate_seed_dataset
)
from promptsmith.services.vagueness_classification.classifiers.tfidf_vectorizer import TfIdfVectorizer, tokenize
from promptsmith.services.vagueness_classification.learning.model_store import ModelStore

SPECIFIC = "Fix the TypeError thrown in src/auth/login.ts on line 42 when the session token is missing"


@pytest.fixture(scope="module")
def trained_blob():
    service = VaguenessService()
    result = service.train_model(generate_seed_dataset())
    assert result.success
    return service.export_model()


@pytest.fixture
def trained_service(trained_blob):
    service = VaguenessService()
    service.import_model(trained_blob)
    return service


def test_untrained_service_uses_rules():
    service = VaguenessService()
    result = service.analyze_vagueness("fix it")

    assert not service.is_ml_ready()
    assert service.scoring_mode() == ScoringMode.RULES
    assert result.source == AnalysisSource.RULES
    assert result.score == 95
    assert result.is_vague


def test_empty_prompt_is_always_vague(trained_service):
    assert trained_service.analyze_vagueness("").is_vague
    assert VaguenessService(threshold=100).analyze_vagueness("  ").is_vague


@pytest.mark.parametrize("threshold", [-1, 101, "30", True])
def test_invalid_threshold_rejected(threshold):
    service = VaguenessService()
    with pytest.raises(ValueError):
        service.set_threshold(threshold)
    assert service.get_threshold() == 30


def test_threshold_applies_to_rules():
    service = VaguenessService()
    service.set_threshold(96)

    assert service.get_threshold() == 96
    assert not service.analyze_vagueness("fix it").is_vague


def test_seed_dataset_is_deterministic_and_labelled():
    first = generate_seed_dataset()
    second = generate_seed_dataset()

    assert first == second
    assert len({example.prompt.lower() for example in first}) == len(first)
    assert all(0 <= example.vagueness_score <= 100 for example in first)


def test_tokenize():
    assert tokenize("Fix src/App.tsx, a b!") == ["fix", "src", "app", "tsx"]


def test_vectorizer_idf():
    vectorizer = TfIdfVectorizer().fit(["fix it", "fix the login"])

    assert vectorizer.vocabulary == ["fix", "it", "login", "the"]
    assert vectorizer.transform("unknown words").sum() == 0


def test_training_produces_ml_scores(trained_service):
    info = trained_service.get_model_info()
    result = trained_service.analyze_vagueness("fix it")

    assert info["trained"]
    assert info["vocabulary_size"] > 0
    assert result.source in (AnalysisSource.ML, AnalysisSource.HYBRID)
    # Rule issues are kept alongside the model score
    assert result.has_vague_verb


def test_trained_model_ranks_vague_above_specific(trained_service):
    vague_score, _ = trained_service.analyze_with_ml_only("fix it")
    specific_score, _ = trained_service.analyze_with_ml_only(SPECIFIC)

    assert vague_score > specific_score


def test_scoring_mode_follows_model_confidence(trained_service):
    assert trained_service.scoring_mode(0.6) == ScoringMode.ML
    assert trained_service.scoring_mode(0.95) == ScoringMode.ML
    assert trained_service.scoring_mode(0.59) == ScoringMode.HYBRID
    assert trained_service.scoring_mode() == ScoringMode.HYBRID


def test_hybrid_score_blends_by_confidence(trained_service):
    prompt = "refactor the logging code"
    rules_score = trained_service.rules.analyze(prompt).score
    ml_score, confidence = trained_service.analyze_with_ml_only(prompt)
    result = trained_service.analyze_vagueness(prompt)

    if confidence >= 0.6:
        assert result.source == AnalysisSource.ML
        assert result.score == ml_score
    else:
        assert result.source == AnalysisSource.HYBRID
        assert result.score == int(round(confidence * ml_score + (1 - confidence) * rules_score))
    assert result.confidence == confidence


def test_failed_training_keeps_current_model(trained_service, trained_blob):
    empty = trained_service.train_model([])
    no_features = trained_service.train_model([LabeledPrompt("a", 90), LabeledPrompt("!", 10)])

    assert not empty.success
    assert empty.error == "Cannot train on empty dataset"
    assert not no_features.success
    assert trained_service.export_model() == trained_blob


def test_export_import_round_trip_is_exact(trained_blob):
    service = VaguenessService()
    service.import_model(json.loads(json.dumps(trained_blob)))

    assert service.export_model() == trained_blob
    original = VaguenessService()
    original.import_model(trained_blob)
    assert service.analyze_with_ml_only("make it work") == original.analyze_with_ml_only("make it work")


def test_exported_model_records_utc_training_time(trained_blob):
    assert trained_blob["trained_at"].endswith("+00:00")


def test_untrained_export_is_none():
    assert VaguenessService().export_model() is None


@pytest.mark.parametrize("mutate", [
    lambda blob: blob.pop("classifier"),
    lambda blob: blob["classifier"]["weights"].pop(),
    lambda blob: blob["vectorizer"]["idf_values"].clear(),
    lambda blob: blob.update(trained_at="not a date"),
])
def test_invalid_blob_rejected(trained_service, trained_blob, mutate):
    blob = json.loads(json.dumps(trained_blob))
    mutate(blob)

    with pytest.raises(ModelImportError):
        trained_service.import_model(blob)
    assert trained_service.export_model() == trained_blob


def test_reset_model_returns_to_rules(trained_service):
    trained_service.reset_model()

    assert not trained_service.is_ml_ready()
    assert trained_service.analyze_vagueness("fix it").source == AnalysisSource.RULES


def test_save_and_load(tmp_path, trained_service, trained_blob):
    store = ModelStore(str(tmp_path / "models" / "vagueness.json"))
    assert trained_service.save_model(store)
    assert not VaguenessService().save_model(ModelStore(str(tmp_path / "unused.json")))

    fresh = VaguenessService()
    assert fresh.load_model(store)
    assert fresh.export_model() == trained_blob
    assert [path.name for path in store.path.parent.iterdir()] == ["vagueness.json"]


def test_load_missing_model(tmp_path):
    assert not VaguenessService().load_model(ModelStore(str(tmp_path / "missing.json")))


def test_load_corrupt_model(tmp_path):
    path = tmp_path / "model.json"
    path.write_text("{not json")

    with pytest.raises(ModelImportError):
        VaguenessService().load_model(ModelStore(str(path)))


def test_store_delete(tmp_path, trained_blob):
    store = ModelStore(str(tmp_path / "model.json"))
    store.save(trained_blob)

    assert store.delete()
    assert not store.exists()
    assert not store.delete()
