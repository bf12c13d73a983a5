"""
Tests for storing and reconstructing pipelines, and for the construction
helpers that assemble pipelines from stored models.
"""

from unittest.mock import patch

import pytest
from structlog.testing import capture_logs
from conftest import FakeEntityRecognizer, FakeSentenceDetector, FakeTagger

from lexiflow.core.exceptions.custom_exceptions import (
    ModelNotFoundError,
    PipelineError,
    StorageError,
)
from lexiflow.documents.language import Language
from lexiflow.models.descriptor import LATEST_VERSION, ModelDescriptor, PipelineData
from lexiflow.pipelines.pipeline import (
    PIPELINE_KIND,
    SENTENCE_DETECTOR_KIND,
    TAGGER_KIND,
    Pipeline,
)
from lexiflow.processing.tokenizer import FastTokenizer
from lexiflow.storage.disk import DiskModelStore
from lexiflow.storage.memory import InMemoryModelStore


def save_stages(store, *stages):
    for stage in stages:
        store.save(stage.descriptor, stage)


def pipeline_record(language=Language.ENGLISH, version=0, tag=""):
    return ModelDescriptor(language, PIPELINE_KIND, tag, version)


class VanishingStore(InMemoryModelStore):
    """Reports every model as present but only loads what was saved."""

    def _exists_exact(self, descriptor):
        return True


class TestStore:
    def test_store_keeps_first_of_each_family(self, store):
        pipeline = Pipeline(
            [
                FastTokenizer(Language.ENGLISH),
                FakeTagger(Language.ENGLISH, version=1),
                FakeTagger(Language.ENGLISH, version=2),
            ],
            language=Language.ENGLISH,
        )

        pipeline.store(store)

        record = store.load(pipeline_record())
        assert record.processes == [
            ModelDescriptor(Language.ENGLISH, "FastTokenizer", "", 0),
            ModelDescriptor(Language.ENGLISH, "FakeTagger", "", 1),
        ]
        assert pipeline.data.processes == record.processes

    def test_store_does_not_write_stage_models(self, store):
        Pipeline([FakeTagger(Language.ENGLISH)], language=Language.ENGLISH).store(store)

        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_store_async(self, store):
        pipeline = Pipeline([FastTokenizer()], language=Language.FRENCH, version=2)

        await pipeline.store_async(store)

        assert store.exists(pipeline_record(Language.FRENCH, 2))


class TestFromStore:
    def test_round_trip(self, store):
        stages = [
            FastTokenizer(Language.ENGLISH),
            FakeTagger(Language.ENGLISH, version=1),
            FakeEntityRecognizer(Language.ENGLISH, version=2, tag="wiki"),
        ]
        save_stages(store, *stages)
        Pipeline(stages, language=Language.ENGLISH, version=3).store(store)

        loaded = Pipeline.from_store(Language.ENGLISH, version=3, store=store)

        assert loaded.version == 3
        assert loaded.get_models_descriptions() == [s.descriptor for s in stages]
        assert all(a is not b for a, b in zip(loaded.get_models_list(), stages))

    def test_missing_model_is_dropped(self, store):
        tagger = FakeTagger(Language.ENGLISH, version=1)
        recognizer = FakeEntityRecognizer(Language.ENGLISH, version=1)
        save_stages(store, FastTokenizer(Language.ENGLISH), recognizer)
        Pipeline(
            [FastTokenizer(Language.ENGLISH), tagger, recognizer], language=Language.ENGLISH
        ).store(store)

        loaded = Pipeline.from_store(Language.ENGLISH, store=store)

        assert [p.kind for p in loaded.get_models_list()] == [
            "FastTokenizer",
            "FakeEntityRecognizer",
        ]
        assert tagger.descriptor not in loaded.data.processes

    def test_missing_model_is_never_loaded(self, store):
        save_stages(store, FastTokenizer(Language.ENGLISH))
        Pipeline(
            [FastTokenizer(Language.ENGLISH), FakeTagger(Language.ENGLISH, version=1)],
            language=Language.ENGLISH,
        ).store(store)

        with patch.object(store, "load", wraps=store.load) as load:
            Pipeline.from_store(Language.ENGLISH, store=store)

        loaded = [call.args[0].kind for call in load.call_args_list]
        assert loaded == [PIPELINE_KIND, "FastTokenizer"]

    def test_vanished_model_is_dropped(self):
        store = VanishingStore()
        save_stages(store, FastTokenizer(Language.ENGLISH))
        store.save(
            pipeline_record(),
            PipelineData(
                [
                    ModelDescriptor(Language.ENGLISH, "FastTokenizer", "", 0),
                    ModelDescriptor(Language.ENGLISH, "FakeTagger", "", 4),
                ]
            ),
        )

        loaded = Pipeline.from_store(Language.ENGLISH, store=store)

        assert [p.kind for p in loaded.get_models_list()] == ["FastTokenizer"]
        assert len(loaded.data.processes) == 1

    def test_duplicate_family_keeps_first(self, store):
        first = FakeTagger(Language.ENGLISH, version=1)
        second = FakeTagger(Language.ENGLISH, version=2)
        save_stages(store, FastTokenizer(Language.ENGLISH), first, second)
        store.save(
            pipeline_record(),
            PipelineData(
                [
                    ModelDescriptor(Language.ENGLISH, "FastTokenizer", "", 0),
                    first.descriptor,
                    second.descriptor,
                ]
            ),
        )

        loaded = Pipeline.from_store(Language.ENGLISH, store=store)

        assert loaded.get_models_descriptions()[1:] == [first.descriptor]

    def test_non_stage_object_is_dropped(self, store):
        bogus = ModelDescriptor(Language.ENGLISH, "Bogus", "", 0)
        store.save(bogus, {"not": "a stage"})
        save_stages(store, FastTokenizer(Language.ENGLISH))
        store.save(
            pipeline_record(),
            PipelineData([ModelDescriptor(Language.ENGLISH, "FastTokenizer", "", 0), bogus]),
        )

        loaded = Pipeline.from_store(Language.ENGLISH, store=store)

        assert len(loaded) == 1

    def test_missing_tokenizer_is_repaired(self, store):
        tagger = FakeTagger(Language.GERMAN, version=1)
        save_stages(store, tagger)
        Pipeline([tagger], language=Language.GERMAN).store(store)

        loaded = Pipeline.from_store(Language.GERMAN, store=store)

        head = loaded.get_models_list()[0]
        assert isinstance(head, FastTokenizer)
        assert head.language is Language.GERMAN
        assert len(loaded) == 2

    def test_dict_record_is_accepted(self, store):
        save_stages(store, FastTokenizer(Language.ENGLISH))
        store.save(
            pipeline_record(),
            PipelineData([ModelDescriptor(Language.ENGLISH, "FastTokenizer", "", 0)]).to_dict(),
        )

        loaded = Pipeline.from_store(Language.ENGLISH, store=store)

        assert len(loaded) == 1

    def test_undecodable_record_raises(self, store):
        store.save(pipeline_record(), ["garbage"])

        with pytest.raises(PipelineError):
            Pipeline.from_store(Language.ENGLISH, store=store)

    def test_missing_record_raises(self, store):
        with pytest.raises(ModelNotFoundError):
            Pipeline.from_store(Language.ENGLISH, version=9, store=store)

    def test_latest_version_resolves_to_highest(self, store):
        Pipeline([FastTokenizer()], language=Language.ENGLISH, version=1).store(store)
        Pipeline([FastTokenizer()], language=Language.ENGLISH, version=5).store(store)

        loaded = Pipeline.from_store(Language.ENGLISH, version=LATEST_VERSION, store=store)

        assert loaded.version == 5

    @pytest.mark.asyncio
    async def test_from_store_async(self, store):
        save_stages(store, FastTokenizer(Language.ENGLISH))
        Pipeline([FastTokenizer(Language.ENGLISH)], language=Language.ENGLISH).store(store)

        loaded = await Pipeline.from_store_async(Language.ENGLISH, store=store)

        assert len(loaded) == 1


class TestCheckIfHasModel:
    def test_queries_stored_record(self, store):
        tagger = FakeTagger(Language.ENGLISH, version=2)
        Pipeline([tagger], language=Language.ENGLISH, version=1, tag="news").store(store)

        def check(model, match_version=True):
            return Pipeline.check_if_has_model(
                Language.ENGLISH, 1, "news", model, match_version=match_version, store=store
            )

        assert check(tagger.descriptor)
        assert not check(tagger.descriptor.with_version(3))
        assert check(tagger.descriptor.with_version(3), match_version=False)

    def test_missing_record_raises(self, store):
        with pytest.raises(ModelNotFoundError):
            Pipeline.check_if_has_model(
                Language.ENGLISH, 0, "", FakeTagger().descriptor, store=store
            )


class TestConstructionHelpers:
    def _seed(self, store, language, sentence_version=1, tagger_version=1):
        store.save(
            ModelDescriptor(language, SENTENCE_DETECTOR_KIND, "", sentence_version),
            FakeSentenceDetector(language, sentence_version),
        )
        store.save(
            ModelDescriptor(language, TAGGER_KIND, "", tagger_version),
            FakeTagger(language, tagger_version),
        )

    def test_for_language_uses_latest_models(self, store):
        self._seed(store, Language.ENGLISH)
        self._seed(store, Language.ENGLISH, sentence_version=3, tagger_version=2)

        pipeline = Pipeline.for_language(Language.ENGLISH, store=store)

        stages = pipeline.get_models_list()
        assert [type(s) for s in stages] == [FastTokenizer, FakeSentenceDetector, FakeTagger]
        assert [s.version for s in stages] == [0, 3, 2]
        assert pipeline.language is Language.ENGLISH

    def test_for_language_optional_stages(self, store):
        pipeline = Pipeline.for_language(
            Language.ENGLISH, sentence_detector=False, tagger=False, store=store
        )

        assert [type(s) for s in pipeline.get_models_list()] == [FastTokenizer]

    def test_for_language_missing_model_raises(self, store):
        with pytest.raises(ModelNotFoundError):
            Pipeline.for_language(Language.ENGLISH, store=store)

    def test_for_language_non_stage_raises(self, store):
        store.save(ModelDescriptor(Language.ENGLISH, TAGGER_KIND, "", 0), "weights")

        with pytest.raises(StorageError):
            Pipeline.for_language(Language.ENGLISH, sentence_detector=False, store=store)

    @pytest.mark.asyncio
    async def test_for_language_async(self, store):
        self._seed(store, Language.FRENCH)

        pipeline = await Pipeline.for_language_async(Language.FRENCH, store=store)

        assert len(pipeline) == 3

    def test_for_languages(self, store):
        self._seed(store, Language.ENGLISH)
        self._seed(store, Language.FRENCH)

        pipeline = Pipeline.for_languages([Language.ENGLISH, Language.FRENCH], store=store)

        assert pipeline.language is Language.ANY
        assert [s.language for s in pipeline.get_models_list()] == [Language.ENGLISH] * 3 + [
            Language.FRENCH
        ] * 3

    def test_tokenizer_for_uses_language_detector(self, store):
        self._seed(store, Language.FRENCH)

        pipeline = Pipeline.tokenizer_for(Language.FRENCH, store=store)

        stages = pipeline.get_models_list()
        assert len(stages) == 2
        assert stages[1].language is Language.FRENCH

    def test_tokenizer_for_falls_back_to_english(self, store):
        self._seed(store, Language.ENGLISH)

        pipeline = Pipeline.tokenizer_for(Language.FRENCH, store=store)

        stages = pipeline.get_models_list()
        assert isinstance(stages[1], FakeSentenceDetector)
        assert stages[1].language is Language.ENGLISH

    def test_tokenizer_for_wildcard_uses_english(self, store):
        self._seed(store, Language.ENGLISH)

        pipeline = Pipeline.tokenizer_for(Language.ANY, store=store)

        assert len(pipeline) == 2

    def test_tokenizer_for_without_any_detector(self, store):
        pipeline = Pipeline.tokenizer_for(Language.GERMAN, store=store)

        stages = pipeline.get_models_list()
        assert len(stages) == 1
        assert isinstance(stages[0], FastTokenizer)


class TestReconstructionLogging:
    def test_vanished_model_logged_as_error(self):
        store = VanishingStore()
        save_stages(store, FastTokenizer(Language.ENGLISH))
        store.save(
            pipeline_record(),
            PipelineData(
                [
                    ModelDescriptor(Language.ENGLISH, "FastTokenizer", "", 0),
                    ModelDescriptor(Language.ENGLISH, "FakeTagger", "", 4),
                ]
            ),
        )

        with capture_logs() as logs:
            Pipeline.from_store(Language.ENGLISH, store=store)

        errors = [e for e in logs if e["log_level"] == "error"]
        assert len(errors) == 1
        assert "FakeTagger-en--v4" in errors[0]["event"]

    def test_missing_model_logged_as_info(self, store):
        Pipeline([FakeTagger(Language.ENGLISH, version=2)], language=Language.ENGLISH).store(store)

        with capture_logs() as logs:
            loaded = Pipeline.from_store(Language.ENGLISH, store=store)

        assert not [e for e in logs if e["log_level"] == "error"]
        assert any(
            e["log_level"] == "info" and "FakeTagger-en--v2" in e["event"] for e in logs
        )
        summary = [e for e in logs if "dropped" in e]
        assert summary[0]["dropped"] == 1
        assert len(loaded) == 1

    def test_sentence_detector_fallback_logged_as_warning(self, store):
        store.save(
            ModelDescriptor(Language.ENGLISH, SENTENCE_DETECTOR_KIND, "", 1),
            FakeSentenceDetector(Language.ENGLISH, 1),
        )

        with capture_logs() as logs:
            Pipeline.tokenizer_for(Language.FRENCH, store=store)

        warnings = [e for e in logs if e["log_level"] == "warning"]
        assert len(warnings) == 1
        assert "language fr" in warnings[0]["event"]
        assert "error" in warnings[0]

    def test_no_sentence_detector_logged_as_warning(self, store):
        with capture_logs() as logs:
            Pipeline.tokenizer_for(Language.GERMAN, store=store)

        warnings = [e["event"] for e in logs if e["log_level"] == "warning"]
        assert len(warnings) == 3
        assert "continuing without one" in warnings[-1]


def test_tokenizer_for_survives_unreadable_detector(tmp_path):
    """A stored detector whose class can no longer be imported is skipped"""
    store = DiskModelStore(tmp_path)
    path = (
        tmp_path / "en" / SENTENCE_DETECTOR_KIND / "_default" / "1.bin"
    )
    path.parent.mkdir(parents=True)
    path.write_bytes(b"clexiflow_removed_stage_module\nRemovedDetector\n.")

    with capture_logs() as logs:
        pipeline = Pipeline.tokenizer_for(Language.ENGLISH, store=store)

    assert [type(s) for s in pipeline.get_models_list()] == [FastTokenizer]
    warnings = [e for e in logs if e["log_level"] == "warning"]
    assert "Failed to read model" in warnings[0]["error"]
