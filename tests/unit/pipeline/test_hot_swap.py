"""
Tests for replacing models while documents are being processed.
"""

import threading
import time

from conftest import FakeTagger, RecordingStage, trace

from lexiflow.documents.document import Document
from lexiflow.documents.language import Language
from lexiflow.pipelines.pipeline import Pipeline
from lexiflow.processing.tokenizer import FastTokenizer


class SlowStage(RecordingStage):
    def process(self, document):
        super().process(document)
        time.sleep(0.001)


def run_readers(pipeline, count, stop):
    results = []
    errors = []

    def reader(worker_id):
        i = 0
        while not stop.is_set():
            doc = Document(f"doc {worker_id}-{i}", Language.ENGLISH)
            try:
                pipeline.process_single(doc)
            except Exception as e:
                errors.append(e)
                return
            results.append(trace(doc))
            i += 1

    threads = [threading.Thread(target=reader, args=(n,)) for n in range(count)]
    for thread in threads:
        thread.start()
    return threads, results, errors


def test_replace_with_is_atomic_for_readers():
    """Every document sees either the whole old chain or the whole new one"""
    old_chain = ["SlowStage:old:0", "SlowStage:old:0"]
    new_chain = ["SlowStage:new:0", "SlowStage:new:0", "SlowStage:new:0"]
    pipeline = Pipeline([SlowStage(tag="old"), SlowStage(tag="old")])
    stop = threading.Event()

    threads, results, errors = run_readers(pipeline, 4, stop)
    for _ in range(10):
        replacement = Pipeline([SlowStage(tag="new") for _ in range(3)], version=2)
        pipeline.replace_with(replacement)
        time.sleep(0.005)
        pipeline.replace_with(Pipeline([SlowStage(tag="old"), SlowStage(tag="old")]))
        time.sleep(0.005)
    stop.set()
    for thread in threads:
        thread.join(timeout=5)

    assert not errors
    assert results
    assert all(r == old_chain or r == new_chain for r in results)


def test_update_model_while_processing():
    """Each document is tagged by exactly one tagger version"""
    pipeline = Pipeline([FastTokenizer(Language.ENGLISH), FakeTagger(Language.ENGLISH, version=1)])
    stop = threading.Event()

    threads, results, errors = run_readers(pipeline, 3, stop)
    for version in range(2, 30):
        updated = pipeline.update_model(
            FakeTagger(Language.ENGLISH, version=version).descriptor,
            FakeTagger(Language.ENGLISH, version=version),
        )
        assert updated
    stop.set()
    for thread in threads:
        thread.join(timeout=5)

    assert not errors
    assert all(r == ["FakeTagger:en"] for r in results)
    assert pipeline.get_models_list()[1].version == 29


def test_add_and_remove_while_processing():
    pipeline = Pipeline([SlowStage(tag="base")])
    stop = threading.Event()

    threads, results, errors = run_readers(pipeline, 3, stop)
    for _ in range(20):
        pipeline.add(SlowStage(tag="extra"))
        pipeline.remove_all(lambda p: p.tag == "extra")
    stop.set()
    for thread in threads:
        thread.join(timeout=5)

    assert not errors
    assert all(
        r in (["SlowStage:base:0"], ["SlowStage:base:0", "SlowStage:extra:0"]) for r in results
    )
    assert len(pipeline) == 1
