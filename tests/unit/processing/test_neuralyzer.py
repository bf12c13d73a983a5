"""
Unit tests for rule-based entity correction
"""

from lexiflow.documents.document import Document, EntityType
from lexiflow.documents.language import Language
from lexiflow.processing.neuralyzer import Neuralyzer
from lexiflow.processing.tokenizer import FastTokenizer


def tokenized(text):
    doc = Document(text, Language.ENGLISH)
    FastTokenizer().process(doc)
    return doc


def entities(document):
    return {t.value: [(e.type, e.tag) for e in t.entity_types] for t in document.tokens}


def test_forget_pattern_ignores_case_by_default():
    doc = tokenized("apple sells Apple phones")
    for token in doc.tokens:
        token.add_entity_type(EntityType("Organization"))
    neuralyzer = Neuralyzer(Language.ENGLISH)
    neuralyzer.teach_forget_pattern("Organization", "APPLE")

    neuralyzer.process(doc)

    assert entities(doc)["apple"] == []
    assert entities(doc)["Apple"] == []
    assert entities(doc)["phones"] == [("Organization", "S")]


def test_add_multi_token_pattern():
    doc = tokenized("She moved to New York City today")
    neuralyzer = Neuralyzer()
    neuralyzer.teach_add_pattern("Location", "New York City")

    neuralyzer.process(doc)

    labels = entities(doc)
    assert labels["New"] == [("Location", "B")]
    assert labels["York"] == [("Location", "I")]
    assert labels["City"] == [("Location", "E")]
    assert labels["today"] == []


def test_add_pattern_is_case_sensitive_by_default():
    doc = tokenized("paris and Paris")
    neuralyzer = Neuralyzer()
    neuralyzer.teach_add_pattern("City", "Paris")

    neuralyzer.process(doc)

    tokens = list(doc.tokens)
    assert tokens[0].entity_types == []
    assert [(e.type, e.tag) for e in tokens[2].entity_types] == [("City", "S")]


def test_add_replaces_existing_label_of_same_type():
    doc = tokenized("Paris")
    next(doc.tokens).add_entity_type(EntityType("City", "B"))
    neuralyzer = Neuralyzer()
    neuralyzer.teach_add_pattern("City", "Paris")

    neuralyzer.process(doc)

    assert entities(doc)["Paris"] == [("City", "S")]


def test_forget_runs_before_add():
    doc = tokenized("Berlin")
    neuralyzer = Neuralyzer()
    neuralyzer.teach_add_pattern("City", "Berlin")
    neuralyzer.teach_forget_pattern("City", "Berlin")

    neuralyzer.process(doc)

    assert entities(doc)["Berlin"] == [("City", "S")]
    assert neuralyzer.rules_count == 2
