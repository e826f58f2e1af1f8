"""
Tests for the static FAQ responder.
"""

from __future__ import annotations

import json

import pytest

from fanbot.faq import FALLBACK_DEFAULT_MESSAGE, FaqResponder

ENTRIES = {
    "default": "Bonjour, je suis FanBot.",
    "parking": "Parkings officiels autour du stade.",
    "horaires": "Portes ouvertes 3h avant.",
    "transport": "Navettes gratuites.",
    "billetterie": "Achetez sur la page Billetterie.",
}


class TestFaqResponder:
    """Test question matching."""

    def test_direct_key_match_is_case_insensitive(self):
        faq = FaqResponder(ENTRIES)
        assert faq.respond("Où est le PARKING ?") == ENTRIES["parking"]

    def test_keyword_family_match(self):
        faq = FaqResponder(ENTRIES)
        assert faq.respond("Y a-t-il un métro ?") == ENTRIES["transport"]
        assert faq.respond("Comment acheter un billet ?") == ENTRIES["billetterie"]

    def test_family_without_entry_falls_back_to_default(self):
        faq = FaqResponder(ENTRIES)
        assert faq.respond("Un bon restaurant ?") == ENTRIES["default"]

    def test_unknown_question_gets_default(self):
        faq = FaqResponder(ENTRIES)
        assert faq.respond("Qui va gagner ?") == ENTRIES["default"]

    def test_default_key_is_never_matched_directly(self):
        faq = FaqResponder({"default": "D", "parking": "P"})
        assert faq.respond("by default") == "D"

    def test_default_message_precedence(self):
        assert FaqResponder({}, "Salut").default_message == "Salut"
        assert FaqResponder({}).default_message == FALLBACK_DEFAULT_MESSAGE
        assert FaqResponder({"default": "D"}, "Salut").default_message == "D"


class TestFaqFile:
    """Test loading entries from JSON."""

    def test_from_file(self, tmp_path):
        path = tmp_path / "faq.json"
        path.write_text(json.dumps(ENTRIES, ensure_ascii=False), encoding="utf-8")

        faq = FaqResponder.from_file(str(path))

        assert faq.entries == ENTRIES
        assert faq.default_message == ENTRIES["default"]

    def test_non_object_file_rejected(self, tmp_path):
        path = tmp_path / "faq.json"
        path.write_text('["parking"]', encoding="utf-8")

        with pytest.raises(ValueError, match="must map keywords"):
            FaqResponder.from_file(str(path))
