"""
Static FAQ lookup for FanBot's offline mode.

Questions are matched against entry keys first, then against keyword
families that point at well-known entries.
"""

from __future__ import annotations

import re

from fanbot.config import Configuration

DEFAULT_KEY = "default"

FALLBACK_DEFAULT_MESSAGE = (
    "Je suis FanBot, votre assistant personnel pour la Coupe du Monde 2030 ! "
    "Posez-moi une question (horaires, parking, transports, billetterie, "
    "règles du stade, etc.)."
)

# Checked in order after direct key matches
KEYWORD_FAMILIES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"hôtel|hotel|logement", re.IGNORECASE), "hotels"),
    (re.compile(r"transport|navette|métro|metro|bus", re.IGNORECASE), "transport"),
    (re.compile(r"billet|acheter|prix|paiement", re.IGNORECASE), "billetterie"),
    (re.compile(r"manger|restaurant|nourriture", re.IGNORECASE), "nourriture"),
    (re.compile(r"accessibilit|pmr", re.IGNORECASE), "accessibilité"),
    (re.compile(r"météo|meteo|température|temperature", re.IGNORECASE), "météo"),
]


class FaqResponder:
    """Answers questions from a keyword -> answer table."""

    def __init__(
        self, entries: dict[str, str], default_message: str | None = None
    ) -> None:
        self.entries = dict(entries)
        self.default_message = (
            self.entries.get(DEFAULT_KEY) or default_message or FALLBACK_DEFAULT_MESSAGE
        )

    @classmethod
    def from_file(cls, path: str, default_message: str | None = None) -> FaqResponder:
        return cls(Configuration.load_faq(path), default_message)

    def respond(self, question: str) -> str:
        """Return the best answer for ``question``, or the default message."""
        lower = question.lower()

        for key, answer in self.entries.items():
            if key == DEFAULT_KEY or not key:
                continue
            if key.lower() in lower:
                return answer

        for pattern, key in KEYWORD_FAMILIES:
            if pattern.search(question):
                return self.entries.get(key) or self.default_message

        return self.default_message
