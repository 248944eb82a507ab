"""
Rule matcher and knowledge table tests
"""
import pytest

from config import MESSAGES
from knowledge import DELIVERY_PROMPT, MEDICAL_KNOWLEDGE, format_advice
from matcher import DELIVER, FALLBACK, MEDICAL, TEXT, process_message


def _bullets(text: str):
    return [line[2:] for line in text.splitlines() if line.startswith("• ")]


class TestKnowledgeTable:
    """Static table contents"""

    def test_six_conditions_in_order(self):
        assert list(MEDICAL_KNOWLEDGE) == [
            "headache",
            "fever",
            "cold",
            "cough",
            "stomach ache",
            "acidity",
        ]

    def test_entries_are_read_only(self):
        entry = MEDICAL_KNOWLEDGE["fever"]
        with pytest.raises(AttributeError):
            entry.tablets = ("Aspirin",)
        assert isinstance(entry.suggestions, tuple)

    @pytest.mark.parametrize("condition", list(MEDICAL_KNOWLEDGE))
    def test_format_advice_lists_entry_in_order(self, condition):
        entry = MEDICAL_KNOWLEDGE[condition]
        text = format_advice(condition, entry)

        assert text.startswith(f"Medical Advice for {condition.upper()}:")
        assert _bullets(text) == list(entry.tablets) + list(entry.suggestions)
        assert text.endswith(DELIVERY_PROMPT)


class TestSymptomMatching:
    """Knowledge keyword lookup"""

    def test_headache_scenario(self):
        reply = process_message("I have a headache")

        assert reply.kind == MEDICAL
        assert reply.needs_confirmation is True
        bullets = _bullets(reply.response)
        assert bullets[:2] == ["Paracetamol 500mg", "Ibuprofen 400mg"]
        assert len(bullets) == 2 + 5
        assert reply.response.endswith("(Yes/No)")

    def test_case_insensitive(self):
        assert process_message("My STOMACH ACHE is back").kind == MEDICAL

    def test_first_table_entry_wins(self):
        # "cold" appears first in the text but "headache" comes first in the table
        reply = process_message("a cold and a headache")
        assert "Medical Advice for HEADACHE" in reply.response

    def test_unknown_text_falls_back(self):
        reply = process_message("asdkjfh")

        assert reply.kind == FALLBACK
        assert reply.response == MESSAGES["thinking"]
        assert reply.needs_confirmation is False


class TestGreeting:
    @pytest.mark.parametrize("text", ["hello there", "  Hi  ", "Hey!", "good morning doctor", "Good evening"])
    def test_greeting_prefixes(self, text):
        reply = process_message(text)
        assert reply.kind == TEXT
        assert reply.response == MESSAGES["greeting"]

    def test_greeting_must_be_a_prefix(self):
        assert process_message("well hello").kind == FALLBACK


class TestConfirmation:
    """Answers to the delivery prompt"""

    @pytest.mark.parametrize("text", ["yes", "Sure thing", "ok", "please do", "YES PLEASE"])
    def test_affirmative_delivers(self, text):
        reply = process_message(text, waiting_for_confirmation=True)
        assert reply.kind == DELIVER
        assert reply.response == MESSAGES["deliver"]

    @pytest.mark.parametrize("text", ["no", "No thanks", "not now"])
    def test_negative_declines(self, text):
        reply = process_message(text, waiting_for_confirmation=True)
        assert reply.kind == TEXT
        assert reply.response == MESSAGES["decline"]

    def test_affirmative_ignored_without_pending_prompt(self):
        assert process_message("yes").kind == FALLBACK

    def test_other_answer_falls_through_to_rules(self):
        assert process_message("I also have a fever", waiting_for_confirmation=True).kind == MEDICAL
        assert process_message("what about vitamins?", waiting_for_confirmation=True).kind == FALLBACK
