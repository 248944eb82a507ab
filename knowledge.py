"""
Static medical knowledge table.

Keys are matched as plain substrings of the user's message, in the order
they appear here; the first hit wins.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class KnowledgeEntry:
    condition: str
    tablets: Tuple[str, ...]
    suggestions: Tuple[str, ...]


def _entry(condition: str, tablets, suggestions) -> KnowledgeEntry:
    return KnowledgeEntry(condition, tuple(tablets), tuple(suggestions))


MEDICAL_KNOWLEDGE = {
    e.condition: e
    for e in (
        _entry(
            "headache",
            ["Paracetamol 500mg", "Ibuprofen 400mg"],
            [
                "Rest in a quiet, dark room",
                "Stay hydrated - drink plenty of water",
                "Apply a cold compress to your forehead",
                "Avoid screens and bright lights",
                "If severe or persistent, consult a doctor",
            ],
        ),
        _entry(
            "fever",
            ["Paracetamol 650mg", "Ibuprofen 400mg"],
            [
                "Rest and get plenty of sleep",
                "Drink lots of fluids (water, juice, soup)",
                "Take a lukewarm bath",
                "Wear light clothing",
                "Monitor temperature regularly",
                "See a doctor if fever persists beyond 3 days",
            ],
        ),
        _entry(
            "cold",
            ["Cetirizine 10mg", "Paracetamol 500mg", "Vitamin C"],
            [
                "Rest and sleep adequately",
                "Drink warm fluids like tea, soup",
                "Gargle with warm salt water",
                "Use steam inhalation",
                "Eat nutritious food",
                "Consult doctor if symptoms worsen",
            ],
        ),
        _entry(
            "cough",
            ["Cough syrup (Dextromethorphan)", "Honey (natural remedy)"],
            [
                "Stay hydrated with warm liquids",
                "Use honey and lemon in warm water",
                "Avoid cold drinks and ice cream",
                "Use a humidifier in your room",
                "Avoid smoking and polluted areas",
                "See a doctor if cough persists beyond 2 weeks",
            ],
        ),
        _entry(
            "stomach ache",
            ["Antacid (Eno/Digene)", "Omeprazole 20mg"],
            [
                "Eat light, bland foods (rice, banana, toast)",
                "Avoid spicy and oily foods",
                "Drink plenty of water",
                "Apply a warm compress to stomach",
                "Avoid lying down immediately after eating",
                "Consult doctor if pain is severe or persistent",
            ],
        ),
        _entry(
            "acidity",
            ["Omeprazole 20mg", "Pantoprazole 40mg", "Antacid"],
            [
                "Avoid spicy and oily foods",
                "Eat smaller, frequent meals",
                "Don't lie down right after eating",
                "Avoid tea, coffee, alcohol",
                "Drink cold milk",
                "Elevate your head while sleeping",
            ],
        ),
    )
}

DELIVERY_PROMPT = "Would you like me to deliver the medicine via the robotic arm? (Yes/No)"
DISCLAIMER = "⚠️ Disclaimer: This is general advice. Please consult a healthcare professional."


def format_advice(condition: str, entry: KnowledgeEntry) -> str:
    """Render the advice card for a matched condition, ending in the yes/no prompt."""
    lines = [f"Medical Advice for {condition.upper()}:", "", "💊 Recommended Tablets:"]
    lines += [f"• {tablet}" for tablet in entry.tablets]
    lines += ["", "📋 Suggestions:"]
    lines += [f"• {suggestion}" for suggestion in entry.suggestions]
    lines += ["", DISCLAIMER, "", DELIVERY_PROMPT]
    return "\n".join(lines)
