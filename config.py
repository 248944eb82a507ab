"""
Static configuration: ports, provider settings and every canned string the
chatbot shows to the user.

Environment variables are read from a .env file next to this module (or in
the current directory) on import; values already set in the environment win.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

for _env_path in (Path(__file__).resolve().parent / ".env", Path.cwd() / ".env"):
    if _env_path.is_file():
        load_dotenv(dotenv_path=str(_env_path), override=False)
        break

# ---------------------------------------------------------------------------
# Ports and endpoints
# ---------------------------------------------------------------------------

RELAY_PORT = 3001
DEFAULT_PORT = 8000  # WebSocket server for UI clients
RELAY_URL = os.getenv("RELAY_URL", f"http://localhost:{RELAY_PORT}/api/chat")
RELAY_TIMEOUT = 10  # seconds the client waits for the relay

# ---------------------------------------------------------------------------
# LLM settings
# ---------------------------------------------------------------------------

LLM_TEMPERATURE = 0.7
LLM_MAX_TOKENS = 1024
LLM_TOP_P = 0.9

SYSTEM_PROMPT = (
    "You are a helpful medical assistant chatbot. Provide accurate, empathetic "
    "medical information and general health advice. Keep responses concise, clear, "
    "and easy to understand. Always remind users to consult healthcare professionals "
    "for serious medical concerns. Be friendly and supportive."
)

PROVIDERS = {
    "groq": {
        "display_name": "Groq",
        "model": "llama-3.3-70b-versatile",
        "model_name": "Llama 3.3 70B Versatile",
        "api_key_env": "GROQ_API_KEY",
        "key_hint": "https://console.groq.com",
        "base_url": "https://api.groq.com/openai/v1",
        "free_tier": True,
    },
    "gemini": {
        "display_name": "Google Gemini",
        "model": "gemini-1.5-flash",
        "model_name": "Gemini 1.5 Flash",
        "api_key_env": "GEMINI_API_KEY",
        "key_hint": "https://aistudio.google.com/app/apikey",
        "base_url": None,
        "free_tier": True,
    },
}

DEFAULT_PROVIDER = os.getenv("RELAY_PROVIDER", "groq")
DEFAULT_MODEL = os.getenv("RELAY_MODEL") or None  # None -> provider default

# ---------------------------------------------------------------------------
# Delivery animation
# ---------------------------------------------------------------------------

FRAME_INTERVAL = 1 / 60  # seconds between pose updates

# ---------------------------------------------------------------------------
# MESSAGES – single source of all user-facing strings
# ---------------------------------------------------------------------------

MESSAGES = {
    "welcome": "👋 Hello! I'm your medical assistant!\n\nTell me your symptoms and I'll help you! 💊",
    "greeting": (
        "Hello! 👋 I'm your medical assistant with robotic delivery system.\n\n"
        "I can help you with:\n"
        "• Medical queries (headache, fever, cold, etc.)\n"
        "• Medicine delivery via robotic arm\n\n"
        "What symptoms are you experiencing today?"
    ),
    "deliver": "Great! I'm dispatching the robotic arm to deliver your medicine. Please wait... 🦾💊",
    "decline": "No problem! Let me know if you need anything else. Take care! 😊",
    "thinking": "That's a good question. Let me think...",
    "delivered": "✅ Medicine delivered successfully! 💊\n\nThank you for using our service! Take care! 😊",
    "backend_down": (
        "⚠️ Backend server is not running. Please start the relay with "
        "'medibot-relay' in a separate terminal."
    ),
    "delivering_status": "🚀 Delivering Medicine...",
    "placeholder_confirm": "Type 'yes' or 'no'...",
    "placeholder_default": "Type your symptoms...",
    # Relay service responses
    "no_api_key": "⚠️ Server Error: {env} not configured. Please check server logs.",
    "no_message": "Please provide a message.",
    "no_candidate": "I apologize, I couldn't generate a proper response. Please try rephrasing your question.",
    "rate_limited": "I'm receiving too many requests right now. Please wait a few seconds and try again.",
    "auth": "Server configuration error. Please check the API key.",
    "network": "Network error. Please check your internet connection and try again.",
    "generic": "An error occurred: {detail}. Please try again.",
}
