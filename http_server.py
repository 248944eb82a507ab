"""
Chat relay service.

POST /api/chat   {"message": "..."} → {"response": "..."}
GET  /api/health → provider / model / whether an API key is configured

Every failure still answers with a {"response": "..."} body so the chat
client can show it as a normal bubble:

  missing API key        → 500
  missing message        → 400
  no candidate returned  → 200 with an apology
  rate limited           → 429
  auth / network / other → 500

Run directly:  python http_server.py --provider groq --port 3001
"""

import argparse
import json
import os
import threading
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional, Tuple

from google.api_core import exceptions as google_exceptions
from openai import APIConnectionError

from config import DEFAULT_MODEL, DEFAULT_PROVIDER, MESSAGES, PROVIDERS, RELAY_PORT
from llm_helpers import LLMHelper

RATE_LIMITED = "rate_limited"
AUTH = "auth"
NETWORK = "network"
GENERIC = "generic"

_ERROR_STATUS = {RATE_LIMITED: 429, AUTH: 500, NETWORK: 500, GENERIC: 500}

_NETWORK_ERRORS = (APIConnectionError, google_exceptions.ServiceUnavailable, ConnectionError)


def _status_code(exc: Exception) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status
    code = getattr(exc, "code", None)  # google.api_core exceptions expose the HTTP status here
    if isinstance(code, int):
        return int(code)
    return None


def classify_error(exc: Exception) -> str:
    """Map a provider exception onto rate_limited / auth / network / generic."""
    status = _status_code(exc)
    if status == 429:
        return RATE_LIMITED
    if status in (401, 403):
        return AUTH
    if isinstance(exc, _NETWORK_ERRORS):
        return NETWORK

    text = str(exc)
    if "429" in text:
        return RATE_LIMITED
    if "401" in text or "403" in text or "API key not valid" in text:
        return AUTH
    if "ENOTFOUND" in text or "ECONNREFUSED" in text:
        return NETWORK
    return GENERIC


class RelayService:
    """Provider-bound request handling, independent of the HTTP layer."""

    def __init__(self, provider: str = DEFAULT_PROVIDER, model: Optional[str] = DEFAULT_MODEL, helper=None):
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider {provider!r}; choose one of {sorted(PROVIDERS)}")
        self.provider = provider
        self.settings = PROVIDERS[provider]
        self.model = model or self.settings["model"]
        self.api_key = os.getenv(self.settings["api_key_env"])
        if helper is None and self.api_key:
            helper = LLMHelper(provider, self.api_key, self.model)
        self.helper = helper

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key)

    def handle_chat(self, body) -> Tuple[int, dict]:
        """Return (HTTP status, JSON payload) for one chat request body."""
        timestamp = datetime.now().strftime("%H:%M:%S")
        print(f"\n[{timestamp}] New chat request received")

        if not self.api_key_configured or self.helper is None:
            env = self.settings["api_key_env"]
            print(f"  [relay] {env} not configured")
            return 500, {"response": MESSAGES["no_api_key"].format(env=env)}

        message = body.get("message") if isinstance(body, dict) else None
        if not isinstance(message, str) or not message.strip():
            print("  [relay] request without a message")
            return 400, {"response": MESSAGES["no_message"]}

        print(f"  [relay] user message: {message}")
        print(f"  [relay] calling {self.settings['display_name']} ({self.model})...")
        try:
            text = self.helper.complete(message)
        except Exception as e:
            kind = classify_error(e)
            print(f"  [relay] chat error ({kind}): {e}")
            if kind == GENERIC:
                return _ERROR_STATUS[kind], {"response": MESSAGES["generic"].format(detail=e)}
            return _ERROR_STATUS[kind], {"response": MESSAGES[kind]}

        if text is None:
            print("  [relay] no response candidates from provider")
            return 200, {"response": MESSAGES["no_candidate"]}

        print(f"  [relay] response received from {self.settings['display_name']}")
        return 200, {"response": text}

    def health(self) -> dict:
        return {
            "status": "ok",
            "ai_provider": self.settings["display_name"],
            "model": self.model,
            "api_key_configured": self.api_key_configured,
            "free_tier": self.settings["free_tier"],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class _RelayHandler(BaseHTTPRequestHandler):
    """Routes /api/chat and /api/health to the server's RelayService."""

    def _send_json(self, status: int, payload: dict):
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        if self.path != "/api/health":
            self._send_json(404, {"response": "Not found"})
            return
        self._send_json(200, self.server.relay.health())

    def do_POST(self):
        if self.path != "/api/chat":
            self._send_json(404, {"response": "Not found"})
            return
        try:
            length = int(self.headers.get("Content-Length", 0))
            if length < 0:
                raise ValueError(f"negative Content-Length: {length}")
            body = json.loads(self.rfile.read(length)) if length else {}
        except ValueError:  # bad length, bad UTF-8 and bad JSON all land here
            print("  [relay] malformed request body")
            self._send_json(400, {"response": MESSAGES["no_message"]})
            return
        status, payload = self.server.relay.handle_chat(body)
        self._send_json(status, payload)

    def log_message(self, *args):
        pass  # suppress per-request logs


def start_http_server(relay: RelayService, port: int = RELAY_PORT, host: str = "0.0.0.0") -> ThreadingHTTPServer:
    """Start the relay in a background daemon thread. Returns the server instance."""
    server = ThreadingHTTPServer((host, port), _RelayHandler)
    server.relay = relay
    thread = threading.Thread(target=server.serve_forever, daemon=True, name="relay-http")
    thread.start()
    return server


def _print_banner(relay: RelayService, port: int):
    print("\n" + "=" * 40)
    print(f"Relay running on http://localhost:{port}")
    print(f"AI provider: {relay.settings['display_name']}")
    print(f"Model:       {relay.model}")
    print("Endpoints:")
    print("   - POST /api/chat   (main chat endpoint)")
    print("   - GET  /api/health (health check)")
    print("=" * 40 + "\n")


def main():
    parser = argparse.ArgumentParser(description="MediBot chat relay service")
    parser.add_argument(
        "--provider",
        choices=sorted(PROVIDERS),
        default=DEFAULT_PROVIDER,
        help=f"LLM provider to relay to (default: {DEFAULT_PROVIDER})",
    )
    parser.add_argument(
        "--model",
        default=DEFAULT_MODEL,
        help="Override the provider's default model id",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=RELAY_PORT,
        help=f"Port for the relay HTTP server (default: {RELAY_PORT})",
    )
    args = parser.parse_args()

    relay = RelayService(args.provider, args.model)
    if relay.api_key_configured:
        print(f"  [relay] {relay.settings['api_key_env']} loaded successfully")
    else:
        print(f"\nError: {relay.settings['api_key_env']} environment variable not set.")
        print(f"Get a key from: {relay.settings['key_hint']}")
        print("Chat requests will return a configuration error until it is set.\n")

    server = start_http_server(relay, args.port)
    _print_banner(relay, args.port)
    try:
        threading.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        print("\nShutting down.")
        server.shutdown()


if __name__ == "__main__":
    main()
