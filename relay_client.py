"""
Client side of the chat relay: POST {"message": ...} to /api/chat and return
the "response" text.

The relay reports its own failures (rate limiting, bad API key, ...) as a
non-2xx status with a {"response": "..."} body; those texts are returned as
normal answers so they show up in the chat. Only a relay that cannot be
reached or that answers with something unreadable raises RelayUnavailable.
"""

import json
import urllib.error
import urllib.request

from config import RELAY_TIMEOUT, RELAY_URL


class RelayUnavailable(Exception):
    """The relay service could not be reached or gave no usable answer."""


def _extract_response(raw: bytes) -> str:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RelayUnavailable(f"Malformed relay response: {e}") from e
    text = data.get("response") if isinstance(data, dict) else None
    if not isinstance(text, str) or not text:
        raise RelayUnavailable("No response from server")
    return text


class RelayClient:
    def __init__(self, url: str = RELAY_URL, timeout: float = RELAY_TIMEOUT):
        self.url = url
        self.timeout = timeout

    def send(self, message: str) -> str:
        req = urllib.request.Request(
            self.url,
            data=json.dumps({"message": message}).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return _extract_response(resp.read())
        except urllib.error.HTTPError as e:
            print(f"  [relay] server error: {e.code}")
            body = e.read()
            return _extract_response(body)
        except (urllib.error.URLError, OSError) as e:
            print(f"  [relay] unreachable: {e}")
            raise RelayUnavailable(str(e)) from e
