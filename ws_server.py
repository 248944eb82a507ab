"""
WebSocket interface for chat UI clients.

The server pushes the conversation to all connected clients whenever it
changes, and streams arm poses while a delivery is playing:
    {"type": "state", "interaction": "...", "messages": [...], "input_enabled": bool, ...}
    {"type": "pose", "segment1": {...}, "segment2": {...}, "segment3": {...}, "medicine": {...}}

Clients send user input and button events:
    {"type": "action", "action": "send", "data": {"text": "I have a fever"}}
    {"type": "action", "action": "confirm"}     – same as typing "yes"
    {"type": "action", "action": "reset"}
"""

import asyncio
import json
import queue
import threading
from typing import Optional, Set

import websockets

from config import DEFAULT_PORT

# Last-known state, sent immediately to any newly connected client.
_ws_state: dict = {}

# User input from connected clients (and terminal) is placed here;
# robot._ask_user() blocks on this queue.
action_queue: queue.Queue = queue.Queue()

# Set when a client requests a conversation reset.
reset_event: threading.Event = threading.Event()

# All currently connected WebSocket clients (accessed only from the event loop).
_clients: Set = set()

# The asyncio event loop running the WebSocket server (set in start_ws_server).
_loop: Optional[asyncio.AbstractEventLoop] = None

# Button actions mapped to the text the matcher understands.
_ACTION_TEXT = {
    "confirm": "yes",
    "decline": "no",
}


def action_to_text(msg: dict) -> str:
    """Text to queue for an incoming client message ("" when there is nothing to send)."""
    if msg.get("type", "action") != "action":
        return ""
    action = msg.get("action", "")
    data = msg.get("data")
    if not isinstance(data, dict):
        data = {}
    if action == "send":
        text = data.get("text", "")
        return text if isinstance(text, str) else ""
    return _ACTION_TEXT.get(action, "")


async def _handler(websocket):
    """Handle a single WebSocket connection."""
    _clients.add(websocket)
    try:
        await websocket.send(json.dumps({"type": "state", **_ws_state}))
        async for raw in websocket:
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if not isinstance(msg, dict):
                continue

            if msg.get("action") == "reset":
                reset_event.set()
                print("\n  [app] reset requested")
                continue

            text = action_to_text(msg)
            if text:
                action_queue.put(text)
                print(f"\n  [app] '{text}'")
    except websockets.ConnectionClosed:
        pass
    finally:
        _clients.discard(websocket)


async def _broadcast(message: str):
    """Send a message to all connected clients."""
    if _clients:
        await asyncio.gather(
            *(c.send(message) for c in set(_clients)),
            return_exceptions=True,
        )


async def _serve(port: int):
    async with websockets.serve(_handler, "0.0.0.0", port):
        await asyncio.Future()  # run until cancelled


def _push(payload: dict):
    if _loop and _loop.is_running():
        asyncio.run_coroutine_threadsafe(_broadcast(json.dumps(payload)), _loop)


def update_state(data: dict):
    """Remember the current conversation snapshot and push it to all clients."""
    global _ws_state
    _ws_state = dict(data)
    _push({"type": "state", **_ws_state})


def broadcast_pose(pose: dict):
    """Stream one animation frame to all clients."""
    _push({"type": "pose", **pose})


def flush_action_queue():
    """Discard any input queued while it could not be handled."""
    while not action_queue.empty():
        try:
            action_queue.get_nowait()
        except queue.Empty:
            break


class _ServerHandle:
    """Returned by start_ws_server; provides a shutdown() method."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop

    def shutdown(self):
        self._loop.call_soon_threadsafe(self._loop.stop)


def start_ws_server(port: int = DEFAULT_PORT) -> _ServerHandle:
    """Start the WebSocket server in a background daemon thread."""
    global _loop
    _loop = asyncio.new_event_loop()

    def _run():
        asyncio.set_event_loop(_loop)
        _loop.run_until_complete(_serve(port))

    thread = threading.Thread(target=_run, daemon=True, name="ws-server")
    thread.start()
    return _ServerHandle(_loop)
