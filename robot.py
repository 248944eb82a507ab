"""
MedicalAssistantGraph – LangGraph turn router and interactive run loop.

Interaction states:

    idle ──(symptom match)──▶ awaiting_confirmation ──(yes)──▶ delivering
      ▲                              │                              │
      └──────(no / relay answer)─────┘◀──────(animation done)───────┘

Each user message runs the compiled graph once: the `match` node asks the
local rule matcher, then routes to `reply`, `advise`, `deliver` or `relay`.
While a delivery is playing, input is ignored until the animation calls
back.
"""

import asyncio
import queue as queue_module
import threading
from typing import Callable, List, Optional

from langgraph.graph import END, StateGraph

from animation import DELIVERY_SCRIPT, DeliveryAnimation
from arm import Arm
from config import MESSAGES
from matcher import DELIVER, FALLBACK, MEDICAL, TEXT, process_message
from relay_client import RelayClient, RelayUnavailable
from state import ConversationState, InteractionState, Message
from ws_server import action_queue, broadcast_pose, flush_action_queue, reset_event, update_state


class MedicalAssistantGraph:

    def __init__(
        self,
        relay: Optional[RelayClient] = None,
        delivery_runner: Optional[Callable[[Callable[[], None]], None]] = None,
        publish: Callable[[dict], None] = update_state,
        time_scale: float = 1.0,
    ):
        self.relay = relay or RelayClient()
        self.publish = publish
        self.time_scale = time_scale
        self.delivery_runner = delivery_runner or self._run_delivery_animation
        self.arm = Arm()
        self.interaction = InteractionState.IDLE
        self.messages: List[Message] = [{"role": "bot", "content": MESSAGES["welcome"]}]
        self._lock = threading.Lock()
        self.graph = self._build_graph()

    # ------------------------------------------------------------------
    # Message log
    # ------------------------------------------------------------------

    def _append(self, role: str, content: str):
        with self._lock:
            self.messages.append({"role": role, "content": content})
        if role == "bot":
            self._print_bot(content)
        self._publish()

    def _replace_last(self, content: str):
        """Swap the trailing placeholder bubble for the real answer."""
        with self._lock:
            self.messages[-1] = {"role": "bot", "content": content}
        self._print_bot(content)
        self._publish()

    def snapshot(self) -> dict:
        with self._lock:
            interaction = self.interaction
            messages = [dict(m) for m in self.messages]
        placeholder = (
            MESSAGES["placeholder_confirm"]
            if interaction is InteractionState.AWAITING_CONFIRMATION
            else MESSAGES["placeholder_default"]
        )
        return {
            "interaction": interaction.value,
            "messages": messages,
            "input_enabled": interaction is not InteractionState.DELIVERING,
            "placeholder": placeholder,
            "status": MESSAGES["delivering_status"] if interaction is InteractionState.DELIVERING else "",
        }

    def _publish(self):
        self.publish(self.snapshot())

    # ------------------------------------------------------------------
    # Node functions
    # Each node records the reply on state and moves `interaction` on.
    # ------------------------------------------------------------------

    def match_node(self, state: ConversationState) -> ConversationState:
        waiting = state["interaction"] is InteractionState.AWAITING_CONFIRMATION
        reply = process_message(state["user_input"], waiting)
        state["reply_kind"] = reply.kind
        state["bot_response"] = reply.response
        return state

    def _move_to(self, state: ConversationState, interaction: InteractionState):
        """Move both the turn state and the bot to `interaction`; nodes call this before publishing."""
        state["interaction"] = interaction
        with self._lock:
            self.interaction = interaction

    def reply_node(self, state: ConversationState) -> ConversationState:
        self._move_to(state, InteractionState.IDLE)
        self._append("bot", state["bot_response"])
        return state

    def advise_node(self, state: ConversationState) -> ConversationState:
        self._move_to(state, InteractionState.AWAITING_CONFIRMATION)
        self._append("bot", state["bot_response"])
        return state

    def deliver_node(self, state: ConversationState) -> ConversationState:
        self._move_to(state, InteractionState.DELIVERING)
        self._append("bot", state["bot_response"])
        return state

    def relay_node(self, state: ConversationState) -> ConversationState:
        self._move_to(state, InteractionState.IDLE)
        self._append("bot", state["bot_response"])  # "thinking" placeholder
        try:
            answer = self.relay.send(state["user_input"])
        except RelayUnavailable as e:
            print(f"  [relay] falling back to offline message: {e}")
            answer = MESSAGES["backend_down"]
        state["bot_response"] = answer
        self._replace_last(answer)
        return state

    # ------------------------------------------------------------------
    # LangGraph wiring
    # ------------------------------------------------------------------

    def _build_graph(self):
        workflow = StateGraph(ConversationState)
        workflow.add_node("match", self.match_node)
        workflow.add_node("reply", self.reply_node)
        workflow.add_node("advise", self.advise_node)
        workflow.add_node("deliver", self.deliver_node)
        workflow.add_node("relay", self.relay_node)

        workflow.set_entry_point("match")
        workflow.add_conditional_edges(
            "match",
            lambda state: state["reply_kind"],
            {TEXT: "reply", MEDICAL: "advise", DELIVER: "deliver", FALLBACK: "relay"},
        )
        for node in ("reply", "advise", "deliver", "relay"):
            workflow.add_edge(node, END)

        return workflow.compile()

    # ------------------------------------------------------------------
    # Turn handling
    # ------------------------------------------------------------------

    def handle_user_message(self, text: str) -> Optional[str]:
        """
        Process one user message. Returns the bot's reply, or None when the
        input was ignored (blank, or a delivery is in progress).
        """
        with self._lock:
            interaction = self.interaction
        if not text.strip() or interaction is InteractionState.DELIVERING:
            return None

        self._append("user", text)
        result = self.graph.invoke(
            {
                "interaction": interaction,
                "user_input": text,
                "reply_kind": "",
                "bot_response": "",
            }
        )
        with self._lock:
            self.interaction = result["interaction"]
        self._publish()

        if result["reply_kind"] == DELIVER:
            self.delivery_runner(self.handle_delivery_complete)
        return result["bot_response"]

    def handle_delivery_complete(self):
        with self._lock:
            self.interaction = InteractionState.IDLE
        self._append("bot", MESSAGES["delivered"])

    def _run_delivery_animation(self, on_complete: Callable[[], None]):
        """Play the delivery script on a background thread."""
        player = DeliveryAnimation(
            self.arm, DELIVERY_SCRIPT, on_frame=broadcast_pose, time_scale=self.time_scale
        )

        def _play():
            try:
                asyncio.run(player.play(on_complete))
            except Exception as e:
                print(f"  [delivery] animation failed: {e}")
                if not player.finished:
                    on_complete()

        threading.Thread(target=_play, daemon=True, name="delivery").start()

    def reset(self) -> bool:
        """Start the conversation over. Refused while the arm is moving."""
        with self._lock:
            if self.interaction is InteractionState.DELIVERING:
                return False
            self.interaction = InteractionState.IDLE
            self.messages = [{"role": "bot", "content": MESSAGES["welcome"]}]
        self._publish()
        return True

    # ------------------------------------------------------------------
    # Interactive run loop
    # ------------------------------------------------------------------

    def _print_bot(self, msg: str):
        print(f"\nBot: {msg}\n")

    def _ask_user(self) -> Optional[str]:
        """Block until a client (or the terminal) posts input. None means reset."""
        while True:
            if reset_event.is_set():
                reset_event.clear()
                return None
            try:
                return action_queue.get(timeout=0.2)
            except queue_module.Empty:
                continue

    def run(self):
        print("=" * 60)
        print("MediBot – medical assistant with robotic delivery")
        print("=" * 60)
        print("(Type 'quit' or 'exit' to end)\n")

        flush_action_queue()
        self._print_bot(MESSAGES["welcome"])
        self._publish()

        while True:
            user_input = self._ask_user()
            if user_input is None:
                if self.reset():
                    print("\n  [Reset: conversation restarted]\n")
                    self._print_bot(MESSAGES["welcome"])
                else:
                    print("\n  [Reset ignored: delivery in progress]\n")
                continue
            if self.handle_user_message(user_input) is None and user_input.strip():
                print("  [Input ignored: delivery in progress]")
