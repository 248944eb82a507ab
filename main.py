import argparse
import os
import threading

from config import DEFAULT_PORT, RELAY_URL
from relay_client import RelayClient
from robot import MedicalAssistantGraph
from ws_server import action_queue, start_ws_server


def _terminal_input_loop():
    """Forward terminal keystrokes into the same action queue as WebSocket input."""
    while True:
        try:
            line = input("You: ").strip()
        except EOFError:
            break
        if line.lower() in ("quit", "exit"):
            print("\nBot: Goodbye! Take care.")
            os.kill(os.getpid(), 2)  # SIGINT → KeyboardInterrupt in main thread
            break
        if line:
            action_queue.put(line)


def main():
    parser = argparse.ArgumentParser(description="MediBot medical assistant with robotic delivery")
    parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port for the WebSocket server (default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "--relay-url",
        default=RELAY_URL,
        help=f"Chat relay endpoint for questions the local rules can't answer (default: {RELAY_URL})",
    )
    parser.add_argument(
        "--time-scale",
        type=float,
        default=1.0,
        help="Speed factor for the delivery animation, e.g. 2.0 plays twice as fast (default: 1.0)",
    )
    args = parser.parse_args()

    if args.time_scale <= 0:
        parser.error("--time-scale must be positive")

    server = start_ws_server(args.port)
    print(f"WebSocket server listening on port {args.port}")
    print(f"  ws://0.0.0.0:{args.port}  – state/pose push and input receive")
    print(f"Relay: {args.relay_url}")
    print("Terminal input also accepted. Type 'quit' or 'exit' to stop.\n")

    input_thread = threading.Thread(target=_terminal_input_loop, daemon=True)
    input_thread.start()

    robot = MedicalAssistantGraph(relay=RelayClient(args.relay_url), time_scale=args.time_scale)
    try:
        robot.run()
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        print("\nShutting down.")
        server.shutdown()


if __name__ == "__main__":
    main()
