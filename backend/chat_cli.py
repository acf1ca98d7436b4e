"""
Terminal chat front end for the Garden Assistant gateway.

Commands:
    /clear      reset the displayed conversation (add --sync-clear to also delete it on the server)
    /history    show the history stored by the gateway
    /products   list recommended products
    /quit       exit

Usage:
    python chat_cli.py [--url http://localhost:5000] [--session user-123]
"""
import sys
import argparse
import logging
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from config import GATEWAY_URL
from models.conversation import Role
from services.chat_client import ChatClient, ChatClientError

logger = logging.getLogger(__name__)


def print_turn(role: Role, content: str) -> None:
    label = "You" if role == Role.USER else "Assistant"
    print(f"\n{label}: {content}")


def handle_command(client: ChatClient, command: str, sync_clear: bool) -> bool:
    """Run a slash command. Returns False when the loop should stop."""
    if command == "/quit":
        return False

    if command == "/clear":
        client.clear(sync_server=sync_clear)
        print_turn(Role.ASSISTANT, client.messages[0].content)
    elif command == "/history":
        for turn in client.fetch_history():
            print_turn(turn.role, turn.content)
    elif command == "/products":
        for product in client.products():
            print(f"  - {product['name']} (₹{product['price']}): {product['description']}")
    else:
        print(f"Unknown command: {command}")
    return True


def main():
    """Interactive chat loop."""
    parser = argparse.ArgumentParser(description="Chat with the Garden Assistant from the terminal")
    parser.add_argument("--url", default=GATEWAY_URL, help="Gateway base URL")
    parser.add_argument("--session", default=None, help="Session key (generated when omitted)")
    parser.add_argument("--sync-clear", action="store_true",
                        help="Make /clear delete the server-side history too")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Seconds to wait for a reply (waits indefinitely when omitted)")
    args = parser.parse_args()

    client = ChatClient(base_url=args.url, session_id=args.session, timeout=args.timeout)
    logger.info(f"Session: {client.session_id}")
    print_turn(Role.ASSISTANT, client.messages[0].content)

    try:
        while True:
            try:
                line = input("\n> ")
            except EOFError:
                break

            if line.strip().startswith("/"):
                try:
                    if not handle_command(client, line.strip(), args.sync_clear):
                        break
                except ChatClientError as e:
                    print(f"Error: {e}")
                continue

            turn = client.submit(line)
            if turn is not None:
                print_turn(turn.role, turn.content)
    except KeyboardInterrupt:
        pass
    finally:
        client.close()


if __name__ == "__main__":
    main()
