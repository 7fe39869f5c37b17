"""
DeviceLog QA - Interactive CLI

Ask questions about device logs in the terminal.

Usage:
    logqa                                   # Interactive session
    logqa --ask "list deviceid and model"   # Answer one question and exit
    logqa --log-level DEBUG                 # Override the configured log level

Examples:
    show all logs for deviceid=ABC123
    list unique ward
    list deviceid, model where state Error
    why did the infusion pump on ward 4 raise alarms?

Type 'exit' or 'q' to quit.
"""

import sys
import logging
import argparse
from typing import List, Optional

from .agent.core.engine import LogQueryEngine, create_engine
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_TOKENS = ("exit", "q")


def is_exit(line: str) -> bool:
    """True if the line asks to end the session."""
    return line.strip().lower() in EXIT_TOKENS


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="logqa",
        description="Ask questions about device logs stored in MongoDB.",
    )
    parser.add_argument("--ask", metavar="QUESTION", help="answer one question and exit")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="override the configured log level",
    )
    return parser.parse_args(argv)


def answer_one(engine: LogQueryEngine, question: str) -> bool:
    """Print the answer to one question. Returns the turn's success flag."""
    result = engine.run(question)
    print(f"\n🤖 {result.output}\n")
    return result.success


def run_session(engine: LogQueryEngine) -> None:
    """Read questions until an exit token, Ctrl-C or end of input."""
    print("\n" + "=" * 60)
    print("💬 DeviceLog QA (type 'exit' or 'q' to quit)")
    print("=" * 60 + "\n")

    while True:
        try:
            line = input("🧠 You: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\n👋 Goodbye!")
            break

        if is_exit(line):
            print("\n👋 Goodbye!")
            break

        if not line:
            continue

        try:
            answer_one(engine, line)
        except Exception as e:
            # Unexpected failures end the turn, not the session
            logger.exception(f"Unexpected error answering '{line[:50]}'")
            print(f"\n❌ Error processing query: {e}\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    setup_logging(log_level=args.log_level)

    try:
        engine = create_engine()
    except Exception as e:
        logger.exception("Failed to initialize query engine")
        print(f"\n❌ Error initializing DeviceLog QA: {e}")
        return 1

    if args.ask is not None:
        return 0 if answer_one(engine, args.ask) else 1

    run_session(engine)
    return 0


if __name__ == "__main__":
    sys.exit(main())
