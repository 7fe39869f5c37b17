#!/usr/bin/env python3
"""
DeviceLog QA - Interactive CLI launcher

Runs the question-answering session without installing the package.

Usage:
    python agent.py                          # Interactive session
    python agent.py --ask "list unique ward" # One question, then exit
    python agent.py --help                   # Show all options

Requirements:
    - MongoDB reachable at MONGO_URI (default mongodb://localhost:27017)
    - Ollama running with nomic-embed-text and mistral pulled
      (or provider 'google' in settings.yaml with GEMINI_API_KEY set)
"""

import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from logqa.cli import main

if __name__ == "__main__":
    sys.exit(main())
