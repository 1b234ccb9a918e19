#!/usr/bin/env python
"""
Print the configuration the hosted assistant is expected to have.

Usage:
    python scripts/show_assistant_config.py
    python scripts/show_assistant_config.py --fetch

Without flags this prints the system instructions and the function
definitions to paste into the assistant. With --fetch it also retrieves the
assistant named by OPENAI_ASSISTANT_ID and lists the functions it actually
has configured, so drift is easy to spot.

Make sure your environment variables are properly set for --fetch:
- OPENAI_API_KEY
- OPENAI_ASSISTANT_ID
"""

import argparse
import asyncio
import sys
from dotenv import load_dotenv

load_dotenv(".env")

from cyberbot.assistant.client import AssistantClient
from cyberbot.exceptions import CyberBotError
from cyberbot.tools.definitions import ALL_FUNCTIONS, SYSTEM_PROMPT, functions_json
from cyberbot.utils.config import config


def print_expected_config():
    print("=" * 60)
    print("SYSTEM INSTRUCTIONS")
    print("=" * 60)
    print(SYSTEM_PROMPT.strip())
    print()
    print("=" * 60)
    print(f"FUNCTIONS ({len(ALL_FUNCTIONS)})")
    print("=" * 60)
    print(functions_json())


async def print_remote_config() -> int:
    if not config.OPENAI_ASSISTANT_ID:
        print("OPENAI_ASSISTANT_ID is not set")
        return 1

    try:
        async with AssistantClient() as client:
            assistant = await client.get_assistant(config.OPENAI_ASSISTANT_ID)
    except CyberBotError as e:
        print(f"Failed to fetch assistant: {e}")
        return 1

    configured = [
        tool.get("function", {}).get("name")
        for tool in assistant.get("tools", [])
        if tool.get("type") == "function"
    ]
    expected = [function["name"] for function in ALL_FUNCTIONS]

    print()
    print("=" * 60)
    print(f"REMOTE ASSISTANT: {assistant.get('name') or config.OPENAI_ASSISTANT_ID}")
    print("=" * 60)
    print(f"Model: {assistant.get('model')}")
    print(f"Configured functions: {', '.join(name for name in configured if name) or 'none'}")

    missing = [name for name in expected if name not in configured]
    if missing:
        print(f"Missing functions: {', '.join(missing)}")
        return 1

    print("All expected functions are configured")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Show the expected assistant configuration")
    parser.add_argument("--fetch", action="store_true", help="Also compare against the live assistant")
    args = parser.parse_args()

    print_expected_config()

    if args.fetch:
        sys.exit(asyncio.run(print_remote_config()))


if __name__ == "__main__":
    main()
