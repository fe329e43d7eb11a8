#!/usr/bin/env python3
"""Example: Quickstart — organized-ai

Enable the filesystem server, open a session, and exchange one message.
Assumes an MCP server is listening on http://localhost:5001.

Usage:
    python examples/01_quickstart.py [CONFIG_DIR]

Requirements:
    pip install organized-ai
"""
from __future__ import annotations

import asyncio
import sys

import organized_ai
from organized_ai import OrganizedAI, OrganizedAIError


async def main(config_dir: str | None) -> None:
    print(f"organized-ai version: {organized_ai.__version__}")

    async with OrganizedAI(config_dir) as app:
        # Step 1: Enable a server that needs no API keys
        app.enable_server("filesystem-mcp")

        # Step 2: Create a local session; the server is not contacted yet
        session = app.create_session("filesystem-mcp", "File Explorer")
        print(f"Created session {session.id}")

        # Step 3: The first message creates the remote context
        try:
            reply = await app.send_message(session.id, "List the files in /tmp")
        except OrganizedAIError as exc:
            print(f"Exchange failed ({exc.code}): {exc}")
            return
        print(f"Assistant: {reply.content}")

        # Step 4: The session, context id included, is now on disk
        stored = app.get_session(session.id)
        print(f"Context: {stored.context_id}, messages: {len(stored.messages)}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
