#!/usr/bin/env python3
"""Example: Settings management — organized-ai

Walk the server catalog, store an API key, and enable a server that
requires it.  Uses an in-memory backend so nothing is written to disk.

Usage:
    python examples/02_settings.py
"""
from __future__ import annotations

from organized_ai import InMemoryBackend, MissingApiKeysError, SettingsManager


def main() -> None:
    settings = SettingsManager(InMemoryBackend())

    # Step 1: First launch seeds the catalog, every server disabled
    for server in settings.get_all_server_settings().values():
        keys = ", ".join(server.required_api_keys) or "none"
        print(f"{server.id:<16} {server.url:<24} keys: {keys}")

    # Step 2: Enabling without the required key is refused
    try:
        settings.enable_server("github-mcp")
    except MissingApiKeysError as exc:
        print(f"Refused: missing {exc.missing_keys}")

    # Step 3: Store the key, then enable
    settings.set_api_key("GITHUB_TOKEN", "ghp_example")
    settings.enable_server("github-mcp")
    print(f"github-mcp enabled: {settings.get_server_settings('github-mcp').enabled}")

    # Step 4: Point a server elsewhere and make it the CLI default
    settings.update_server_settings("filesystem-mcp", url="http://fs.internal:5001")
    settings.update_general_settings(default_server_id="filesystem-mcp", request_timeout=10)
    print(settings.get_general_settings())


if __name__ == "__main__":
    main()
