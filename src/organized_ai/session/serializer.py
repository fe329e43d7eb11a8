"""Session serialization.

``sessions.json`` is a JSON array of session records with camelCase keys.
YAML output is offered for human-readable exports.

Classes
-------
- SessionSerializer  — serialize/deserialize session lists to JSON or YAML
"""
from __future__ import annotations

import json
from typing import Any, Iterable, Literal

import yaml
from pydantic import TypeAdapter

from organized_ai.session.state import Session

_SESSION_LIST = TypeAdapter(list[Session])


class SessionSerializer:
    """Convert ordered session collections to and from text documents.

    Order is preserved in both directions.
    """

    def to_data(self, sessions: Iterable[Session]) -> list[dict[str, Any]]:
        return [session.model_dump(mode="json", by_alias=True) for session in sessions]

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    def to_json(self, sessions: Iterable[Session], *, indent: int = 2) -> str:
        return json.dumps(self.to_data(sessions), indent=indent)

    def from_json(self, raw: str) -> list[Session]:
        """Parse a JSON array of session records.

        Raises
        ------
        pydantic.ValidationError
            If ``raw`` is not valid JSON or a record is malformed.
        """
        return _SESSION_LIST.validate_json(raw)

    # ------------------------------------------------------------------
    # YAML
    # ------------------------------------------------------------------

    def to_yaml(self, sessions: Iterable[Session]) -> str:
        return yaml.safe_dump(
            self.to_data(sessions), default_flow_style=False, allow_unicode=True, sort_keys=False
        )

    def from_yaml(self, raw: str) -> list[Session]:
        return _SESSION_LIST.validate_python(yaml.safe_load(raw) or [])

    # ------------------------------------------------------------------
    # Format dispatch
    # ------------------------------------------------------------------

    def serialize(
        self, sessions: Iterable[Session], format: Literal["json", "yaml"] = "json"
    ) -> str:
        if format == "yaml":
            return self.to_yaml(sessions)
        return self.to_json(sessions)

    def deserialize(self, raw: str, format: Literal["json", "yaml"] = "json") -> list[Session]:
        if format == "yaml":
            return self.from_yaml(raw)
        return self.from_json(raw)
