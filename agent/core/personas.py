from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, TypeAdapter

from agent.core.errors import UnknownPersonaError


DEFAULT_PERSONA_ID = "general"


class Persona(BaseModel):
    id: str
    name: str
    description: str
    prompt: str


class PersonaTable:
    """Persona id -> prompt text, loaded once at startup from a JSON file."""

    def __init__(self, personas: List[Persona], default_id: str = DEFAULT_PERSONA_ID) -> None:
        if not personas:
            raise ValueError("Persona table is empty")
        self._by_id: Dict[str, Persona] = {p.id: p for p in personas}
        self.default = self._by_id.get(default_id, personas[0])

    @classmethod
    def from_file(cls, path: Path) -> "PersonaTable":
        with Path(path).open(encoding="utf-8") as f:
            data = json.load(f)
        return cls(TypeAdapter(List[Persona]).validate_python(data))

    def all(self) -> List[Persona]:
        return list(self._by_id.values())

    def get(self, persona_id: str) -> Persona:
        try:
            return self._by_id[persona_id]
        except KeyError:
            raise UnknownPersonaError(persona_id) from None

    def resolve_prompt(self, system_prompt: Optional[str], persona_id: Optional[str]) -> str:
        """Explicit prompt text wins, then the persona id, then the default persona."""
        if system_prompt and system_prompt.strip():
            return system_prompt
        if persona_id:
            return self.get(persona_id).prompt
        return self.default.prompt
