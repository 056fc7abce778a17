"""Prompt builder that injects output format from JSON Schema."""
from __future__ import annotations

from typing import Any, Dict

from core.schema import AGENT_SCHEMAS, OutputFormatBuilder


class PromptBuilder:
    def __init__(self, schemas: Dict[str, Dict[str, Any]] | None = None):
        self.schemas = schemas if schemas is not None else AGENT_SCHEMAS

    def get_schema(self, agent_name: str) -> Dict[str, Any]:
        return self.schemas.get(agent_name, {})

    def build(self, agent_name: str, base_prompt: str, **values: Any) -> str:
        prompt = base_prompt
        for key, value in values.items():
            prompt = prompt.replace("{" + key + "}", str(value))
        subschema = self.get_schema(agent_name)
        if not subschema:
            return prompt.replace('{OUTPUT_FORMAT_SECTION}', '').rstrip()
        example = OutputFormatBuilder(subschema).build()
        section = "\n【輸出格式】\n請嚴格按以下 JSON 範例格式輸出：\n" + example
        return prompt.replace('{OUTPUT_FORMAT_SECTION}', section)
