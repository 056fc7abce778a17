"""
JSON schemas for LLM outputs and helper utilities.
"""
from __future__ import annotations

import json
from typing import Any, Dict


QUERY_LIST_SCHEMA: Dict[str, Any] = {
    'type': 'array',
    'items': {'type': 'string', 'minLength': 1},
    'minItems': 1,
}

SCORE_MAP_SCHEMA: Dict[str, Any] = {
    'type': 'object',
    'patternProperties': {
        '^[0-9]+$': {'type': 'number'},
    },
    'additionalProperties': False,
    'examples': [{'1': 85, '2': 40}],
}

SECTION_PLAN_SCHEMA: Dict[str, Any] = {
    'type': 'object',
    'additionalProperties': {'type': 'number'},
    'minProperties': 1,
    'examples': [{'I': 2, 'II': 1}],
}

AGENT_SCHEMAS: Dict[str, Dict[str, Any]] = {
    'query_expander': QUERY_LIST_SCHEMA,
    'reranker': SCORE_MAP_SCHEMA,
    'section_planner': SECTION_PLAN_SCHEMA,
}


class OutputFormatBuilder:
    """Generate a compact output format example for prompts."""

    def __init__(self, schema: Dict[str, Any]):
        self.schema = schema

    def _example_for_schema(self, schema: Dict[str, Any]) -> Any:
        examples = schema.get('examples')
        if isinstance(examples, list) and examples:
            return examples[0]

        stype = schema.get('type')
        if isinstance(stype, list):
            stype = [t for t in stype if t != 'null']
            stype = stype[0] if stype else 'string'

        if stype == 'object':
            props = schema.get('properties', {})
            example = {}
            for k, v in props.items():
                example[k] = self._example_for_schema(v)
            return example
        if stype == 'array':
            items = schema.get('items', {})
            return [self._example_for_schema(items)]
        if stype == 'string':
            return "<string>"
        if stype == 'integer':
            return 0
        if stype == 'number':
            return 0.0
        if stype == 'boolean':
            return False
        return "<value>"

    def build(self) -> str:
        example = self._example_for_schema(self.schema)
        return json.dumps(example, ensure_ascii=False)
