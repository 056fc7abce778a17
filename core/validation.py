"""Decoding and JSON Schema checks for model replies."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

import json_repair
from jsonschema import Draft202012Validator

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_json_response(response: Optional[str]) -> Any:
    """Parse a model reply as JSON; returns None when nothing usable comes back."""
    text = _FENCE_RE.sub("", (response or "").strip()).strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except RecursionError:
        return None
    except ValueError:
        # JSONDecodeError, or an integer past the interpreter digit limit
        pass
    try:
        repaired = json_repair.repair_json(text)
        return json.loads(repaired) if repaired else None
    except (ValueError, TypeError, RecursionError):
        return None


class SchemaValidator:
    def __init__(self, schema: Dict[str, Any], name: str = "LLM"):
        self.schema = schema
        self.name = name
        self.validator = Draft202012Validator(schema)

    def validate(self, data: Any) -> List[str]:
        errors = []
        for err in sorted(self.validator.iter_errors(data), key=lambda e: [str(p) for p in e.path]):
            path = '.'.join(str(p) for p in err.path) or '<root>'
            errors.append(f"{path}: {err.message}")
        return errors

    def load(self, raw: Optional[str]) -> Any:
        """Decode ``raw`` and return it only if it conforms to the schema, else None."""
        data = parse_json_response(raw)
        errors = self.validate(data)
        if errors:
            logger.warning(f"{self.name} output rejected: {errors[:3]}")
            return None
        return data
