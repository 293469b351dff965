"""
JSON extraction for LLM responses.

Handles raw JSON, JSON wrapped in markdown code blocks and JSON preceded
or followed by prose.
"""

import json
import logging
import re
from typing import Any, Dict

from tripgraph.shared.exceptions import ParseError


logger = logging.getLogger(__name__)


def extract_json_from_response(raw_response: str) -> str:
    """
    Extract JSON content from an LLM response.

    Args:
        raw_response: Raw LLM response string

    Returns:
        Cleaned JSON string ready for parsing
    """
    content = (raw_response or "").strip()

    code_block_pattern = r"```(?:json)?\s*([\s\S]*?)```"
    match = re.search(code_block_pattern, content)
    if match:
        content = match.group(1).strip()

    # Skip any prose before the first object/array
    starts = [i for i in (content.find("{"), content.find("[")) if i >= 0]
    if not starts:
        return content
    content = content[min(starts):]

    opener = content[0]
    closer = "}" if opener == "{" else "]"
    depth = 0
    in_string = False
    escaped = False
    for i, char in enumerate(content):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return content[: i + 1]

    return content


def parse_json_object(raw_response: str) -> Dict[str, Any]:
    """
    Parse an LLM response into a JSON object.

    Raises:
        ParseError: If the response holds no valid JSON object
    """
    json_str = extract_json_from_response(raw_response)
    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse JSON response: {e} | preview={json_str[:200]!r}")
        raise ParseError(f"Invalid JSON in LLM response: {e}") from e

    if not isinstance(parsed, dict):
        raise ParseError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed
