"""Utility functions."""

import json
import re


def extract_json(text: str) -> dict:
    """
    Clean Markdown, ```json, comments.
    Return Json object.
    """
    if not text:
        raise ValueError("Empty model output")

    # Direct parse first; response_format=json_object usually gives clean JSON
    try:
        parsed = json.loads(text.strip())
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    # Unwrap ```json ... ``` fences
    fenced = re.search(r"```(?:json)?\s*(.*?)```", text, flags=re.S)
    if fenced:
        text = fenced.group(1)

    # Find first { and last }
    start = text.find("{")
    end = text.rfind("}")

    if start == -1 or end == -1:
        raise ValueError("No JSON object detected")

    cleaned = text[start:end+1]

    return json.loads(cleaned)
