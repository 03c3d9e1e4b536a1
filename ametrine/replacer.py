import logging
from typing import Any, Dict

log = logging.getLogger(__name__)


def replace_text(value: Any, replacements: Dict[str, str]) -> Any:
    """
    Replaces placeholder substrings in a configuration value.

    Strings have every occurrence of every key replaced (no regular
    expressions); lists and dicts are processed recursively, anything else
    is returned untouched.
    """
    if isinstance(value, str):
        for search_string, replace_string in replacements.items():
            value = value.replace(search_string, replace_string)
        return value
    if isinstance(value, list):
        return [replace_text(item, replacements) for item in value]
    if isinstance(value, dict):
        return {key: replace_text(item, replacements) for key, item in value.items()}
    return value
