"""
Module 2 - Module Resolver
Extracts the module reference from an <IfModule> tag and tests it against
the modules known to the server.

Two spellings of the same module are accepted, and are considered equal:
    <IfModule ssl_module>    (module identifier)
    <IfModule mod_ssl.c>     (source file name)
"""

import re
from typing import Iterable, Tuple

from core.models import Module  # pyre-ignore


_GUARD_TOKEN_RE = re.compile(r'<\s*\bIfModule\b\s*(!?)\s*([^>]*?)\s*>', re.IGNORECASE)
_SOURCE_NAME_RE = re.compile(r'^mod_(.+)\.c$')
_MODULE_SUFFIX = "_module"


def extract_module_token(tag_text: str) -> Tuple[bool, str]:
    """
    Pull the module reference out of an IfModule tag.

    Args:
        tag_text: A processed line holding an <IfModule ...> tag.

    Returns:
        (negated, token). The token is empty when the tag has no argument.
    """
    match = _GUARD_TOKEN_RE.search(tag_text)
    if not match:
        return False, ""
    token = match.group(2).strip('"').strip("'")
    return match.group(1) == "!", token


def normalize_module_name(name: str) -> str:
    """Reduce 'mod_X.c' and 'X_module' to 'X'."""
    name = name.strip()
    source_match = _SOURCE_NAME_RE.match(name)
    if source_match:
        return source_match.group(1)
    if name.endswith(_MODULE_SUFFIX):
        return name[:-len(_MODULE_SUFFIX)]
    return name


def is_in_modules(tag_text: str, modules: Iterable[Module]) -> bool:
    """Check if the module referenced by an IfModule tag (plain or negated) is known."""
    _, token = extract_module_token(tag_text)
    if not token:
        return False
    wanted = normalize_module_name(token)
    return any(normalize_module_name(module.name) == wanted for module in modules)


def is_guard_satisfied(tag_text: str, modules: Iterable[Module]) -> bool:
    """
    Evaluate an IfModule condition.

    <IfModule X> holds when X is known; <IfModule !X> holds when it is not.
    """
    negated, _ = extract_module_token(tag_text)
    present = is_in_modules(tag_text, modules)
    return not present if negated else present
