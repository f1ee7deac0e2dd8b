"""
Module 1 - Pattern Matchers
Stateless predicates recognizing comments, directives and enclosure tags
in a processed configuration line. All keyword matching is case-insensitive.
"""

import re
from functools import lru_cache


_COMMENT_RE = re.compile(r'^\s*#')
_ENCLOSURE_RE = re.compile(r'<\s*[^/].*>')
_CLOSE_ENCLOSURE_RE = re.compile(r'</.*>')
_VHOST_RE = re.compile(r'<\s*\bVirtualHost\b.*>', re.IGNORECASE)
_VHOST_CLOSE_RE = re.compile(r'</.*\bVirtualHost\b.*>', re.IGNORECASE)
_IF_MODULE_OPEN_NEGATE_RE = re.compile(r'<\s*\bIfModule\b\s+!.*>', re.IGNORECASE)
_IF_MODULE_OPEN_RE = re.compile(r'<\s*\bIfModule\b.*>', re.IGNORECASE)
_IF_MODULE_CLOSE_RE = re.compile(r'</\s*\bIfModule\b\s*>', re.IGNORECASE)
_INCLUDE_RE = re.compile(r'^\s*\b(Include|IncludeOptional)\b', re.IGNORECASE)
_INCLUDE_KEYWORD_RE = re.compile(r'^\s*\b(Include|IncludeOptional)\b\s*', re.IGNORECASE)


@lru_cache(maxsize=None)
def _directive_pattern(directive_type: str) -> re.Pattern:
    return re.compile(r'^\s*\b' + re.escape(directive_type) + r'\b\s+', re.IGNORECASE)


@lru_cache(maxsize=None)
def _enclosure_pattern(enclosure_type: str) -> re.Pattern:
    return re.compile(r'<\s*\b' + re.escape(enclosure_type) + r'\b.*>', re.IGNORECASE)


@lru_cache(maxsize=None)
def _close_enclosure_pattern(enclosure_type: str) -> re.Pattern:
    return re.compile(r'</\s*\b' + re.escape(enclosure_type) + r'\b\s*>', re.IGNORECASE)


def is_comment_match(line: str) -> bool:
    """Check if a line is an Apache comment."""
    return _COMMENT_RE.search(line) is not None


def is_directive_match(line: str, directive_type: str) -> bool:
    """
    Check if a line is a directive of the given type.

    Args:
        line: The processed line.
        directive_type: Directive name, e.g. "LogLevel". Not case sensitive.

    Returns:
        True if the line starts with the directive followed by an argument.
    """
    return _directive_pattern(directive_type).search(line) is not None


def is_enclosure_type_match(line: str, enclosure_type: str) -> bool:
    """Check if a line opens an enclosure of the given type, e.g. <Directory /var/www>."""
    return _enclosure_pattern(enclosure_type).search(line) is not None


def is_close_enclosure_type_match(line: str, enclosure_type: str) -> bool:
    """Check if a line closes an enclosure of the given type, e.g. </Directory>."""
    return _close_enclosure_pattern(enclosure_type).search(line) is not None


def is_enclosure_match(line: str) -> bool:
    """Check if a line opens any enclosure."""
    return _ENCLOSURE_RE.search(line) is not None


def is_close_enclosure_match(line: str) -> bool:
    """Check if a line closes any enclosure."""
    return _CLOSE_ENCLOSURE_RE.search(line) is not None


def is_vhost_match(line: str) -> bool:
    """Check if a line opens a virtual host, e.g. <VirtualHost *:80>."""
    return _VHOST_RE.search(line) is not None


def is_vhost_close_match(line: str) -> bool:
    return _VHOST_CLOSE_RE.search(line) is not None


def is_if_module_open_negate_match(line: str) -> bool:
    """Check if a line is a negated module guard, e.g. <IfModule !mpm_netware_module>."""
    return _IF_MODULE_OPEN_NEGATE_RE.search(line) is not None


def is_if_module_open_match(line: str) -> bool:
    """
    Check if a line opens a module guard, plain or negated.

    Both <IfModule status_module> and <IfModule !mod_ssl.c> match.
    """
    return _IF_MODULE_OPEN_RE.search(line) is not None


def is_if_module_close_match(line: str) -> bool:
    return _IF_MODULE_CLOSE_RE.search(line) is not None


def is_include_match(line: str) -> bool:
    """Check if a line is an Include or IncludeOptional directive."""
    return _INCLUDE_RE.search(line) is not None


def get_file_from_include(line: str) -> str:
    """Extract the target path of an Include/IncludeOptional line."""
    return _INCLUDE_KEYWORD_RE.sub('', line, count=1).replace('"', '').strip()
