"""
Module Catalog
Builds the lists of static and shared modules from saved server output,
so module guards can be evaluated without running the server binary.

Accepted listing formats:
    httpd -M        " ssl_module (shared)" / " core_module (static)"
    httpd -l        "  mod_so.c"  (compiled-in modules, always static)
"""

import os
import re
import logging
from typing import Iterable, List, Tuple

from core.models import SharedModule, StaticModule  # pyre-ignore


logger = logging.getLogger("httpdconf.module_catalog")

_LOADED_RE = re.compile(r'^(\S+)\s+\((static|shared)\)$', re.IGNORECASE)
_COMPILED_RE = re.compile(r'^\S+\.c$')


def parse_module_listing(text: str) -> Tuple[List[StaticModule], List[SharedModule]]:
    """
    Parse httpd -M or httpd -l output.

    Returns:
        (static_modules, shared_modules), each in listing order.
    """
    static_modules: List[StaticModule] = []
    shared_modules: List[SharedModule] = []

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue

        loaded = _LOADED_RE.match(line)
        if loaded:
            name, kind = loaded.group(1), loaded.group(2).lower()
            if kind == "static":
                static_modules.append(StaticModule(name))
            else:
                shared_modules.append(SharedModule(name))
        elif _COMPILED_RE.match(line):
            static_modules.append(StaticModule(line))
        else:
            # Headers such as "Loaded Modules:" or "Compiled in modules:"
            logger.debug(f"Skipping module listing line: {line}")

    return static_modules, shared_modules


def load_module_listing(path: str) -> Tuple[List[StaticModule], List[SharedModule]]:
    """Read and parse a module listing file."""
    path = os.path.abspath(path)
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Module listing not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        static_modules, shared_modules = parse_module_listing(f.read())

    logger.info(
        f"Loaded {len(static_modules)} static and {len(shared_modules)} shared modules from {path}"
    )
    return static_modules, shared_modules


def modules_from_names(names: Iterable[str]) -> List[SharedModule]:
    """Turn bare module names, e.g. from the command line, into SharedModules."""
    return [SharedModule(name.strip()) for name in names if name.strip()]
