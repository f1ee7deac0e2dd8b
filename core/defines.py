"""
Define Resolver
Collects the variables declared with Define/UnDefine and substitutes
${NAME} references in configuration lines.
"""

import re
import logging
from typing import Dict, List, Sequence

from core.models import Define  # pyre-ignore
from core.patterns import is_directive_match  # pyre-ignore


logger = logging.getLogger("httpdconf.defines")

_REFERENCE_RE = re.compile(r'\$\{([^}]*)\}')


class DefineResolver:
    """Default Define collaborator for ApacheParser."""

    def extract_all(self, parser) -> List[Define]:
        """
        Scan the active lines of a configuration tree for Define directives.

        The parser is driven without define substitution, so this never
        recurses into itself.

        Args:
            parser: An ApacheParser (or anything exposing
                get_configuration_parsable_lines).

        Returns:
            Defines in order of first declaration; a later Define of the same
            name replaces the value, UnDefine removes it.
        """
        lines = parser.get_configuration_parsable_lines(include_vhosts=True, load_defines=False)

        values: Dict[str, str] = {}
        for line in lines:
            if not line.active or line.is_comment:
                continue

            text = line.processed_text
            if is_directive_match(text, "Define"):
                parts = text.split(None, 2)
                name = parts[1]
                value = parts[2].strip('"').strip("'") if len(parts) > 2 else ""
                # Resolved at declaration time, against the defines seen so far
                values[name] = self._replace(values, value)
            elif is_directive_match(text, "UnDefine"):
                values.pop(text.split(None, 2)[1], None)

        defines = [Define(name=name, value=value) for name, value in values.items()]
        logger.debug(f"Resolved {len(defines)} defines")
        return defines

    @staticmethod
    def substitute(defines: Sequence[Define], text: str) -> str:
        """Replace ${NAME} references. Unknown names are kept."""
        return DefineResolver._replace({d.name: d.value for d in defines}, text)

    @staticmethod
    def _replace(values: Dict[str, str], text: str) -> str:
        if '${' not in text:
            return text
        return _REFERENCE_RE.sub(lambda m: values.get(m.group(1), m.group(0)), text)
