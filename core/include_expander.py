"""
Module 4 - Include Expander
Walks a configuration file depth-first and splices the lines of every
Include/IncludeOptional target in place. Includes sitting inside a false
<IfModule> section are not followed.
"""

import os
import logging
from typing import Iterable, List, Optional

from core.input_handler import InputHandler  # pyre-ignore
from core.line_assembler import LineAssembler  # pyre-ignore
from core.models import ConfigurationLine, Module  # pyre-ignore
from core.patterns import get_file_from_include, is_include_match  # pyre-ignore
from core.scope_tracker import module_scope  # pyre-ignore


logger = logging.getLogger("httpdconf.include_expander")


class CyclicIncludeError(RuntimeError):
    """Raised when a file includes itself, directly or through other files."""

    def __init__(self, chain: List[str]):
        self.chain = list(chain)
        super().__init__("Cyclic include: " + " -> ".join(self.chain))


class IncludeExpander:
    """Flattens an include tree into one ordered list of ConfigurationLines."""

    def __init__(self, server_root: str, modules: Iterable[Module],
                 assembler: Optional[LineAssembler] = None,
                 input_handler: Optional[InputHandler] = None):
        self.server_root = os.path.abspath(server_root)
        self.modules = list(modules)
        self.assembler = assembler or LineAssembler()
        self.input_handler = input_handler or InputHandler()

    def expand(self, root_file: str) -> List[ConfigurationLine]:
        """
        Collect the lines of `root_file` and of everything it includes.

        Raises:
            FileNotFoundError: If the root file or an include target is missing.
            CyclicIncludeError: If a file is reached again through its own includes.
        """
        lines: List[ConfigurationLine] = []
        self._expand_file(os.path.abspath(root_file), lines, [])
        logger.debug(f"Expanded {root_file} into {len(lines)} lines")
        return lines

    def _expand_file(self, conf_file: str, lines: List[ConfigurationLine],
                     include_chain: List[str]):
        if conf_file in include_chain:
            raise CyclicIncludeError(include_chain + [conf_file])

        physical_lines = self.input_handler.read_physical_lines(conf_file)
        logger.debug(f"Read {len(physical_lines)} lines from {conf_file}")

        include_chain.append(conf_file)
        try:
            if_module = module_scope(self.modules)

            for configuration_line in self.assembler.assemble(conf_file, physical_lines):
                lines.append(configuration_line)

                if configuration_line.is_comment:
                    continue

                text = configuration_line.processed_text
                if_module.enter(text)

                if if_module.engaged:
                    if_module.leave(text)
                elif is_include_match(text):
                    self._expand_include(text, lines, include_chain)

            if if_module.engaged:
                logger.warning(
                    f"{conf_file}: {if_module.depth} <IfModule> section(s) left open at end of file"
                )
        finally:
            include_chain.pop()

    def _expand_include(self, text: str, lines: List[ConfigurationLine],
                        include_chain: List[str]):
        target = get_file_from_include(text)
        if '${' in target:
            # Define values are not known yet, or the variable is undefined
            logger.warning(f"Skipping include with unresolved variable: {target}")
            return

        resolved = self.input_handler.resolve_include_path(target, self.server_root)
        logger.debug(f"Include {target} resolved to {resolved}")

        for included_file in self.input_handler.list_included_files(resolved):
            self._expand_file(included_file, lines, include_chain)
