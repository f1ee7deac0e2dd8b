"""
Module 5 - Scope Filter
Second pass over the flattened line sequence: marks every line active or
suppressed according to module guards and, on request, virtual hosts.
"""

import logging
from typing import Iterable, List

from core.models import ConfigurationLine, Module, ParsableLine  # pyre-ignore
from core.scope_tracker import module_scope, visibility_scope  # pyre-ignore


logger = logging.getLogger("httpdconf.scope_filter")


class ScopeFilter:
    """Annotates ConfigurationLines with their activation state."""

    def __init__(self, modules: Iterable[Module]):
        self.modules = list(modules)

    def filter(self, configuration_lines: Iterable[ConfigurationLine],
               include_vhosts: bool = True) -> List[ParsableLine]:
        """
        Classify each line, preserving order and count.

        A line is inactive while a false <IfModule> section is open, or,
        when `include_vhosts` is False, while a <VirtualHost> section is open.
        Opening and closing tags belong to the section they delimit.

        Args:
            configuration_lines: Lines of the whole tree, in inclusion order.
            include_vhosts: Keep lines inside <VirtualHost> sections active.

        Returns:
            One ParsableLine per input line.
        """
        if_module = module_scope(self.modules)
        virtual_host = visibility_scope()
        exclude_vhosts = not include_vhosts

        lines: List[ParsableLine] = []
        for configuration_line in configuration_lines:
            text = configuration_line.processed_text
            is_comment = configuration_line.is_comment

            if not is_comment:
                if_module.enter(text)
                if exclude_vhosts:
                    virtual_host.enter(text)

            active = not (if_module.engaged or virtual_host.engaged)
            lines.append(ParsableLine(configuration_line, active))

            if not is_comment:
                if_module.leave(text)
                if exclude_vhosts:
                    virtual_host.leave(text)

        if if_module.engaged or virtual_host.engaged:
            logger.warning(
                f"Unbalanced sections at end of configuration "
                f"(IfModule depth {if_module.depth}, VirtualHost depth {virtual_host.depth})"
            )

        inactive = sum(1 for line in lines if not line.active)
        logger.debug(f"Filtered {len(lines)} lines, {inactive} inactive")
        return lines
