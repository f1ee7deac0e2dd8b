"""
Apache Configuration Parser
Entry point of the line pipeline: reads an httpd configuration tree from its
root file and returns its logical lines annotated with activation state.

Pipeline: Define snapshot -> Include Expander (+ Line Assembler) -> Scope Filter
"""

import os
import logging
from typing import List, Optional, Sequence

from core.defines import DefineResolver  # pyre-ignore
from core.include_expander import IncludeExpander  # pyre-ignore
from core.input_handler import InputHandler  # pyre-ignore
from core.line_assembler import LineAssembler  # pyre-ignore
from core.models import ConfigurationLine, Define, Module, ParsableLine  # pyre-ignore
from core.scope_filter import ScopeFilter  # pyre-ignore


logger = logging.getLogger("httpdconf.parser")


def default_server_root(root_conf_file: str) -> str:
    """
    Guess the server root from the root file location.

    A root file kept in the usual conf/ directory (conf/httpd.conf) has the
    parent of conf/ as its server root; otherwise its own directory is used.
    """
    conf_dir = os.path.dirname(os.path.abspath(root_conf_file))
    if os.path.basename(conf_dir) == "conf":
        return os.path.dirname(conf_dir)
    return conf_dir


class ApacheParser:
    """Parser for Apache httpd configuration trees."""

    def __init__(self, root_conf_file: str, server_root: str,
                 static_modules: Sequence[Module] = (),
                 shared_modules: Sequence[Module] = (),
                 define_resolver: Optional[DefineResolver] = None,
                 input_handler: Optional[InputHandler] = None):
        """
        Args:
            root_conf_file: The Apache root configuration file, e.g. conf/httpd.conf.
            server_root: The Apache server root; relative Include paths start there.
            static_modules: Modules compiled into the server.
            shared_modules: Modules loaded with LoadModule.
            define_resolver: Define collaborator, DefineResolver by default.
            input_handler: File system access, InputHandler by default.

        Raises:
            FileNotFoundError: If root_conf_file or server_root does not exist.
        """
        if not os.path.exists(root_conf_file):
            raise FileNotFoundError(f"The root configuration file does not exist: {root_conf_file}")

        if not os.path.exists(server_root):
            raise FileNotFoundError(f"The server root does not exist: {server_root}")

        self.root_conf_file = os.path.abspath(root_conf_file)
        self.server_root = os.path.abspath(server_root)
        self.static_modules = list(static_modules)
        self.shared_modules = list(shared_modules)
        self.define_resolver = define_resolver or DefineResolver()
        self.input_handler = input_handler or InputHandler()

    @property
    def modules(self) -> List[Module]:
        """All modules known to the server, static first."""
        return self.static_modules + self.shared_modules

    def get_defines(self) -> List[Define]:
        """Resolve the Define snapshot from a traversal without substitution."""
        return self.define_resolver.extract_all(self)

    def get_configuration_lines(self, load_defines: bool = True) -> List[ConfigurationLine]:
        """
        Gets every logical line of the configuration tree, in inclusion order.

        Args:
            load_defines: Substitute ${NAME} references with Define values.
        """
        defines = self.get_defines() if load_defines else []
        assembler = LineAssembler(defines, self.define_resolver.substitute)
        expander = IncludeExpander(self.server_root, self.modules, assembler, self.input_handler)
        return expander.expand(self.root_conf_file)

    def get_configuration_parsable_lines(self, include_vhosts: bool = True,
                                         load_defines: bool = True) -> List[ParsableLine]:
        """
        Gets a list of all parsable lines in the configuration, in the order
        that they appear in the Apache configuration.

        Args:
            include_vhosts: Keep lines inside <VirtualHost> sections active.
            load_defines: Substitute ${NAME} references with Define values.
        """
        configuration_lines = self.get_configuration_lines(load_defines)
        lines = ScopeFilter(self.modules).filter(configuration_lines, include_vhosts)
        logger.info(f"Parsed {len(lines)} lines from {self.root_conf_file}")
        return lines

    def get_file_parsable_lines(self, file: str, include_vhosts: bool = True,
                                load_defines: bool = True) -> List[ParsableLine]:
        """
        Gets the parsable lines that belong to one file of the configuration.

        The whole tree is still traversed so that sections opened in other
        files are accounted for.
        """
        file = os.path.abspath(file)
        lines = self.get_configuration_parsable_lines(include_vhosts, load_defines)
        return [line for line in lines if line.source_file == file]

    def get_active_conf_file_list_with_duplicates(self) -> List[str]:
        """
        Gets the active files in the order they are included. A file included
        more than once is listed once per inclusion.
        """
        files = []
        for line in self.get_configuration_parsable_lines(include_vhosts=True):
            if line.active and line.start_line == 1:
                files.append(line.source_file)
        return files

    def get_active_conf_file_list(self) -> List[str]:
        """Gets the active files in inclusion order, each listed once."""
        files = []
        for active_file in self.get_active_conf_file_list_with_duplicates():
            if active_file not in files:
                files.append(active_file)
        return files
