"""
Input Handler
File system access for the line pipeline: validates and reads configuration
files as UTF-8 text, and resolves Include targets to concrete files.
"""

import os
import re
import logging
from typing import List, Optional


logger = logging.getLogger("httpdconf.input_handler")


class InputHandler:
    """Reads configuration files and resolves Include targets."""

    MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB limit

    def __init__(self, max_file_size: Optional[int] = None):
        if max_file_size:
            self.MAX_FILE_SIZE = max_file_size

    def read_physical_lines(self, file_path: str) -> List[str]:
        """
        Read a configuration file and split it into physical lines.

        The file is fully read and closed before returning.

        Args:
            file_path: Path to the configuration file.

        Returns:
            Physical lines without line terminators. Empty for an empty file.

        Raises:
            FileNotFoundError: If the file does not exist.
            PermissionError: If the file is not readable.
            ValueError: If the path is a directory, the file is too large,
                or it is not valid UTF-8 text.
        """
        file_path = os.path.abspath(file_path)

        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        if not os.path.isfile(file_path):
            raise ValueError(f"Path is not a file: {file_path}")

        file_size = os.path.getsize(file_path)
        if file_size > self.MAX_FILE_SIZE:
            raise ValueError(
                f"File exceeds maximum size ({self.MAX_FILE_SIZE} bytes): {file_path}"
            )

        try:
            with open(file_path, 'r', encoding='utf-8', errors='strict') as f:
                content = f.read()
        except UnicodeDecodeError:
            raise ValueError(
                f"File appears to be binary or uses unsupported encoding: {file_path}"
            )

        lines = content.split('\n')
        if lines[-1] == '':
            lines.pop()
        return lines

    @staticmethod
    def resolve_include_path(target: str, server_root: str) -> str:
        """
        Resolve an Include target against the server root.

        Absolute paths are normalized; a target with a drive separator
        (C:/Apache/conf/x.conf) is returned unchanged.
        """
        if ':' in target:
            return target
        if target.startswith('/'):
            return os.path.abspath(target)
        return os.path.abspath(os.path.join(server_root, target))

    def list_included_files(self, path: str) -> List[str]:
        """
        Expand a resolved Include target into the files it designates.

        Args:
            path: Absolute path, possibly a directory or a '*' pattern in
                its last component.

        Returns:
            Absolute file paths, in the order Apache reads them.

        Raises:
            FileNotFoundError: If the target (or the parent of a pattern) is missing.
        """
        if os.path.isdir(path):
            return [
                os.path.join(path, child)
                for child in sorted(os.listdir(path))
                if not os.path.isdir(os.path.join(path, child))
            ]

        if '*' in path:
            return self._match_wildcard(path)

        if not os.path.exists(path):
            raise FileNotFoundError(f"Included file not found: {path}")
        return [path]

    def _match_wildcard(self, path: str) -> List[str]:
        parent, pattern = os.path.split(path)
        if not os.path.isdir(parent):
            raise FileNotFoundError(f"Directory of include pattern not found: {parent}")

        # Only '*' is a wildcard, every other character is literal
        name_re = re.compile(re.escape(pattern).replace(r'\*', '.*'))

        matched = []
        for child in sorted(os.listdir(parent)):
            child_path = os.path.join(parent, child)
            if not os.path.isdir(child_path) and name_re.fullmatch(child):
                matched.append(child_path)

        if not matched:
            logger.warning(f"Include pattern matched no files: {path}")
        return matched
