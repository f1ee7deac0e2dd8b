"""
httpdconf Data Models
Core data structures shared by the line pipeline and its collaborators.
"""

from dataclasses import dataclass, asdict


@dataclass
class ConfigurationLine:
    """One logical line, after continuation lines have been joined."""
    raw_text: str           # Physical lines joined with '\n'
    processed_text: str     # Continuations collapsed, whitespace normalized, defines substituted
    source_file: str        # Absolute path of the file the line was read from
    is_comment: bool
    start_line: int         # 1-based, first physical line
    end_line: int           # 1-based, last physical line

    @property
    def line_count(self) -> int:
        """Number of physical lines the logical line spans."""
        return self.end_line - self.start_line + 1


@dataclass
class ParsableLine:
    """A ConfigurationLine annotated with its activation state."""
    configuration_line: ConfigurationLine
    active: bool

    @property
    def processed_text(self) -> str:
        return self.configuration_line.processed_text

    @property
    def source_file(self) -> str:
        return self.configuration_line.source_file

    @property
    def start_line(self) -> int:
        return self.configuration_line.start_line

    @property
    def end_line(self) -> int:
        return self.configuration_line.end_line

    @property
    def is_comment(self) -> bool:
        return self.configuration_line.is_comment

    def to_dict(self) -> dict:
        """Flatten into a JSON-friendly dict."""
        data = asdict(self.configuration_line)
        data["active"] = self.active
        return data


@dataclass
class Module:
    """An Apache module known to the server binary."""
    name: str               # ssl_module | mod_ssl.c | ...


@dataclass
class StaticModule(Module):
    """Module compiled into the server binary."""


@dataclass
class SharedModule(Module):
    """Module loaded at runtime with LoadModule."""


@dataclass
class Define:
    """A variable declared with the Define directive."""
    name: str
    value: str = ""
