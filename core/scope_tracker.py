"""
Scope Tracker
Counts nested conditional sections (<IfModule>, <VirtualHost>) while a
traversal walks through configuration lines. Used by both the Include
Expander and the Scope Filter, each with its own instances.
"""

from typing import Callable, Iterable, List, Optional

from core.models import Module  # pyre-ignore
from core import module_resolver, patterns  # pyre-ignore


LinePredicate = Callable[[str], bool]


class ScopeTracker:
    """
    Stack of open tags for one kind of section.

    While the stack is empty, an opening tag is pushed only if `should_enter`
    accepts it. Once engaged, every nested opening tag is pushed so that its
    closing tag can be matched; nested tags are never evaluated.
    """

    def __init__(self, is_open: LinePredicate, is_close: LinePredicate,
                 should_enter: Optional[LinePredicate] = None):
        self._is_open = is_open
        self._is_close = is_close
        self._should_enter = should_enter or (lambda text: True)
        self._stack: List[str] = []

    @property
    def engaged(self) -> bool:
        """True while lines are inside a tracked section."""
        return bool(self._stack)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def enter(self, text: str) -> bool:
        """Push `text` if it opens a tracked section. Returns True when pushed."""
        if not self._is_open(text):
            return False
        if self._stack or self._should_enter(text):
            self._stack.append(text)
            return True
        return False

    def leave(self, text: str) -> bool:
        """Pop one level if engaged and `text` closes a section. Returns True when popped."""
        if self._stack and self._is_close(text):
            self._stack.pop()
            return True
        return False


def module_scope(modules: Iterable[Module]) -> ScopeTracker:
    """
    Tracker for sections disabled by a false module guard.

    Only a guard whose condition does not hold is entered, so an engaged
    tracker means the enclosed lines are suppressed.
    """
    modules = list(modules)
    return ScopeTracker(
        is_open=patterns.is_if_module_open_match,
        is_close=patterns.is_if_module_close_match,
        should_enter=lambda text: not module_resolver.is_guard_satisfied(text, modules),
    )


def visibility_scope() -> ScopeTracker:
    """Tracker for virtual host sections; every <VirtualHost> is entered."""
    return ScopeTracker(
        is_open=patterns.is_vhost_match,
        is_close=patterns.is_vhost_close_match,
    )
