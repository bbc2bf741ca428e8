# pagebind/context.py
"""
@file context.py
@brief Compile context tracking for rich error messages and recursion checks.
"""

from __future__ import annotations
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, List, Optional


@dataclass
class CompileContext:
    """Context information for one type being compiled."""
    target_type: type
    property_name: Optional[str] = None
    parent_context: Optional[CompileContext] = None

    @property
    def description(self) -> str:
        """Generate a human-readable description of this step."""
        if self.property_name:
            return f"property '{self.property_name}' ({self.target_type.__name__})"
        return f"type '{self.target_type.__name__}'"

    def get_full_trace(self) -> List[CompileContext]:
        """Get the full chain of parent contexts."""
        trace = [self]
        current = self.parent_context
        while current is not None:
            trace.append(current)
            current = current.parent_context
        return trace

    @property
    def path(self) -> str:
        """Dotted property path from the root type, e.g. ``LoginPage.header.search``."""
        parts = []
        for ctx in reversed(self.get_full_trace()):
            parts.append(ctx.property_name or ctx.target_type.__name__)
        return ".".join(parts)

    def format_trace(self) -> str:
        """Format the full compile trace for error messages."""
        trace = self.get_full_trace()
        lines = ["Compile trace (most recent first):"]
        for i, ctx in enumerate(trace):
            prefix = "  -> " if i > 0 else "  X "
            lines.append(f"{prefix}{ctx.description}")
        return "\n".join(lines)


class CompileContextManager:
    """Thread-safe manager for the compile context stack."""

    _local = threading.local()

    @classmethod
    def _get_stack(cls) -> List[CompileContext]:
        """Get the context stack for the current thread."""
        if not hasattr(cls._local, "stack"):
            cls._local.stack = []
        return cls._local.stack

    @classmethod
    def current(cls) -> Optional[CompileContext]:
        """Get the current (innermost) compile context."""
        stack = cls._get_stack()
        return stack[-1] if stack else None

    @classmethod
    def contains(cls, target_type: type) -> bool:
        """Check if a type is already being compiled further up the stack."""
        return any(ctx.target_type is target_type for ctx in cls._get_stack())

    @classmethod
    @contextmanager
    def compiling(
        cls,
        target_type: type,
        property_name: Optional[str] = None,
    ) -> Generator[CompileContext, None, None]:
        """Context manager for tracking the type being compiled."""
        stack = cls._get_stack()
        context = CompileContext(
            target_type=target_type,
            property_name=property_name,
            parent_context=stack[-1] if stack else None,
        )
        stack.append(context)
        try:
            yield context
        finally:
            stack.pop()

    @classmethod
    def format_current_trace(cls) -> Optional[str]:
        current = cls.current()
        return current.format_trace() if current else None

    @classmethod
    def clear(cls) -> None:
        """Clear the context stack (useful for test cleanup)."""
        cls._local.stack = []
