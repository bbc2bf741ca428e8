"""
@file cache.py
@brief Thread-safe memoization of compiled factories.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional, Tuple

from .compiler import PageBuilder


class FactoryCache:
    """
    Compiles each factory once per (kind, parent type, type, property) and reuses it.

    PageBuilder never caches; this class is the external synchronization
    callers need before sharing factories between threads.
    """

    def __init__(self, builder: PageBuilder):
        self.builder = builder
        self._lock = threading.Lock()
        self._factories: Dict[Tuple[str, type, type, Optional[str]], Callable[..., Any]] = {}

    def _get(self, key: Tuple[str, type, type, Optional[str]], compile_fn: Callable[[], Callable[..., Any]]):
        with self._lock:
            factory = self._factories.get(key)
            if factory is None:
                factory = compile_fn()
                self._factories[key] = factory
            return factory

    def get_factory(self, output_type: type) -> Callable[..., Any]:
        key = ("page", self.builder.parent_type, output_type, None)
        return self._get(key, lambda: self.builder.compile_factory(output_type))

    def get_element_factory(self, element_type: type) -> Callable[..., Any]:
        key = ("element", self.builder.parent_type, element_type, None)
        return self._get(key, lambda: self.builder.compile_element(element_type))

    def get_frame_factory(self, frame_type: type, property_name: str) -> Callable[[Any], Any]:
        key = ("frame", self.builder.parent_type, frame_type, property_name)
        return self._get(key, lambda: self.builder.compile_frame_factory(frame_type, property_name))

    def __len__(self) -> int:
        with self._lock:
            return len(self._factories)

    def clear(self) -> None:
        """Drop all compiled factories."""
        with self._lock:
            self._factories.clear()
