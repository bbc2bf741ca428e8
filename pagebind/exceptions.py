# pagebind/exceptions.py
"""
@file exceptions.py
@brief Exception classes raised while compiling page-object classes.
"""

from __future__ import annotations
from typing import List, Optional


class PageBindError(Exception):
    """Base exception for the framework."""


class ConfigError(PageBindError):
    """Raised when YAML/JSON configuration is invalid."""


class PageDefinitionError(PageBindError):
    """Raised when a page-object class cannot be compiled as declared."""


class ConstructorResolutionError(PageDefinitionError):
    """Raised when no constructor of a page or element type can be bound."""

    def __init__(
        self,
        target_type: str,
        parent_type: str,
        property_name: Optional[str] = None,
        trace: Optional[str] = None,
    ):
        self.target_type = target_type
        self.parent_type = parent_type
        self.property_name = property_name
        self.trace = trace
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.property_name:
            message = (
                f"Property '{self.property_name}' of type '{self.target_type}' has an invalid constructor. "
                f"Elements need to inherit the base constructor that accepts a {self.parent_type} parameter."
            )
        else:
            message = (
                f"Constructor on type '{self.target_type}' must have a single argument of type {self.parent_type}."
            )
        if self.trace:
            message += "\n" + self.trace
        return message


class AmbiguousConstructorError(PageDefinitionError):
    """Raised when several constructors bind and the policy is 'error'."""

    def __init__(self, target_type: str, candidates: List[str]):
        self.target_type = target_type
        self.candidates = candidates
        super().__init__(self.__str__())

    def __str__(self) -> str:
        return (
            f"Type '{self.target_type}' has several constructors "
            f"with the same parameter count that all bind: {', '.join(self.candidates)}"
        )


class RecursiveElementError(PageDefinitionError):
    """Raised when an element type contains itself."""

    def __init__(self, element_type: str, path: str):
        self.element_type = element_type
        self.path = path
        super().__init__(self.__str__())

    def __str__(self) -> str:
        return f"Element type '{self.element_type}' contains itself at '{self.path}'"


class FramePropertyError(PageDefinitionError, AttributeError):
    """Raised when a frame type does not declare the requested property."""

    def __init__(self, frame_type: str, property_name: str):
        self.frame_type = frame_type
        self.property_name = property_name
        super().__init__(self.__str__())

    def __str__(self) -> str:
        return f"Frame type '{self.frame_type}' has no property '{self.property_name}'"
