# pagebind/metadata.py
"""
@file metadata.py
@brief Declarative locator/navigation metadata and property enumeration.

Locators are attached to properties through ``typing.Annotated``::

    class LoginPage(GenericPage):
        user_name: Annotated[GenericElement, locate("UserName", id="user")] = None

and to classes by using the locator (or ``navigation``) as a class decorator.
"""

from __future__ import annotations

import re
import types
from dataclasses import dataclass, field
from typing import (Annotated, Any, ClassVar, Dict, Generic, List, Optional,
                    Tuple, TypeVar, Union, get_args, get_origin,
                    get_type_hints)

from .exceptions import PageDefinitionError
from .interfaces import IMetadataReader

T = TypeVar("T")

NAVIGATION_ATTR = "__page_navigation__"
LOCATOR_ATTR = "__element_locator__"

_PARAM_PATTERN = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass(frozen=True)
class ElementLocator:
    """
    Lookup key plus native selector data for finding an element.

    Immutable; ``selectors`` is kept as sorted ``(name, value)`` pairs.
    """
    key: Optional[str] = None
    selectors: Tuple[Tuple[str, Any], ...] = ()

    def __call__(self, cls: type) -> type:
        setattr(cls, LOCATOR_ATTR, self)
        return cls

    def get(self, name: str, default: Any = None) -> Any:
        for k, v in self.selectors:
            if k == name:
                return v
        return default

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.key is not None:
            data["key"] = self.key
        data.update(self.selectors)
        return data

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ElementLocator:
        d = dict(d)
        key = d.pop("key", None)
        return locate(key, **d)


def locate(key: Optional[str] = None, **selectors: Any) -> ElementLocator:
    """Create an element locator, e.g. ``locate("Search", id="q")``."""
    return ElementLocator(key=key, selectors=tuple(sorted(selectors.items())))


@dataclass(frozen=True)
class PageNavigation:
    """URL template for a page; ``params`` lists the ``{name}`` placeholders."""
    url: str
    url_pattern: Optional[str] = None
    is_absolute: bool = False
    params: Tuple[str, ...] = field(init=False, default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(_PARAM_PATTERN.findall(self.url)))

    def __call__(self, cls: type) -> type:
        setattr(cls, NAVIGATION_ATTR, self)
        return cls

    def format_url(self, **values: Any) -> str:
        def repl(m):
            name = m.group(1)
            if name not in values:
                return m.group(0)
            return str(values[name])

        return _PARAM_PATTERN.sub(repl, self.url)


def navigation(url: str, url_pattern: Optional[str] = None, is_absolute: bool = False) -> PageNavigation:
    """Class decorator attaching navigation metadata to a page."""
    return PageNavigation(url=url, url_pattern=url_pattern, is_absolute=is_absolute)


@dataclass(frozen=True)
class PropertyInfo:
    """A writable property of a page or element class."""
    owner: type
    name: str
    type: Any
    metadata: Tuple[Any, ...] = ()

    @property
    def locator(self) -> Optional[ElementLocator]:
        for item in self.metadata:
            if isinstance(item, ElementLocator):
                return item
        return None

    @property
    def qualified_name(self) -> str:
        return f"{self.owner.__name__}.{self.name}"


class ElementList(Generic[T]):
    """
    Base for collections of elements.

    A property typed ``ElementList[Row]`` is wired by building a collection
    root element and handing it to the back end's concrete list type.
    """

    @property
    def item_type(self) -> Optional[type]:
        args = get_args(getattr(self, "__orig_class__", None))
        return args[0] if args else None


def _is_optional(hint: Any) -> bool:
    origin = get_origin(hint)
    if origin is not Union and origin is not types.UnionType:
        return False
    args = get_args(hint)
    return len(args) == 2 and type(None) in args


def unwrap_annotation(hint: Any) -> Tuple[Any, Tuple[Any, ...]]:
    """Strip ``Annotated`` and ``Optional`` wrappers; return (type, extras)."""
    extras: Tuple[Any, ...] = ()
    while True:
        if get_origin(hint) is Annotated:
            args = get_args(hint)
            hint, extras = args[0], extras + tuple(args[1:])
        elif _is_optional(hint):
            hint = next(a for a in get_args(hint) if a is not type(None))
        else:
            return hint, extras


def list_item_type(tp: Any) -> Optional[Any]:
    """Return ``T`` for ``ElementList[T]`` (or a parameterized subclass), else None."""
    origin = get_origin(tp)
    if not isinstance(origin, type) or not issubclass(origin, ElementList):
        return None
    args = get_args(tp)
    if len(args) != 1:
        return None
    return args[0]


def _type_hints(obj: Any, where: str) -> Dict[str, Any]:
    try:
        return get_type_hints(obj, include_extras=True)
    except NameError as e:
        raise PageDefinitionError(f"Cannot resolve annotations of '{where}': {e}") from e


def get_properties(cls: type) -> List[PropertyInfo]:
    """
    Enumerate the writable properties of a class.

    Annotated public class attributes come first (base classes before
    subclasses), then ``property`` objects that have a setter. Read-only
    properties hide any annotation of the same name.
    """
    props: Dict[str, PropertyInfo] = {}
    for name, hint in _type_hints(cls, cls.__name__).items():
        if name.startswith("_") or get_origin(hint) is ClassVar:
            continue
        tp, extras = unwrap_annotation(hint)
        props[name] = PropertyInfo(cls, name, tp, extras)

    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if not isinstance(value, property) or name.startswith("_"):
                continue
            if value.fset is None or value.fget is None:
                props.pop(name, None)
                continue
            hint = _type_hints(value.fget, f"{klass.__name__}.{name}").get("return")
            if hint is None:
                continue
            tp, extras = unwrap_annotation(hint)
            props[name] = PropertyInfo(cls, name, tp, extras)

    return list(props.values())


class AnnotationMetadataReader(IMetadataReader):
    """Reads metadata declared with ``Annotated`` and class decorators."""

    def get_properties(self, cls: type) -> List[PropertyInfo]:
        return get_properties(cls)

    def get_navigation(self, cls: type) -> Optional[PageNavigation]:
        return vars(cls).get(NAVIGATION_ATTR)

    def get_type_locator(self, cls: type) -> Optional[ElementLocator]:
        return vars(cls).get(LOCATOR_ATTR)

    def get_property_locator(self, prop: PropertyInfo) -> Optional[ElementLocator]:
        return prop.locator
