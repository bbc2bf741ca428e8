# pagebind/generic.py
"""
@file generic.py
@brief I/O-free back end for dry runs, locator audits and tests.

Elements only record the locator data stamped onto them, so a page graph
can be built and inspected without a browser.
"""

from __future__ import annotations

import types
from dataclasses import dataclass
from typing import (Any, Dict, List, Optional, Sequence, Tuple, TypeVar,
                    Union, get_args, get_origin)

from .constructors import Binding
from .interfaces import IBrowser, IBuilderHooks
from .metadata import (ElementList, ElementLocator, PageNavigation,
                       PropertyInfo, unwrap_annotation)

T = TypeVar("T")


@dataclass(frozen=True)
class NativeAttribute:
    """Back-end specific attribute, declared next to the locator in ``Annotated``."""
    name: str
    value: Any = True


class GenericNode:
    """Anything elements can be nested in: the session, pages and elements."""


class GenericSession(GenericNode):
    """Root parent handed to page factories."""

    def __init__(self, name: str = "default"):
        self.name = name


class GenericBrowser(IBrowser):
    def __init__(self, base_url: str = ""):
        self.base_url = base_url.rstrip("/")

    def url_for(self, nav: PageNavigation, **params: Any) -> str:
        url = nav.format_url(**params)
        if nav.is_absolute or not self.base_url:
            return url
        return f"{self.base_url}/{url.lstrip('/')}"


class GenericPage(GenericNode):
    def __init__(self, session: GenericSession):
        self.session = session
        self.kind: Optional[str] = None
        self.navigation: Optional[PageNavigation] = None
        self.locator: Optional[ElementLocator] = None


class GenericElement(GenericNode):
    def __init__(self, parent: GenericNode):
        self.parent = parent
        self.kind: Optional[str] = None
        self.locator: Optional[ElementLocator] = None
        self.native_attributes: Tuple[NativeAttribute, ...] = ()

    def locator_path(self) -> List[ElementLocator]:
        """Locators from the outermost container down to this element."""
        path: List[ElementLocator] = []
        node: Any = self
        while node is not None:
            if getattr(node, "locator", None) is not None:
                path.append(node.locator)
            node = getattr(node, "parent", None)
        return list(reversed(path))


class GenericElementList(ElementList[T]):
    def __init__(self, root: GenericElement, browser: Optional[IBrowser]):
        self.root = root
        self.browser = browser

    @property
    def locator(self) -> Optional[ElementLocator]:
        return self.root.locator


def _members(tp: Any) -> Tuple[Any, ...]:
    tp, _ = unwrap_annotation(tp)
    if get_origin(tp) in (Union, types.UnionType):
        return tuple(a for a in get_args(tp) if a is not type(None))
    return (tp,)


class GenericHooks(IBuilderHooks):
    """
    Capability hooks of the generic back end.

    Constructor parameters prefer an exact type match over an assignable
    one, and the parent over the root locator.
    """

    parent_type = GenericSession
    output_type = GenericPage
    element_type = GenericElement
    browser_type = GenericBrowser

    def __init__(self, allow_empty_constructor: bool = False):
        self._allow_empty_constructor = allow_empty_constructor

    @property
    def allow_empty_constructor(self) -> bool:
        return self._allow_empty_constructor

    def assign_element_attributes(
        self,
        element: GenericElement,
        locator: Optional[ElementLocator],
        native_attributes: Tuple[Any, ...],
    ) -> None:
        element.locator = locator
        element.native_attributes = tuple(native_attributes)

    def get_element_collection_type(self) -> type:
        return GenericElementList

    def assign_page_element_attributes(self, instance: Any, locator: ElementLocator) -> None:
        instance.locator = locator

    def get_custom_attributes(self, prop: PropertyInfo) -> Sequence[Any]:
        return tuple(m for m in prop.metadata if isinstance(m, NativeAttribute))

    def check_base_type(self, instance: Any) -> None:
        instance.kind = "page" if isinstance(instance, GenericPage) else "element"

    def set_page_navigation(self, instance: Any, navigation: PageNavigation) -> None:
        instance.navigation = navigation

    def fill_constructor_parameter(
        self,
        parameter_type: Any,
        parent: Binding,
        root_locator: Optional[Binding],
    ) -> Optional[Binding]:
        members = _members(parameter_type)
        candidates = [b for b in (parent, root_locator) if b is not None]
        for binding in candidates:
            if binding.type in members:
                return binding
        for binding in candidates:
            if binding.accepted_by(parameter_type):
                return binding
        return None


_SKIP_ATTRS = {"parent", "root", "session", "browser"}


def describe_tree(obj: Any) -> Dict[str, Any]:
    """Render a built page/element graph as nested dicts of locator data."""
    node: Dict[str, Any] = {"type": type(obj).__name__}
    navigation = getattr(obj, "navigation", None)
    if navigation is not None:
        node["url"] = navigation.url
    locator = getattr(obj, "locator", None)
    if locator is not None:
        node["locator"] = locator.as_dict()
    native = getattr(obj, "native_attributes", ())
    if native:
        node["native"] = {a.name: a.value for a in native}
    if isinstance(obj, GenericElementList):
        item_type = obj.item_type
        node["items"] = item_type.__name__ if item_type is not None else None
        return node

    children = {}
    for name, value in vars(obj).items():
        if name in _SKIP_ATTRS or name.startswith("_"):
            continue
        if isinstance(value, (GenericElement, GenericElementList)):
            children[name] = describe_tree(value)
    if children:
        node["elements"] = children
    return node
