"""
@file interfaces.py
@brief Abstract base classes implemented by automation back ends.

The compiler is written purely against these interfaces, enabling one
implementation to serve several automation back ends (Selenium, CodedUI,
the generic dry-run back end, ...).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import (TYPE_CHECKING, Any, ClassVar, List, Optional, Sequence,
                    Tuple)

if TYPE_CHECKING:
    from .constructors import Binding
    from .metadata import ElementLocator, PageNavigation, PropertyInfo


class IBrowser(ABC):
    """
    Marker interface for the browser handle injected into constructors.

    The compiler never calls into the browser; it only passes the handle
    to constructors and list adapters.
    """


class IMetadataReader(ABC):
    """
    Abstract reader for page-object metadata.

    Supplies property enumeration and the locator/navigation metadata
    attached to types and properties.
    """

    @abstractmethod
    def get_properties(self, cls: type) -> List["PropertyInfo"]:
        """
        Enumerate the writable properties of a class.

        Args:
            cls: Page or element class

        Returns:
            Properties in enumeration order
        """
        pass

    @abstractmethod
    def get_navigation(self, cls: type) -> Optional["PageNavigation"]:
        """Navigation metadata declared on the class itself, if any."""
        pass

    @abstractmethod
    def get_type_locator(self, cls: type) -> Optional["ElementLocator"]:
        """Container-level locator declared on the class itself, if any."""
        pass

    @abstractmethod
    def get_property_locator(self, prop: "PropertyInfo") -> Optional["ElementLocator"]:
        """Locator metadata attached to a property, if any."""
        pass

    def has_navigation(self, cls: type) -> bool:
        return self.get_navigation(cls) is not None

    def has_locator(self, target: Any) -> bool:
        if isinstance(target, type):
            return self.get_type_locator(target) is not None
        return self.get_property_locator(target) is not None


class IBuilderHooks(ABC):
    """
    Capability hooks implemented once per automation back end.

    Subclasses declare the static types the builder works with and
    override the hooks their back end needs. Hooks must be reentrant if
    compiled factories are invoked concurrently.
    """

    parent_type: ClassVar[type]
    output_type: ClassVar[type]
    element_type: ClassVar[type]
    browser_type: ClassVar[type] = IBrowser

    @property
    def allow_empty_constructor(self) -> bool:
        """Whether a zero-argument constructor may be used as a fallback."""
        return False

    @abstractmethod
    def assign_element_attributes(
        self,
        element: Any,
        locator: Optional["ElementLocator"],
        native_attributes: Tuple[Any, ...],
    ) -> None:
        """
        Stamp locator and native attribute data onto a freshly built element.

        Args:
            element: Newly constructed element
            locator: Locator metadata of the property (may be None)
            native_attributes: Back-end specific attributes of the property
        """
        pass

    @abstractmethod
    def get_element_collection_type(self) -> type:
        """
        Get the concrete generic list type.

        Returns:
            A generic ``ElementList`` subclass constructed as
            ``Concrete[Item](root, browser)``
        """
        pass

    def assign_page_element_attributes(self, instance: Any, locator: "ElementLocator") -> None:
        """Apply a container-level locator declared on the built type."""

    def get_custom_attributes(self, prop: "PropertyInfo") -> Sequence[Any]:
        """Back-end specific attributes declared on a property."""
        return ()

    def check_base_type(self, instance: Any) -> None:
        """Inspect a newly built root instance before it is finalized."""

    def set_page_navigation(self, instance: Any, navigation: "PageNavigation") -> None:
        """Apply navigation metadata declared on the built type."""

    def get_property_proxy_type(self, declared_type: type) -> type:
        """Concrete type to construct for a declared element type."""
        return declared_type

    def fill_constructor_parameter(
        self,
        parameter_type: Any,
        parent: "Binding",
        root_locator: Optional["Binding"],
    ) -> Optional["Binding"]:
        """
        Choose the binding for a constructor parameter.

        Args:
            parameter_type: Annotated parameter type
            parent: Binding of the containing instance (or factory parent)
            root_locator: Binding of the factory parent for nested elements

        Returns:
            The binding to pass, or None when the parameter cannot be filled
        """
        return parent if parent.accepted_by(parameter_type) else None

    def is_element(self, tp: Any) -> bool:
        """Check if a declared type satisfies the element capability."""
        return isinstance(tp, type) and issubclass(tp, self.element_type)

    def get_list_item_type(self, tp: Any) -> Optional[type]:
        """Return the element type of a list-of-elements shape, else None."""
        from .metadata import list_item_type

        item = list_item_type(tp)
        if item is None or not self.is_element(item):
            return None
        return item
