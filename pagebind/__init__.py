# pagebind/__init__.py
"""
pagebind - Page-object graph compiler for UI test automation.

This package provides:
- Metadata: locator/navigation metadata declared with Annotated and class decorators
- PageBuilder: compiles page classes into reusable factories
- Interfaces: capability hooks implemented once per automation back end
- LocatorRepository: YAML locator maps validated against a JSON schema
- Generic back end: I/O-free elements for dry runs and tests
"""

from pagebind.cache import FactoryCache
from pagebind.compiler import PageBuilder
from pagebind.config import BuilderSettings
from pagebind.constructors import Binding, constructor
from pagebind.exceptions import (
    PageBindError,
    ConfigError,
    PageDefinitionError,
    ConstructorResolutionError,
    AmbiguousConstructorError,
    RecursiveElementError,
    FramePropertyError,
)
from pagebind.interfaces import IBrowser, IBuilderHooks, IMetadataReader
from pagebind.metadata import (
    AnnotationMetadataReader,
    ElementList,
    ElementLocator,
    PageNavigation,
    PropertyInfo,
    locate,
    navigation,
)
from pagebind.plan import ConstructionPlan
from pagebind.repository import LocatorRepository, RepositoryMetadataReader

__all__ = [
    "FactoryCache",
    "PageBuilder",
    "BuilderSettings",
    "Binding",
    "constructor",
    "PageBindError",
    "ConfigError",
    "PageDefinitionError",
    "ConstructorResolutionError",
    "AmbiguousConstructorError",
    "RecursiveElementError",
    "FramePropertyError",
    "IBrowser",
    "IBuilderHooks",
    "IMetadataReader",
    "AnnotationMetadataReader",
    "ElementList",
    "ElementLocator",
    "PageNavigation",
    "PropertyInfo",
    "locate",
    "navigation",
    "ConstructionPlan",
    "LocatorRepository",
    "RepositoryMetadataReader",
]

__version__ = "1.0.0"
