# pagebind/compiler.py
"""
@file compiler.py
@brief Compiles page-object classes into reusable factories.

PageBuilder walks a type's metadata once, producing a ConstructionPlan,
and compiles the plan into a stateless factory:

    builder = PageBuilder(GenericHooks())
    create = builder.compile_factory(LoginPage)
    page = create(session, browser)

The builder keeps no cache; memoize factories per type (see FactoryCache)
before sharing them between threads.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .config import BuilderSettings
from .constructors import Binding, ConstructorResolver
from .context import CompileContextManager
from .exceptions import FramePropertyError, RecursiveElementError
from .interfaces import IBuilderHooks, IMetadataReader
from .metadata import AnnotationMetadataReader, ElementLocator
from .plan import (BROWSER_SLOT, PARENT_SLOT, RESERVED_SLOTS, AdaptList,
                   AssignProperty, ConstructionPlan, Finalize, Instantiate,
                   WireElement)


class _PlanBuilder:
    """Mutable state of one compilation pass: slots allocated and steps emitted."""

    def __init__(self) -> None:
        self.steps: List[Any] = []
        self.slot_count = RESERVED_SLOTS

    def variable(self, name: str, tp: Any) -> Binding:
        binding = Binding(name, tp, self.slot_count)
        self.slot_count += 1
        return binding

    def add(self, step: Any) -> None:
        self.steps.append(step)


class PageBuilder:
    """
    Object-graph compiler written against IBuilderHooks.
    """

    def __init__(
        self,
        hooks: IBuilderHooks,
        metadata: Optional[IMetadataReader] = None,
        settings: Optional[BuilderSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        @param hooks Back-end capability hooks
        @param metadata Metadata reader (defaults to annotations/decorators)
        @param settings Compiler policy switches
        @param logger Logger (defaults to the "pagebind" logger)
        """
        for attr in ("parent_type", "output_type", "element_type", "browser_type"):
            if not isinstance(getattr(hooks, attr, None), type):
                raise TypeError(f"{type(hooks).__name__}.{attr} must be a class")
        self.hooks = hooks
        self.metadata = metadata or AnnotationMetadataReader()
        self.settings = settings or BuilderSettings()
        self.log = logger or logging.getLogger("pagebind")
        self.resolver = ConstructorResolver(hooks, self.settings, self.log)

    @property
    def parent_type(self) -> type:
        return self.hooks.parent_type

    # -------------------------
    # Public API
    # -------------------------

    def compile_factory(self, output_type: type) -> Callable[..., Any]:
        """
        Compile a factory for a page type.

        @param output_type Subclass of the back end's output type
        @return factory(parent, browser=None, custom_init=None) -> instance
        @throws ConstructorResolutionError if a constructor in the graph cannot be bound
        """
        if not (isinstance(output_type, type) and issubclass(output_type, self.hooks.output_type)):
            raise TypeError(f"{output_type!r} is not a subclass of {self.hooks.output_type.__name__}")
        return self._compile(output_type)

    def compile_element(self, element_type: type) -> Callable[..., Any]:
        """
        Compile a factory for an element built on demand, outside a page graph
        (e.g. a dialog surfaced at runtime).
        """
        is_output = isinstance(element_type, type) and issubclass(element_type, self.hooks.output_type)
        if not (is_output or self.hooks.is_element(element_type)):
            raise TypeError(f"{element_type!r} is neither an element nor a {self.hooks.output_type.__name__}")
        return self._compile(element_type)

    def compile_frame_factory(self, frame_type: type, property_name: str) -> Callable[[Any], Any]:
        """
        Compile a factory that reaches a type through a property of a frame provider.

        The frame provider is built without browser or custom initializer;
        the named property is read off it and returned.

        @param frame_type Frame-provider type built from the parent
        @param property_name Property of frame_type exposing the target
        @return factory(parent) -> instance
        """
        if not any(p.name == property_name for p in self.metadata.get_properties(frame_type)) \
                and not hasattr(frame_type, property_name):
            raise FramePropertyError(frame_type.__name__, property_name)

        create_frame = self._compile(frame_type)
        output_type = self.hooks.output_type

        def factory(parent: Any) -> Any:
            frame_root = create_frame(parent, None, None)
            value = getattr(frame_root, property_name)
            if value is not None and not isinstance(value, output_type):
                raise TypeError(
                    f"{frame_type.__name__}.{property_name} returned {type(value).__name__}, "
                    f"expected {output_type.__name__}"
                )
            return value

        factory.__name__ = f"create_{frame_type.__name__}_{property_name}"
        factory.plan = create_frame.plan
        return factory

    def build_plan(self, target_type: type) -> ConstructionPlan:
        """
        Build the construction plan for a root type.

        All constructors in the graph are resolved here, so authoring
        errors surface before any instance is created.
        """
        plan = _PlanBuilder()
        parent = Binding("parent", self.hooks.parent_type, PARENT_SLOT)
        browser = Binding("browser", self.hooks.browser_type, BROWSER_SLOT)

        with CompileContextManager.compiling(target_type):
            ctor = self.resolver.resolve(target_type, browser, parent, None)
            document = plan.variable(target_type.__name__, target_type)
            plan.add(Instantiate(document.slot, ctor))
            plan.add(Finalize(
                document.slot,
                self.hooks,
                navigation=self.metadata.get_navigation(target_type),
                locator=self.metadata.get_type_locator(target_type),
            ))
            if ctor.is_fallback:
                self.log.debug("%s built with empty constructor; element properties left unwired", target_type.__name__)
            else:
                self._map_properties(plan, target_type, browser, document, parent)

        return ConstructionPlan(
            parent_type=self.hooks.parent_type,
            output_type=target_type,
            steps=tuple(plan.steps),
            slot_count=plan.slot_count,
            result_slot=document.slot,
        )

    # -------------------------
    # Internals
    # -------------------------

    def _compile(self, target_type: type) -> Callable[..., Any]:
        plan = self.build_plan(target_type)
        self.log.debug("Compiled %s: %d steps", target_type.__name__, len(plan.steps))
        if self.settings.log_plans:
            self.log.debug("%s", plan.describe())
        return plan.compile()

    def _map_properties(
        self,
        plan: _PlanBuilder,
        object_type: type,
        browser: Binding,
        parent_variable: Binding,
        root_locator: Binding,
    ) -> None:
        for prop in self.metadata.get_properties(object_type):
            item_type = self.hooks.get_list_item_type(prop.type)
            if item_type is None and not self.hooks.is_element(prop.type):
                continue

            locator = self.metadata.get_property_locator(prop)
            native_attributes = tuple(self.hooks.get_custom_attributes(prop))
            if locator is None and not native_attributes:
                self.log.debug("Skipping %s: no locator metadata", prop.qualified_name)
                continue

            if item_type is not None:
                root = self._create_element(
                    plan, browser, root_locator, parent_variable, item_type, prop.name, locator, native_attributes
                )
                item = plan.variable(prop.name, prop.type)
                list_type = self.hooks.get_element_collection_type()[item_type]
                plan.add(AdaptList(item.slot, root.slot, list_type))
            else:
                item = self._create_element(
                    plan, browser, root_locator, parent_variable, prop.type, prop.name, locator, native_attributes,
                    recurse=True,
                )

            plan.add(AssignProperty(parent_variable.slot, prop.name, item.slot))

    def _create_element(
        self,
        plan: _PlanBuilder,
        browser: Binding,
        root_locator: Binding,
        parent_variable: Binding,
        declared_type: type,
        property_name: str,
        locator: Optional[ElementLocator],
        native_attributes: Tuple[Any, ...],
        recurse: bool = False,
    ) -> Binding:
        object_type = self.hooks.get_property_proxy_type(declared_type)
        if recurse and CompileContextManager.contains(object_type):
            current = CompileContextManager.current()
            path = f"{current.path}.{property_name}" if current else property_name
            raise RecursiveElementError(object_type.__name__, path)

        with CompileContextManager.compiling(object_type, property_name):
            ctor = self.resolver.resolve(object_type, browser, parent_variable, root_locator, property_name)
            item = plan.variable(property_name, object_type)
            plan.add(Instantiate(item.slot, ctor))
            plan.add(WireElement(item.slot, self.hooks, locator, native_attributes))
            if recurse and not ctor.is_fallback:
                self._map_properties(plan, object_type, browser, item, root_locator)
        return item


def describe_plan(builder: PageBuilder, target_types: Sequence[type]) -> str:
    """Render the plans of several types, one block per type."""
    return "\n\n".join(builder.build_plan(t).describe() for t in target_types)
