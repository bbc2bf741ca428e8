# pagebind/plan.py
"""
@file plan.py
@brief Construction plans: ordered create/wire/recurse/assign steps over frame slots.

A plan is built once from type metadata and compiled into a closure. Each
invocation of the closure allocates a fresh frame (one slot per value the
plan produces) and runs the pre-bound steps in order, so no metadata is
read per instantiation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from .constructors import ResolvedConstructor
from .interfaces import IBuilderHooks
from .metadata import ElementLocator, PageNavigation

PARENT_SLOT = 0
BROWSER_SLOT = 1
CUSTOM_INIT_SLOT = 2
RESERVED_SLOTS = 3


@dataclass(frozen=True)
class Instantiate:
    slot: int
    constructor: ResolvedConstructor

    def run(self, frame: List[Any]) -> None:
        ctor = self.constructor
        args = [a.resolve(frame) for a in ctor.arguments]
        kwargs = {name: s.resolve(frame) for name, s in ctor.keywords}
        frame[self.slot] = ctor.candidate.factory(*args, **kwargs)

    def describe(self) -> str:
        return f"${self.slot} = {self.constructor.describe()}"


@dataclass(frozen=True)
class Finalize:
    """Root hooks: base-type check, custom initializer, navigation, container locator."""
    slot: int
    hooks: IBuilderHooks
    navigation: Optional[PageNavigation] = None
    locator: Optional[ElementLocator] = None

    def run(self, frame: List[Any]) -> None:
        instance = frame[self.slot]
        self.hooks.check_base_type(instance)
        custom_init = frame[CUSTOM_INIT_SLOT]
        if custom_init is not None:
            custom_init(instance)
        if self.navigation is not None:
            self.hooks.set_page_navigation(instance, self.navigation)
        if self.locator is not None:
            self.hooks.assign_page_element_attributes(instance, self.locator)

    def describe(self) -> str:
        extra = []
        if self.navigation is not None:
            extra.append(f"navigation={self.navigation.url!r}")
        if self.locator is not None:
            extra.append(f"locator={self.locator.as_dict()}")
        return f"finalize ${self.slot}" + (f" [{', '.join(extra)}]" if extra else "")


@dataclass(frozen=True)
class WireElement:
    slot: int
    hooks: IBuilderHooks
    locator: Optional[ElementLocator]
    native_attributes: Tuple[Any, ...] = ()

    def run(self, frame: List[Any]) -> None:
        self.hooks.assign_element_attributes(frame[self.slot], self.locator, self.native_attributes)

    def describe(self) -> str:
        locator = self.locator.as_dict() if self.locator is not None else None
        text = f"wire ${self.slot} locator={locator}"
        if self.native_attributes:
            text += f" native={list(self.native_attributes)}"
        return text


@dataclass(frozen=True)
class AdaptList:
    slot: int
    root_slot: int
    list_type: Any

    def run(self, frame: List[Any]) -> None:
        frame[self.slot] = self.list_type(frame[self.root_slot], frame[BROWSER_SLOT])

    def describe(self) -> str:
        return f"${self.slot} = {_type_name(self.list_type)}(${self.root_slot}, browser)"


@dataclass(frozen=True)
class AssignProperty:
    owner_slot: int
    name: str
    value_slot: int

    def run(self, frame: List[Any]) -> None:
        setattr(frame[self.owner_slot], self.name, frame[self.value_slot])

    def describe(self) -> str:
        return f"${self.owner_slot}.{self.name} = ${self.value_slot}"


def _type_name(tp: Any) -> str:
    name = getattr(tp, "__name__", None)
    return name if name is not None else repr(tp)


@dataclass(frozen=True)
class ConstructionPlan:
    """Immutable, ordered construction steps for one (parent type, output type) pair."""
    parent_type: type
    output_type: type
    steps: Tuple[Any, ...]
    slot_count: int
    result_slot: int

    def describe(self) -> str:
        lines = [f"plan {self.output_type.__name__} (parent={self.parent_type.__name__}, slots={self.slot_count})"]
        lines.extend(f"  {i:>3}. {step.describe()}" for i, step in enumerate(self.steps, start=1))
        return "\n".join(lines)

    def compile(self) -> Callable[..., Any]:
        """
        Compile the plan into a stateless factory.

        Returns:
            ``factory(parent, browser=None, custom_init=None) -> instance``
        """
        runners = tuple(step.run for step in self.steps)
        slot_count = self.slot_count
        result_slot = self.result_slot

        def factory(parent: Any, browser: Any = None, custom_init: Optional[Callable[[Any], None]] = None) -> Any:
            frame: List[Any] = [None] * slot_count
            frame[PARENT_SLOT] = parent
            frame[BROWSER_SLOT] = browser
            frame[CUSTOM_INIT_SLOT] = custom_init
            for run in runners:
                run(frame)
            return frame[result_slot]

        factory.__name__ = f"create_{self.output_type.__name__}"
        factory.__qualname__ = factory.__name__
        factory.plan = self
        return factory
