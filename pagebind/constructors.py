# pagebind/constructors.py
"""
@file constructors.py
@brief Selects a constructor for a page/element type and binds its parameters.
"""

from __future__ import annotations

import inspect
import logging
import types
from dataclasses import dataclass
from typing import (Any, Callable, List, Optional, Sequence, Tuple, Union,
                    get_args, get_origin, get_type_hints)

from .config import BuilderSettings
from .context import CompileContextManager
from .exceptions import (AmbiguousConstructorError, ConstructorResolutionError,
                         PageDefinitionError)
from .interfaces import IBuilderHooks
from .metadata import unwrap_annotation

CONSTRUCTOR_ATTR = "__pagebind_constructor__"

_EMPTY = inspect.Parameter.empty


def is_assignable(source: Any, target: Any) -> bool:
    """Check if a value of static type ``source`` can be passed where ``target`` is declared."""
    target, _ = unwrap_annotation(target)
    if target is _EMPTY or target is Any or target is object:
        return False
    origin = get_origin(target)
    if origin is Union or origin is types.UnionType:
        return any(is_assignable(source, a) for a in get_args(target) if a is not type(None))
    if origin is not None:
        target = origin
    if not isinstance(source, type) or not isinstance(target, type):
        return False
    try:
        return issubclass(source, target)
    except TypeError:
        return False


@dataclass(frozen=True)
class Binding:
    """A value produced while building a plan, identified by its frame slot."""
    name: str
    type: Any
    slot: int

    def accepted_by(self, parameter_type: Any) -> bool:
        return is_assignable(self.type, parameter_type)

    def resolve(self, frame: List[Any]) -> Any:
        return frame[self.slot]

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True)
class Default:
    """A parameter default passed explicitly (positional-only parameters)."""
    value: Any

    def resolve(self, frame: List[Any]) -> Any:
        return self.value

    def describe(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    annotation: Any
    kind: Any
    default: Any = _EMPTY

    @property
    def has_default(self) -> bool:
        return self.default is not _EMPTY


@dataclass(frozen=True)
class ConstructorCandidate:
    owner: type
    name: str
    factory: Callable[..., Any]
    parameters: Tuple[ParameterSpec, ...]

    def describe(self) -> str:
        params = ", ".join(p.name for p in self.parameters)
        if self.name == "__init__":
            return f"{self.owner.__name__}({params})"
        return f"{self.owner.__name__}.{self.name}({params})"


@dataclass(frozen=True)
class ResolvedConstructor:
    """A constructor together with the source of every argument."""
    candidate: ConstructorCandidate
    arguments: Tuple[Any, ...] = ()
    keywords: Tuple[Tuple[str, Any], ...] = ()
    is_fallback: bool = False

    def describe(self) -> str:
        parts = [a.describe() for a in self.arguments]
        parts.extend(f"{k}={s.describe()}" for k, s in self.keywords)
        name = self.candidate.owner.__name__
        if self.candidate.name != "__init__":
            name += f".{self.candidate.name}"
        return f"{name}({', '.join(parts)})"


def constructor(func: Any) -> classmethod:
    """
    Mark a classmethod as an alternate constructor.

    Alternate constructors compete with ``__init__`` during resolution;
    the candidate with the most parameters that all bind wins.
    """
    target = func.__func__ if isinstance(func, classmethod) else func
    setattr(target, CONSTRUCTOR_ATTR, True)
    return func if isinstance(func, classmethod) else classmethod(func)


def _parameters(func: Callable[..., Any], where: str) -> Tuple[ParameterSpec, ...]:
    try:
        hints = get_type_hints(func)
    except NameError as e:
        raise PageDefinitionError(f"Cannot resolve constructor annotations of '{where}': {e}") from e
    except TypeError:
        # builtin slot wrappers carry no annotations
        hints = {}
    try:
        params = list(inspect.signature(func).parameters.values())[1:]
    except (TypeError, ValueError):
        return ()
    return tuple(
        ParameterSpec(p.name, hints.get(p.name, p.annotation), p.kind, p.default)
        for p in params
        if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
    )


def get_constructors(cls: type) -> List[ConstructorCandidate]:
    """
    Enumerate constructor candidates ordered by descending parameter count.

    Alternate constructors are inherited: the most derived definition of
    each name wins, and it is bound to ``cls`` so it builds the subclass.
    """
    init = cls.__init__
    init_params = () if init is object.__init__ else _parameters(init, f"{cls.__name__}.__init__")
    candidates = [ConstructorCandidate(cls, "__init__", cls, init_params)]
    seen = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(value, classmethod) and getattr(value.__func__, CONSTRUCTOR_ATTR, False):
                params = _parameters(value.__func__, f"{klass.__name__}.{name}")
                candidates.append(ConstructorCandidate(cls, name, getattr(cls, name), params))
    return sorted(candidates, key=lambda c: len(c.parameters), reverse=True)


class ConstructorResolver:
    """
    Binds constructor parameters from the browser, parent and root-locator bindings.
    """

    def __init__(
        self,
        hooks: IBuilderHooks,
        settings: Optional[BuilderSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.hooks = hooks
        self.settings = settings or BuilderSettings()
        self.log = logger or logging.getLogger("pagebind")

    @property
    def allow_empty_constructor(self) -> bool:
        if self.settings.allow_empty_constructor is not None:
            return self.settings.allow_empty_constructor
        return self.hooks.allow_empty_constructor

    def resolve(
        self,
        item_type: type,
        browser: Binding,
        parent: Binding,
        root_locator: Optional[Binding] = None,
        property_name: Optional[str] = None,
    ) -> ResolvedConstructor:
        """
        Resolve the constructor for a type.

        @param item_type Type to construct
        @param browser Browser binding
        @param parent Parent binding (containing instance or factory parent)
        @param root_locator Factory parent binding for nested elements
        @param property_name Property being built; None for a root type
        @return ResolvedConstructor with every parameter bound
        @throws ConstructorResolutionError if no constructor binds
        """
        empty: Optional[ConstructorCandidate] = None
        chosen: Optional[ResolvedConstructor] = None
        rivals: List[ConstructorCandidate] = []

        for candidate in get_constructors(item_type):
            if not candidate.parameters:
                if empty is None:
                    empty = candidate
                continue
            if chosen is not None:
                if len(candidate.parameters) == len(chosen.candidate.parameters):
                    if self._bind(candidate, browser, parent, root_locator) is not None:
                        rivals.append(candidate)
                continue
            chosen = self._bind(candidate, browser, parent, root_locator)

        if chosen is not None:
            if rivals:
                self._report_ambiguity(item_type, [chosen.candidate] + rivals)
            return chosen

        if self.allow_empty_constructor and empty is not None:
            self.log.debug("Using empty constructor for %s", item_type.__name__)
            return ResolvedConstructor(empty, is_fallback=True)

        raise ConstructorResolutionError(
            target_type=item_type.__name__,
            parent_type=self.hooks.parent_type.__name__,
            property_name=property_name,
            trace=CompileContextManager.format_current_trace(),
        )

    def _bind(
        self,
        candidate: ConstructorCandidate,
        browser: Binding,
        parent: Binding,
        root_locator: Optional[Binding],
    ) -> Optional[ResolvedConstructor]:
        arguments: List[Any] = []
        keywords: List[Tuple[str, Any]] = []
        skipped_positional = False

        for param in candidate.parameters:
            source = None
            if param.annotation is not _EMPTY:
                if browser.accepted_by(param.annotation):
                    source = browser
                else:
                    source = self.hooks.fill_constructor_parameter(param.annotation, parent, root_locator)

            if source is None:
                if not param.has_default:
                    return None
                if param.kind is inspect.Parameter.POSITIONAL_ONLY:
                    source = Default(param.default)
                else:
                    skipped_positional = True
                    continue

            if param.kind is inspect.Parameter.KEYWORD_ONLY or (
                skipped_positional and param.kind is inspect.Parameter.POSITIONAL_OR_KEYWORD
            ):
                keywords.append((param.name, source))
            else:
                arguments.append(source)

        return ResolvedConstructor(candidate, tuple(arguments), tuple(keywords))

    def _report_ambiguity(self, item_type: type, candidates: Sequence[ConstructorCandidate]) -> None:
        names = [c.describe() for c in candidates]
        policy = self.settings.ambiguous_constructors
        if policy == "error":
            raise AmbiguousConstructorError(item_type.__name__, names)
        if policy == "warn":
            self.log.warning(
                "Ambiguous constructors on %s: %s; using %s",
                item_type.__name__, ", ".join(names), names[0],
            )
