# pagebind/repository.py
"""
@file repository.py
@brief YAML locator map: page/property locators and builder settings kept outside the code.

Example::

    builder:
      allow_empty_constructor: false
      ambiguous_constructors: warn
    pages:
      LoginPage:
        navigation: {url: "/login/{tenant}"}
        properties:
          user_name: {key: UserName, id: user}
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Iterable, List, Optional

import yaml
from jsonschema import Draft202012Validator

from .config import BuilderSettings
from .exceptions import ConfigError
from .interfaces import IMetadataReader
from .metadata import (AnnotationMetadataReader, ElementLocator,
                       PageNavigation, PropertyInfo)

DEFAULT_SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schemas", "locators.schema.json")


def _page_keys(cls: type) -> List[str]:
    return [f"{cls.__module__}.{cls.__qualname__}", cls.__qualname__, cls.__name__]


class LocatorRepository:
    """
    Loads a locator map (YAML). Provides builder settings and page/property metadata.
    """

    def __init__(self, path: str, schema_path: Optional[str] = None):
        self.path = os.path.abspath(path)
        self._init_from(self._load_yaml(self.path), schema_path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], schema_path: Optional[str] = None) -> LocatorRepository:
        """Build a repository from an in-memory mapping."""
        repo = cls.__new__(cls)
        repo.path = "<memory>"
        repo._init_from(data, schema_path)
        return repo

    def _init_from(self, data: Dict[str, Any], schema_path: Optional[str]) -> None:
        self._schema = self._load_schema(schema_path or DEFAULT_SCHEMA_PATH)
        self._validator = Draft202012Validator(self._schema)
        self.validate(data)
        self._settings = BuilderSettings.from_dict(data.get("builder"))
        self._pages: Dict[str, Dict[str, Any]] = data.get("pages") or {}

    @staticmethod
    def _load_yaml(path: str) -> Dict[str, Any]:
        if not os.path.exists(path):
            raise ConfigError(f"Locator map YAML not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Locator map YAML must be a mapping at root.")
        return data

    @staticmethod
    def _load_schema(path: str) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def validate(self, data: Dict[str, Any]) -> None:
        """Validate a locator map against the JSON schema."""
        if not isinstance(data, dict):
            raise ConfigError("Locator map must be a mapping at root.")
        errors = sorted(self._validator.iter_errors(data), key=lambda e: list(e.path))
        if errors:
            lines = ["Locator map schema validation failed:"]
            for e in errors:
                where = ".".join(str(p) for p in e.path) or "<root>"
                lines.append(f"- {where}: {e.message}")
            raise ConfigError("\n".join(lines))

    @property
    def settings(self) -> BuilderSettings:
        return self._settings

    def list_pages(self) -> List[str]:
        return sorted(self._pages.keys())

    def get_page_spec(self, name: str) -> Dict[str, Any]:
        if name not in self._pages:
            raise ConfigError(f"Unknown page: {name}")
        return self._pages[name] or {}

    def find_page_spec(self, cls: type) -> Optional[Dict[str, Any]]:
        """Find the entry of a class by ``module.qualname``, qualname or name."""
        for key in _page_keys(cls):
            if key in self._pages:
                return self._pages[key] or {}
        return None

    def get_navigation(self, cls: type) -> Optional[PageNavigation]:
        spec = self.find_page_spec(cls)
        if not spec or "navigation" not in spec:
            return None
        nav = spec["navigation"]
        return PageNavigation(
            url=nav["url"],
            url_pattern=nav.get("url_pattern"),
            is_absolute=bool(nav.get("absolute", False)),
        )

    def get_type_locator(self, cls: type) -> Optional[ElementLocator]:
        spec = self.find_page_spec(cls)
        if not spec or "locator" not in spec:
            return None
        return ElementLocator.from_dict(spec["locator"])

    def get_property_locator(self, cls: type, name: str) -> Optional[ElementLocator]:
        """Look a property up on the class and then on its bases."""
        for klass in cls.__mro__:
            spec = self.find_page_spec(klass)
            if not spec:
                continue
            props = spec.get("properties") or {}
            if name in props:
                return ElementLocator.from_dict(props[name])
        return None


class RepositoryMetadataReader(IMetadataReader):
    """
    Metadata reader where locator map entries override annotation metadata.
    """

    def __init__(self, repo: LocatorRepository, fallback: Optional[IMetadataReader] = None):
        self.repo = repo
        self.fallback = fallback or AnnotationMetadataReader()

    def get_properties(self, cls: type) -> List[PropertyInfo]:
        return self.fallback.get_properties(cls)

    def get_navigation(self, cls: type) -> Optional[PageNavigation]:
        return self.repo.get_navigation(cls) or self.fallback.get_navigation(cls)

    def get_type_locator(self, cls: type) -> Optional[ElementLocator]:
        return self.repo.get_type_locator(cls) or self.fallback.get_type_locator(cls)

    def get_property_locator(self, prop: PropertyInfo) -> Optional[ElementLocator]:
        return self.repo.get_property_locator(prop.owner, prop.name) or self.fallback.get_property_locator(prop)


def emit_locators_yaml(
    page_types: Iterable[type],
    out_path: str,
    metadata: Optional[IMetadataReader] = None,
) -> str:
    """
    Write a locator map for the given page types from their declared metadata.

    Returns:
        Path to the generated YAML file
    """
    metadata = metadata or AnnotationMetadataReader()
    pages: Dict[str, Any] = {}
    for cls in page_types:
        entry: Dict[str, Any] = {}
        nav = metadata.get_navigation(cls)
        if nav is not None:
            entry["navigation"] = {"url": nav.url}
            if nav.url_pattern:
                entry["navigation"]["url_pattern"] = nav.url_pattern
            if nav.is_absolute:
                entry["navigation"]["absolute"] = True
        type_locator = metadata.get_type_locator(cls)
        if type_locator is not None:
            entry["locator"] = type_locator.as_dict()
        props = {}
        for prop in metadata.get_properties(cls):
            locator = metadata.get_property_locator(prop)
            if locator is not None and locator.as_dict():
                props[prop.name] = locator.as_dict()
        if props:
            entry["properties"] = props
        pages[cls.__name__] = entry

    doc = {"pages": pages}
    os.makedirs(os.path.dirname(os.path.abspath(out_path)) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(doc, f, sort_keys=False, allow_unicode=True)
    return out_path
