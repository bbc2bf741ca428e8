# pagebind/cli.py
"""
@file cli.py
@brief Command-line interface for pagebind.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import os
import sys
from typing import Any, List, Optional

import yaml

from .compiler import PageBuilder, describe_plan
from .exceptions import ConfigError, PageBindError, PageDefinitionError
from .generic import GenericBrowser, GenericHooks, GenericSession, describe_tree
from .interfaces import IBuilderHooks
from .repository import (LocatorRepository, RepositoryMetadataReader,
                         emit_locators_yaml)


def _load_object(target: str) -> Any:
    """Import ``package.module:Name`` (nested names allowed after the colon)."""
    if ":" not in target:
        raise ValueError(f"Expected 'module:Name', got: {target!r}")
    module_name, _, attr_path = target.partition(":")
    obj: Any = importlib.import_module(module_name)
    for part in attr_path.split("."):
        obj = getattr(obj, part)
    return obj


def _build_builder(args: argparse.Namespace) -> PageBuilder:
    hooks_cls = _load_object(args.hooks) if args.hooks else GenericHooks
    if not (isinstance(hooks_cls, type) and issubclass(hooks_cls, IBuilderHooks)):
        raise ValueError(f"--hooks must name an IBuilderHooks subclass, got: {args.hooks}")
    hooks: IBuilderHooks = hooks_cls()
    metadata = None
    settings = None
    if args.locators:
        repo = LocatorRepository(args.locators)
        metadata = RepositoryMetadataReader(repo)
        settings = repo.settings
    return PageBuilder(hooks, metadata=metadata, settings=settings)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    argv = argv if argv is not None else sys.argv[1:]

    p = argparse.ArgumentParser(
        prog="pagebind",
        description="pagebind - compile and audit page-object classes",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # -------------------------
    # inspect
    # -------------------------
    insp = sub.add_parser("inspect", help="Compile page classes and print their plans/locator trees")
    insp.add_argument("targets", nargs="+", help="Page classes as module:Class")
    insp.add_argument("--hooks", default=None, help="Back-end hooks class as module:Class (default: generic back end). Only the generic back end can be built without --plan")
    insp.add_argument("--locators", "-l", default=None, help="Optional locator map YAML overriding declared metadata")
    insp.add_argument("--plan", action="store_true", help="Print the construction plan instead of the built tree")
    insp.add_argument("--base-url", default="", help="Base URL of the generic browser")
    insp.add_argument("--emit-locators-yaml", default=None, help="Optional: write a locator map for the targets to this path")
    insp.add_argument("--verbose", action="store_true", help="Enable debug logging")

    # -------------------------
    # validate
    # -------------------------
    valp = sub.add_parser("validate", help="Validate a locator map")
    valp.add_argument("--locators", "-l", required=True, help="Path to locator map YAML")

    # -------------------------
    # list-pages
    # -------------------------
    listp = sub.add_parser("list-pages", help="List pages and properties defined in a locator map")
    listp.add_argument("--locators", "-l", required=True, help="Path to locator map YAML")

    args = p.parse_args(argv)

    # -------------------------
    # Execute commands
    # -------------------------

    if args.cmd == "inspect":
        if args.verbose:
            logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
        try:
            builder = _build_builder(args)
            page_types = [_load_object(t) for t in args.targets]
        except (ImportError, AttributeError, ValueError, TypeError, OSError, ConfigError) as e:
            print(f"Error loading targets: {e}", file=sys.stderr)
            return 1

        if not args.plan and not isinstance(builder.hooks, GenericHooks):
            print("Error: only the generic back end can build trees; use --plan with --hooks", file=sys.stderr)
            return 1

        try:
            if args.plan:
                print(describe_plan(builder, page_types))
            else:
                session = GenericSession()
                browser = GenericBrowser(args.base_url)
                trees = {}
                for page_type in page_types:
                    if issubclass(page_type, builder.hooks.output_type):
                        factory = builder.compile_factory(page_type)
                    else:
                        factory = builder.compile_element(page_type)
                    trees[page_type.__name__] = describe_tree(factory(session, browser))
                print(yaml.safe_dump(trees, sort_keys=False, allow_unicode=True), end="")
        except (PageDefinitionError, TypeError) as e:
            print(f"X {e}", file=sys.stderr)
            return 2

        if args.emit_locators_yaml:
            out = emit_locators_yaml(page_types, args.emit_locators_yaml, builder.metadata)
            print(f"Locator map written: {out}")
        return 0

    if args.cmd == "validate":
        try:
            repo = LocatorRepository(args.locators)
        except OSError as e:
            print(f"Error loading locator map: {e}", file=sys.stderr)
            return 1
        except ConfigError as e:
            if not os.path.isfile(args.locators):
                print(f"Error loading locator map: {e}", file=sys.stderr)
                return 1
            print(f"X Locator map is invalid: {e}", file=sys.stderr)
            return 2
        print(f"+ Locator map is valid: {args.locators}")
        print(f"  - Pages: {len(repo.list_pages())}")
        print(f"  - Ambiguous constructors: {repo.settings.ambiguous_constructors}")
        return 0

    if args.cmd == "list-pages":
        try:
            repo = LocatorRepository(args.locators)
        except (OSError, PageBindError) as e:
            print(f"Error loading locator map: {e}", file=sys.stderr)
            return 1

        pages = repo.list_pages()
        print(f"Pages ({len(pages)}):")
        for name in pages:
            spec = repo.get_page_spec(name)
            nav = spec.get("navigation")
            suffix = f" -> {nav['url']}" if nav else ""
            print(f"\n  [{name}]{suffix}")
            for prop in spec.get("properties") or {}:
                print(f"    - {prop}")
        return 0

    return 1


if __name__ == "__main__":
    sys.exit(main())
