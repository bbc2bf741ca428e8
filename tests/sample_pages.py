# tests/sample_pages.py
"""
Page classes and hooks shared by the tests and the CLI tests.
"""

from typing import Annotated, ClassVar, Optional

from pagebind import (ElementList, IBuilderHooks, constructor, locate,
                      navigation)
from pagebind.generic import (GenericBrowser, GenericElement,
                              GenericElementList, GenericHooks, GenericNode,
                              GenericPage, GenericSession, NativeAttribute)


class SearchBox(GenericElement):
    query: Annotated[GenericElement, locate("Query", id="q")] = None
    submit: Annotated[GenericElement, locate("Go", css="button.go")] = None


class Row(GenericElement):
    name: Annotated[GenericElement, locate("Name", css="td.name")] = None


@navigation("/login/{tenant}")
class LoginPage(GenericPage):
    user_name: Annotated[GenericElement, locate("UserName", id="user")] = None
    password: Annotated[GenericElement, locate("Password", id="pass"), NativeAttribute("masked")] = None
    remember: Annotated[GenericElement, NativeAttribute("checkbox")] = None
    help_link: GenericElement = None
    search: Annotated[Optional[SearchBox], locate("Search", id="search")] = None
    title: str = "Login"
    registry: ClassVar[dict] = {}


@navigation("/results")
class ResultsPage(GenericPage):
    rows: Annotated[ElementList[Row], locate("Rows", css="table.results tr")] = None
    footer: Annotated[GenericElement, locate("Footer", id="footer")] = None


@locate("Settings", id="settings-dialog")
class SettingsDialog(GenericPage):
    save: Annotated[GenericElement, locate("Save", id="save")] = None


class Dialog(GenericPage):
    ok: Annotated[GenericElement, locate("Ok", id="ok")] = None

    def __init__(self, page: GenericPage, missing: str):
        super().__init__(None)
        self.page = page
        self.missing = missing

    @constructor
    def blank(cls):
        return cls(None, "")


class FrameDocument(GenericPage):
    body: Annotated[GenericElement, locate("Body", css="body")] = None


class FrameRoot(GenericPage):
    created: ClassVar[list] = []
    document: FrameDocument

    def __init__(self, session: GenericSession):
        super().__init__(session)
        self.document = FrameDocument(session)
        FrameRoot.created.append(self)


class Framed(GenericElement):
    """Element that also asks for the factory's root parent."""

    def __init__(self, parent: GenericNode, session: GenericSession):
        super().__init__(parent)
        self.session = session


class FramedPage(GenericPage):
    framed: Annotated[Framed, locate("Framed", id="framed")] = None


class PlanOnlyHooks(IBuilderHooks):
    """Hooks of a back end the command line cannot build trees for."""

    parent_type = GenericSession
    output_type = GenericPage
    element_type = GenericElement
    browser_type = GenericBrowser

    def assign_element_attributes(self, element, locator, native_attributes):
        element.locator = locator

    def get_element_collection_type(self):
        return GenericElementList


class ConfiguredHooks(GenericHooks):
    def __init__(self, endpoint: str):
        super().__init__()
        self.endpoint = endpoint
