# tests/test_compiler.py
"""
Tests for the object graph compiler.
"""

import threading
from typing import Annotated

import pytest

from pagebind import (BuilderSettings, ConstructorResolutionError, PageBuilder,
                      RecursiveElementError, locate, navigation)
from pagebind.generic import (GenericBrowser, GenericElement,
                              GenericElementList, GenericHooks, GenericNode,
                              GenericPage, GenericSession, NativeAttribute,
                              describe_tree)
from pagebind.plan import AssignProperty, Finalize, Instantiate, WireElement

from sample_pages import (Dialog, Framed, FramedPage, LoginPage, ResultsPage,
                          Row, SearchBox, SettingsDialog)


class Panel(GenericElement):
    inner: Annotated[GenericElement, locate("Inner", id="inner")] = None


class OrderedPage(GenericPage):
    seen_inner = None

    @property
    def panel(self) -> Annotated[Panel, locate("Panel", id="panel")]:
        return self._panel

    @panel.setter
    def panel(self, value):
        self.seen_inner = value.inner
        self._panel = value


class IButton(GenericElement):
    pass


class HtmlButton(IButton):
    pass


class ButtonPage(GenericPage):
    button: Annotated[IButton, locate("Button", id="btn")] = None


class ProxyHooks(GenericHooks):
    def get_property_proxy_type(self, declared_type):
        return {IButton: HtmlButton}.get(declared_type, declared_type)


class Node(GenericElement):
    child: Annotated["Node", locate("Child")] = None


class BrokenChild(GenericElement):
    def __init__(self, parent: GenericNode, token: str):
        super().__init__(parent)


class BrokenPage(GenericPage):
    instances = 0
    broken: Annotated[BrokenChild, locate("Broken")] = None

    def __init__(self, session: GenericSession):
        super().__init__(session)
        BrokenPage.instances += 1


@navigation("/orders/{order_id}")
@locate("Orders", id="orders")
class OrdersPage(GenericPage):
    total: Annotated[GenericElement, locate("Total", id="total")] = None


class RecordingHooks(GenericHooks):
    def __init__(self):
        super().__init__()
        self.events = []

    def check_base_type(self, instance):
        self.events.append(("check", type(instance).__name__))
        super().check_base_type(instance)

    def set_page_navigation(self, instance, navigation):
        self.events.append(("navigation", navigation.url))
        super().set_page_navigation(instance, navigation)

    def assign_page_element_attributes(self, instance, locator):
        self.events.append(("page_locator", locator.key))
        super().assign_page_element_attributes(instance, locator)

    def assign_element_attributes(self, element, locator, native_attributes):
        self.events.append(("wire", locator.key if locator else None))
        super().assign_element_attributes(element, locator, native_attributes)


class FailingHooks(GenericHooks):
    def assign_element_attributes(self, element, locator, native_attributes):
        raise RuntimeError(f"cannot wire {locator.key}")


@pytest.fixture
def builder():
    return PageBuilder(GenericHooks())


@pytest.fixture
def session():
    return GenericSession()


@pytest.fixture
def browser():
    return GenericBrowser("https://example.test")


class TestCompileFactory:
    """Tests for PageBuilder.compile_factory."""

    def test_builds_page_with_parent(self, builder, session, browser):
        """Should construct the page with the parent bound to its constructor."""
        page = builder.compile_factory(LoginPage)(session, browser)

        assert isinstance(page, LoginPage)
        assert page.session is session

    def test_locator_tagged_properties_are_wired(self, builder, session, browser):
        """Should construct every property carrying locator metadata."""
        page = builder.compile_factory(LoginPage)(session, browser)

        assert page.user_name is not None
        assert page.user_name.locator == locate("UserName", id="user")
        assert page.password.locator.get("id") == "pass"
        assert page.search.query.locator.key == "Query"
        assert page.search.submit.locator.get("css") == "button.go"

    def test_native_attributes_alone_trigger_wiring(self, builder, session, browser):
        """Should wire a property that only carries native attributes."""
        page = builder.compile_factory(LoginPage)(session, browser)

        assert page.remember is not None
        assert page.remember.locator is None
        assert page.remember.native_attributes == (NativeAttribute("checkbox"),)
        assert page.password.native_attributes == (NativeAttribute("masked"),)

    def test_untagged_element_property_is_not_wired(self, builder, session, browser):
        """Should leave element properties without metadata untouched."""
        page = builder.compile_factory(LoginPage)(session, browser)

        assert page.help_link is None
        assert page.title == "Login"

    def test_nested_elements_get_containing_parent(self, builder, session, browser):
        """Should bind each nested element's parent to its containing instance."""
        page = builder.compile_factory(LoginPage)(session, browser)

        assert page.user_name.parent is page
        assert page.search.parent is page
        assert page.search.query.parent is page.search
        assert isinstance(page.search, SearchBox)

    def test_root_locator_binding(self, builder, session, browser):
        """Should bind nested constructor parameters to the factory parent when the driver picks it."""
        page = builder.compile_factory(FramedPage)(session, browser)

        assert isinstance(page.framed, Framed)
        assert page.framed.parent is page
        assert page.framed.session is session

    def test_navigation_and_custom_init(self, builder, session, browser):
        """Should apply navigation metadata and run the custom initializer."""
        seen = []
        page = builder.compile_factory(LoginPage)(session, browser, seen.append)

        assert seen == [page]
        assert page.navigation.url == "/login/{tenant}"
        assert page.kind == "page"

    def test_factory_is_reusable(self, builder, session, browser):
        """Should return a fresh graph on every invocation."""
        factory = builder.compile_factory(LoginPage)

        first = factory(session, browser)
        second = factory(GenericSession("other"), browser)

        assert first is not second
        assert first.user_name is not second.user_name
        assert second.session.name == "other"

    def test_browser_is_optional(self, builder, session):
        """Should build without a browser handle."""
        page = builder.compile_factory(LoginPage)(session)

        assert page.user_name is not None

    def test_rejects_non_page_type(self, builder):
        """Should refuse types that are not pages."""
        with pytest.raises(TypeError):
            builder.compile_factory(SearchBox)

    def test_same_type_compiles_to_equal_plans(self, builder, session, browser):
        """Should be a pure function of type metadata."""
        assert builder.build_plan(LoginPage) == builder.build_plan(LoginPage)

        first = builder.compile_factory(LoginPage)(session, browser)
        second = builder.compile_factory(LoginPage)(session, browser)
        assert describe_tree(first) == describe_tree(second)


class TestFinalize:
    """Tests for root finalization hooks."""

    def test_hook_order(self, session, browser):
        """Should check, initialize, navigate and apply the container locator in order."""
        hooks = RecordingHooks()
        factory = PageBuilder(hooks).compile_factory(OrdersPage)

        page = factory(session, browser, lambda p: hooks.events.append(("custom", type(p).__name__)))

        assert hooks.events == [
            ("check", "OrdersPage"),
            ("custom", "OrdersPage"),
            ("navigation", "/orders/{order_id}"),
            ("page_locator", "Orders"),
            ("wire", "Total"),
        ]
        assert page.locator.get("id") == "orders"

    def test_container_locator_is_applied(self, builder, session, browser):
        """Should stamp a class-level locator onto the built instance."""
        dialog = builder.compile_factory(SettingsDialog)(session, browser)

        assert dialog.locator.key == "Settings"
        assert dialog.navigation is None
        assert dialog.save.locator.key == "Save"

    def test_plan_shape(self, builder):
        """Should emit instantiate/finalize then wire/assign steps."""
        plan = builder.build_plan(OrdersPage)
        kinds = [type(step) for step in plan.steps]

        assert kinds == [Instantiate, Finalize, Instantiate, WireElement, AssignProperty]
        assert plan.result_slot == plan.steps[0].slot
        assert "OrdersPage" in plan.describe()


class TestDepthFirst:
    """Tests for depth-first traversal."""

    def test_children_wired_before_assignment(self, builder, session, browser):
        """Should fully build a child before assigning it to its parent."""
        page = builder.compile_factory(OrderedPage)(session, browser)

        assert page.seen_inner is not None
        assert page.seen_inner.locator.key == "Inner"
        assert page.panel.inner is page.seen_inner

    def test_wire_order_is_depth_first(self, session, browser):
        """Should wire a nested subtree before the next sibling."""
        hooks = RecordingHooks()
        PageBuilder(hooks).compile_factory(LoginPage)(session, browser)

        wires = [key for kind, key in hooks.events if kind == "wire"]
        assert wires.index("Search") < wires.index("Query") < wires.index("Go")
        assert wires[-3:] == ["Search", "Query", "Go"]


class TestLists:
    """Tests for list-of-elements properties."""

    def test_list_property_gets_concrete_list(self, builder, session, browser):
        """Should wrap a collection root element in the driver's list type."""
        page = builder.compile_factory(ResultsPage)(session, browser)

        assert isinstance(page.rows, GenericElementList)
        assert page.rows.item_type is Row
        assert page.rows.browser is browser

    def test_collection_root_located_by_property_locator(self, builder, session, browser):
        """Should build the collection root with the list property's locator."""
        page = builder.compile_factory(ResultsPage)(session, browser)

        root = page.rows.root
        assert isinstance(root, Row)
        assert root.parent is page
        assert root.locator.key == "Rows"
        assert page.rows.locator.get("css") == "table.results tr"

    def test_collection_root_is_not_recursed(self, builder, session, browser):
        """Should not wire the item type's own properties on the collection root."""
        page = builder.compile_factory(ResultsPage)(session, browser)

        assert page.rows.root.name is None
        assert page.footer.locator.key == "Footer"


class TestEmptyConstructor:
    """Tests for the empty-constructor fallback."""

    def test_fallback_when_allowed(self, session, browser):
        """Should use the zero-argument constructor and leave elements unwired."""
        builder = PageBuilder(GenericHooks(allow_empty_constructor=True))

        dialog = builder.compile_factory(Dialog)(session, browser)

        assert isinstance(dialog, Dialog)
        assert dialog.missing == ""
        assert dialog.ok is None
        assert dialog.kind == "page"

    def test_fails_when_disallowed(self, builder):
        """Should raise ConstructorResolutionError naming the type."""
        with pytest.raises(ConstructorResolutionError) as exc_info:
            builder.compile_factory(Dialog)

        error = exc_info.value
        assert error.target_type == "Dialog"
        assert error.property_name is None
        assert "Constructor on type 'Dialog'" in str(error)
        assert "GenericSession" in str(error)

    def test_settings_override_hooks(self, session):
        """Should let builder settings enable the fallback."""
        builder = PageBuilder(GenericHooks(), settings=BuilderSettings(allow_empty_constructor=True))

        assert builder.compile_factory(Dialog)(session).ok is None


class TestCompileErrors:
    """Tests for compile-time failures."""

    def test_nested_resolution_error_names_property(self):
        """Should name the property and type of the broken element."""
        builder = PageBuilder(GenericHooks())

        with pytest.raises(ConstructorResolutionError) as exc_info:
            builder.compile_factory(BrokenPage)

        error = exc_info.value
        assert error.property_name == "broken"
        assert error.target_type == "BrokenChild"
        assert "Property 'broken' of type 'BrokenChild'" in str(error)
        assert "property 'broken' (BrokenChild)" in str(error)

    def test_fails_before_constructing_anything(self):
        """Should raise while compiling, before any instance exists."""
        BrokenPage.instances = 0

        with pytest.raises(ConstructorResolutionError):
            PageBuilder(GenericHooks()).compile_factory(BrokenPage)

        assert BrokenPage.instances == 0

    def test_recursive_element_type(self, builder):
        """Should report an element type that contains itself."""
        with pytest.raises(RecursiveElementError) as exc_info:
            builder.compile_element(Node)

        assert exc_info.value.path == "Node.child"
        assert str(exc_info.value) == "Element type 'Node' contains itself at 'Node.child'"

    def test_hook_failures_propagate_unchanged(self, session):
        """Should let hook exceptions reach the caller unwrapped."""
        factory = PageBuilder(FailingHooks()).compile_factory(OrdersPage)

        with pytest.raises(RuntimeError, match="cannot wire Total"):
            factory(session)


class TestProxyTypes:
    """Tests for proxy-type substitution."""

    def test_proxy_type_is_constructed(self, session):
        """Should construct the driver's concrete type for a declared element type."""
        page = PageBuilder(ProxyHooks()).compile_factory(ButtonPage)(session)

        assert type(page.button) is HtmlButton
        assert page.button.locator.key == "Button"


class TestCompileElement:
    """Tests for on-demand element factories."""

    def test_builds_element_from_parent(self, builder, session, browser):
        """Should build an element and its nested properties."""
        search = builder.compile_element(SearchBox)(session, browser)

        assert isinstance(search, SearchBox)
        assert search.parent is session
        assert search.kind == "element"
        assert search.query.locator.key == "Query"

    def test_accepts_pages(self, builder, session):
        """Should also build page types surfaced on demand."""
        dialog = builder.compile_element(SettingsDialog)(session)

        assert dialog.save is not None

    def test_rejects_other_types(self, builder):
        """Should refuse types that are neither elements nor pages."""
        with pytest.raises(TypeError):
            builder.compile_element(str)


class TestConcurrentUse:
    """Tests for sharing one compiled factory between threads."""

    def test_factory_called_from_many_threads(self, builder):
        """Should build a separate graph for every concurrent call."""
        factory = builder.compile_factory(LoginPage)
        start = threading.Barrier(8)
        pages = []
        lock = threading.Lock()

        def worker(index):
            session = GenericSession(f"s{index}")
            start.wait()
            for _ in range(20):
                page = factory(session)
                with lock:
                    pages.append(page)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(pages) == 160
        assert len({id(p) for p in pages}) == 160
        assert len({id(p.search.query) for p in pages}) == 160
        for page in pages:
            assert page.user_name.parent is page
            assert page.search.query.parent is page.search
            assert page.search.query.locator.key == "Query"
