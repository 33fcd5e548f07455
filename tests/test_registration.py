"""Registration surface: method validation, tables, decorators, handler containers."""

import pytest

from smartpath import EmptyMethodSet, InvalidMethod, Router, RoutingError, route
from smartpath.core.methods import SUPPORTED_METHODS, normalize_methods


def noop(params):
    return None


def test_methods_are_stored_upper_case():
    router = Router()
    router.add_route(["get", "Post"], "/items", noop)
    assert [entry.method for entry in router.entries()] == ["GET", "POST"]


def test_comma_separated_methods():
    assert normalize_methods(" get, head ") == ["GET", "HEAD"]


def test_any_iterable_of_methods_is_accepted():
    router = Router()
    router.add_route({"GET": 1, "post": 2}.keys(), "/a", noop)
    router.add_route((m for m in ["put", "DELETE"]), "/b", noop)
    router.add_route(frozenset(["PATCH"]), "/c", noop)
    assert [e.method for e in router.entries()] == ["GET", "POST", "PUT", "DELETE", "PATCH"]
    assert router.dispatch("delete", "/b") == 200


def test_empty_iterable_is_an_empty_method_set():
    with pytest.raises(EmptyMethodSet):
        normalize_methods(iter(()))
    with pytest.raises(EmptyMethodSet):
        normalize_methods({}.keys())


@pytest.mark.parametrize("token", [" get", "get ", " GET ", "\tpost"])
def test_padded_method_tokens_are_rejected(token):
    router = Router()
    with pytest.raises(InvalidMethod) as excinfo:
        router.add_route([token], "/", noop)
    assert excinfo.value.method == token
    assert router.entries() == ()


def test_empty_string_is_an_invalid_method():
    with pytest.raises(InvalidMethod):
        normalize_methods("")


def test_registration_is_atomic_on_invalid_method():
    router = Router()
    with pytest.raises(InvalidMethod) as excinfo:
        router.add_route(["GET", "POST", "fetch", "PUT"], "/items", noop)
    assert excinfo.value.method == "fetch"
    assert router.entries() == ()
    assert router.dispatch("GET", "/items") == 404


def test_empty_method_set_is_rejected():
    router = Router()
    with pytest.raises(EmptyMethodSet):
        router.add_route([], "/items", noop)
    assert router.entries() == ()


def test_registration_errors_share_a_base():
    assert issubclass(InvalidMethod, RoutingError)
    assert issubclass(EmptyMethodSet, RoutingError)
    assert issubclass(RoutingError, ValueError)


def test_unsupported_methods_value_type():
    with pytest.raises(InvalidMethod):
        normalize_methods(42)


def test_all_registers_every_supported_method():
    router = Router()
    router.all("/", noop)
    assert tuple(entry.method for entry in router.entries()) == SUPPORTED_METHODS


def test_entry_fields():
    router = Router()
    router.get("/articles/{slug}", noop, section="blog")
    (entry,) = router.entries()
    assert entry.method == "GET"
    assert entry.pattern == "/articles/{slug}"
    assert entry.handler is noop
    assert entry.name == "noop"
    assert entry.table == "routes"
    assert entry.matcher.param_names == ("slug",)
    assert entry.metadata == {"section": "blog"}


def test_entry_is_frozen():
    router = Router()
    router.get("/", noop)
    (entry,) = router.entries()
    with pytest.raises(AttributeError):
        entry.pattern = "/other"


def test_explicit_entry_name():
    router = Router()
    router.get("/", noop, name="home")
    assert router.entries()[0].name == "home"


def test_middleware_tables_are_separate():
    router = Router()
    router.add_before_middleware(["GET"], "*", noop)
    router.add_after_middleware(["GET", "POST"], "*", noop)
    router.get("/", noop)
    assert len(router.entries("before")) == 1
    assert len(router.entries("routes")) == 1
    assert [entry.table for entry in router.entries("after")] == ["after", "after"]
    with pytest.raises(ValueError):
        router.entries("sideways")


def test_registration_calls_chain():
    router = Router()
    assert router.get("/a", noop).post("/b", noop) is router
    assert router.add_before_router_hook(lambda: None) is router
    assert router.set_not_found_handler(None) is router


def test_decorator_registration_returns_function():
    router = Router()

    @router.get("/articles/{slug}")
    def show_article(params):
        return params["slug"]

    @router.add_before_middleware("GET,POST", "/articles/*")
    def authenticate(params):
        return None

    @router.add_after_router_hook()
    def flush():
        return None

    assert show_article({"slug": "x"}) == "x"
    assert router.entries()[0].handler is show_article
    assert [e.method for e in router.entries("before")] == ["GET", "POST"]
    assert router.dispatch("GET", "/articles/a") == 200


def test_decorator_validates_methods_before_decorating():
    router = Router()
    with pytest.raises(InvalidMethod):
        router.add_route(["BREW"], "/pot")


def test_non_callable_handler_is_rejected():
    router = Router()
    with pytest.raises(TypeError):
        router.get("/", "not callable")
    with pytest.raises(TypeError):
        router.add_before_router_hook(42)
    with pytest.raises(TypeError):
        router.set_not_found_handler("nope")


def test_non_string_pattern_is_rejected():
    router = Router()
    with pytest.raises(TypeError):
        router.get(404, noop)


class Articles:
    def __init__(self):
        self.events = []

    @route("GET", "/articles")
    def index(self, params):
        self.events.append("index")

    @route(["GET", "HEAD"], "/articles/{slug}")
    def show(self, params):
        self.events.append(f"show:{params['slug']}")

    @route("GET", "/articles/*", table="after", name="audit")
    def audit_trail(self, params):
        self.events.append("audit")

    def helper(self):
        return "not routed"


class FeaturedArticles(Articles):
    @route("GET", "/featured/{slug}")
    def show(self, params):
        self.events.append(f"featured:{params['slug']}")


def test_include_registers_marked_methods_in_definition_order():
    articles = Articles()
    router = Router().include(articles)
    assert [(e.method, e.pattern) for e in router.entries()] == [
        ("GET", "/articles"),
        ("GET", "/articles/{slug}"),
        ("HEAD", "/articles/{slug}"),
    ]
    assert [e.name for e in router.entries("after")] == ["audit"]
    router.dispatch("GET", "/articles/intro")
    assert articles.events == ["show:intro", "audit"]


def test_include_uses_most_derived_override():
    featured = FeaturedArticles()
    router = Router(not_found=None).include(featured)
    patterns = [e.pattern for e in router.entries()]
    assert patterns == ["/articles", "/featured/{slug}"]
    assert router.dispatch("GET", "/articles/intro") == 404
    assert router.dispatch("GET", "/featured/intro") == 200
    assert featured.events == ["audit", "featured:intro"]


def test_route_marker_validates_eagerly():
    with pytest.raises(InvalidMethod):
        route("TELEPORT", "/")
    with pytest.raises(ValueError):
        route("GET", "/", table="sideways")
