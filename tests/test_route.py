"""Tests for inkpost.routing.route — patterns and handler variants."""

import pytest

from inkpost.errors import HandlerResolutionError
from inkpost.routing.controllers import ControllerRegistry
from inkpost.routing.route import (
    ControllerHandler,
    FunctionHandler,
    InvalidHandler,
    Route,
    as_handler,
    compile_pattern,
    normalize_path,
)


def _handler() -> str:
    return "ok"


class PostController:
    def show(self, slug: str) -> str:
        return f"post {slug}"

    title = "not callable"


class TestNormalizePath:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("", "/"),
            ("/", "/"),
            ("//", "/"),
            ("posts", "/posts"),
            ("/posts/", "/posts"),
            ("posts/{slug}/", "/posts/{slug}"),
            ("///user///", "/user"),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize_path(raw) == expected

    @pytest.mark.parametrize("raw", ["", "/a/b/", "a", "//x//"])
    def test_idempotent(self, raw: str) -> None:
        once = normalize_path(raw)
        assert normalize_path(once) == once


class TestCompilePattern:
    def test_static(self) -> None:
        regex = compile_pattern("/about")
        assert regex.match("/about")
        assert not regex.match("/about/team")

    def test_placeholder_matches_one_segment(self) -> None:
        regex = compile_pattern("/user/{id}")
        m = regex.match("/user/42")
        assert m is not None
        assert m.groups() == ("42",)
        assert regex.match("/user/42/extra") is None
        assert regex.match("/user/") is None

    def test_literal_text_is_escaped(self) -> None:
        regex = compile_pattern("/feed.xml")
        assert regex.match("/feed.xml")
        assert regex.match("/feedxxml") is None

    def test_placeholder_inside_segment(self) -> None:
        regex = compile_pattern("/archive/{year}-{month}")
        m = regex.match("/archive/2024-05")
        assert m is not None
        assert m.groups() == ("2024", "05")


class TestRouteCreate:
    def test_normalizes_and_uppercases(self) -> None:
        route = Route.create("get", "posts/{slug}/", _handler)
        assert route.method == "GET"
        assert route.pattern == "/posts/{slug}"
        assert route.param_names == ("slug",)

    def test_regex_compiled_from_normalized_pattern(self) -> None:
        route = Route.create("GET", "user/{id}/", _handler)
        assert route.regex.pattern == compile_pattern("/user/{id}").pattern
        assert route.regex.match("/user/7")

    def test_param_names_in_declaration_order(self) -> None:
        route = Route.create("GET", "/{year}/{month}/{slug}", _handler)
        assert route.param_names == ("year", "month", "slug")

    def test_middleware_stored_as_tuple(self) -> None:
        async def mw(request, next):
            return await next(request)

        route = Route.create("GET", "/", _handler, [mw])
        assert route.middleware == (mw,)


class TestAsHandler:
    def test_function(self) -> None:
        assert as_handler(_handler) == FunctionHandler(_handler)

    def test_lambda(self) -> None:
        func = lambda: "hi"  # noqa: E731
        assert isinstance(as_handler(func), FunctionHandler)

    def test_class_and_action(self) -> None:
        assert as_handler((PostController, "show")) == ControllerHandler(PostController, "show")

    def test_key_and_action_list(self) -> None:
        assert as_handler(["PostController", "show"]) == ControllerHandler(
            "PostController", "show"
        )

    @pytest.mark.parametrize(
        "value",
        [None, 42, "PostController", ("PostController",), ("A", "b", "c"), (1, "show")],
    )
    def test_invalid(self, value: object) -> None:
        assert isinstance(as_handler(value), InvalidHandler)

    def test_bare_class_is_invalid(self) -> None:
        assert isinstance(as_handler(PostController), InvalidHandler)


class TestResolve:
    def test_function_resolves_to_itself(self) -> None:
        assert FunctionHandler(_handler).resolve(ControllerRegistry()) is _handler

    def test_controller_class(self) -> None:
        method = ControllerHandler(PostController, "show").resolve(ControllerRegistry())
        assert method("hello") == "post hello"

    def test_controller_key(self) -> None:
        registry = ControllerRegistry()
        registry.register("Posts", PostController)
        method = ControllerHandler("Posts", "show").resolve(registry)
        assert method("x") == "post x"

    def test_unknown_controller_key(self) -> None:
        with pytest.raises(HandlerResolutionError) as exc_info:
            ControllerHandler("Missing", "show").resolve(ControllerRegistry())
        assert exc_info.value.detail == "Controller class Missing not found."
        assert exc_info.value.status == 500

    def test_missing_action(self) -> None:
        with pytest.raises(HandlerResolutionError) as exc_info:
            ControllerHandler(PostController, "edit").resolve(ControllerRegistry())
        assert exc_info.value.detail == "Method edit not found in controller PostController."

    def test_non_callable_action(self) -> None:
        with pytest.raises(HandlerResolutionError, match="Method title not found"):
            ControllerHandler(PostController, "title").resolve(ControllerRegistry())

    def test_invalid_handler(self) -> None:
        with pytest.raises(HandlerResolutionError) as exc_info:
            InvalidHandler(42).resolve(ControllerRegistry())
        assert exc_info.value.detail == "Invalid route handler configured."

    def test_describe(self) -> None:
        assert FunctionHandler(_handler).describe() == "_handler"
        assert ControllerHandler("Posts", "show").describe() == "Posts.show"
        assert ControllerHandler(PostController, "show").describe() == "PostController.show"
