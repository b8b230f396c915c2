import pytest

from pathway.routing import RouteTable, route


@pytest.fixture
def reference_routes():
    return [
        route(
            "foo",
            [
                "/",
                (1, "url"),
                "/",
                ("bar", r"\w+", "bar"),
                "/",
                ("baz", r"\d+", "0"),
                "/",
            ],
            groups=[1, "bar", "baz"],
        ),
        route("baz", ["/", (1, "static"), "/"]),
        route("root", ["/"]),
    ]


@pytest.fixture
def table(reference_routes) -> RouteTable:
    return RouteTable.build(reference_routes)
