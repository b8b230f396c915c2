import textwrap

import pytest

from pathway.config import (
    RouterSettings,
    build_table,
    build_table_from_config,
    collect_routes,
    import_from_string,
    load_config,
    load_raw_config,
    validate_config,
)
from pathway.exceptions import CompileError, DuplicateRouteError, PathwayConfigError
from pathway.routing import Group, KeyNotFound, Matched, resolve, reverse

ROUTES_YAML = textwrap.dedent(
    r"""
    strict: false
    routes:
      - name: foo
        doc: Reference route
        pattern:
          - "/"
          - {group: 1, expr: "url"}
          - "/"
          - {group: bar, expr: "\\w+", default: bar}
          - "/"
          - {group: baz, expr: "\\d+", default: "0"}
          - "/"
        capture: [1, bar, baz]
      - name: root
        pattern: "/"
    """
)


def write(tmp_path, text, name="pathway.routes.yaml"):
    path = tmp_path / name
    path.write_text(text)
    return path


@pytest.fixture
def entry_module(tmp_path, monkeypatch):
    (tmp_path / "app_routes.py").write_text(
        textwrap.dedent(
            """
            from pathway.routing import RouteDefinition, route

            ROUTES = [route("static", ["/static/"])]

            def routes():
                return [RouteDefinition("user", ["/users/", ("name", r"\\w+")], capture_groups=["name"])]

            NOT_ROUTES = ["/static/"]
            """
        )
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    return "app_routes"


def test_load_raw_config_missing_file(tmp_path):
    assert load_raw_config(tmp_path / "nope.yaml") == {}


def test_load_raw_config_empty_file(tmp_path):
    assert load_raw_config(write(tmp_path, "")) == {}


def test_load_raw_config_rejects_non_mapping(tmp_path):
    with pytest.raises(PathwayConfigError):
        load_raw_config(write(tmp_path, "- a\n- b\n"))


def test_load_raw_config_rejects_bad_yaml(tmp_path):
    with pytest.raises(PathwayConfigError):
        load_raw_config(write(tmp_path, "routes: [unclosed\n"))


def test_load_config_builds_definitions(tmp_path):
    settings = load_config(write(tmp_path, ROUTES_YAML))
    assert settings.strict is False
    foo = settings.routes[0]
    assert foo.name == "foo"
    assert foo.doc == "Reference route"
    assert foo.pattern[1] == Group("1", "url")
    assert foo.pattern[3] == Group("bar", r"\w+", "bar")
    assert foo.capture_groups == ("1", "bar", "baz")


def test_table_from_yaml_routes(tmp_path):
    table = build_table_from_config(write(tmp_path, ROUTES_YAML))
    match = resolve(table, "/url/test/100/")
    assert match == Matched("foo", (("1", "url"), ("bar", "test"), ("baz", "100")))
    assert reverse(table, "foo", match.bindings) == "/url/test/100/"
    assert resolve(table, "/") == Matched("root", ())


def test_env_substitution(tmp_path, monkeypatch):
    monkeypatch.setenv("API_PREFIX", "/api/v2")
    path = write(tmp_path, 'routes:\n  - name: api\n    pattern: "${API_PREFIX}/"\n')
    table = build_table_from_config(path)
    assert table.get("api").expression == "^/api/v2/$"


def test_missing_env_var(tmp_path, monkeypatch):
    monkeypatch.delenv("PATHWAY_MISSING_PREFIX", raising=False)
    path = write(tmp_path, 'routes:\n  - name: api\n    pattern: "${PATHWAY_MISSING_PREFIX}/"\n')
    with pytest.raises(PathwayConfigError, match="PATHWAY_MISSING_PREFIX"):
        load_config(path)


def test_validation_reports_every_problem():
    with pytest.raises(PathwayConfigError) as exc_info:
        validate_config(
            {
                "strict": "yes",
                "verbose": True,
                "routes": [
                    {"name": "a", "pattern": ["/", 5], "colour": "red"},
                    {"pattern": "/b"},
                    "not a route",
                ],
                "entries": ["no_colon"],
            }
        )
    problems = exc_info.value.problems
    assert "unknown option 'verbose'" in problems
    assert "strict: must be true or false" in problems
    assert "routes[0]: unknown option 'colour'" in problems
    assert any(p.startswith("routes[0].pattern:") for p in problems)
    assert "routes[1]: missing required 'name'" in problems
    assert "routes[2]: must be a mapping" in problems
    assert any(p.startswith("entries[0]:") for p in problems)
    assert "unknown option 'verbose'" in str(exc_info.value)


def test_empty_config_gives_defaults():
    assert validate_config({}) == RouterSettings()


def test_compile_errors_surface_when_building(tmp_path):
    path = write(tmp_path, 'routes:\n  - name: bad\n    pattern: "/(unclosed"\n')
    with pytest.raises(CompileError):
        build_table_from_config(path)


def test_strict_option(tmp_path):
    path = write(
        tmp_path,
        'strict: true\nroutes:\n  - {name: a, pattern: "/a"}\n  - {name: a, pattern: "/b"}\n',
    )
    with pytest.raises(DuplicateRouteError):
        build_table_from_config(path)


def test_import_from_string(entry_module):
    assert callable(import_from_string(f"{entry_module}:routes"))


def test_import_from_string_errors():
    with pytest.raises(PathwayConfigError):
        import_from_string("no_colon_here")
    with pytest.raises(PathwayConfigError):
        import_from_string("pathway_no_such_module:ROUTES")
    with pytest.raises(PathwayConfigError):
        import_from_string("pathway.routing:no_such_attribute")


def test_collect_routes_from_entries(entry_module):
    definitions = collect_routes([f"{entry_module}:ROUTES", f"{entry_module}:routes"])
    assert [d.name for d in definitions] == ["static", "user"]


def test_entry_must_provide_routes(entry_module):
    with pytest.raises(PathwayConfigError) as exc_info:
        collect_routes([f"{entry_module}:NOT_ROUTES"])
    assert exc_info.value.problems == ["'/static/'"]


def test_entries_are_added_after_declared_routes(entry_module):
    settings = validate_config(
        {
            "routes": [{"name": "user", "pattern": "/declared"}],
            "entries": [f"{entry_module}:routes", f"{entry_module}:ROUTES"],
        }
    )
    table = build_table(settings)
    assert table.names() == ("static", "user")
    assert resolve(table, "/users/alice") == Matched("user", (("name", "alice"),))


def test_null_default_in_yaml_is_no_default(tmp_path):
    path = write(
        tmp_path,
        'routes:\n  - name: page\n    pattern: ["/page/", {group: n, expr: "\\\\d+", default: null}]\n',
    )
    table = build_table_from_config(path)
    assert reverse(table, "page", {}) == KeyNotFound("page", "n")
    assert reverse(table, "page", {"n": 3}) == "/page/3"


@pytest.mark.parametrize("name", [True, False])
def test_boolean_route_names_are_rejected(name):
    with pytest.raises(PathwayConfigError) as exc_info:
        validate_config({"routes": [{"name": name, "pattern": "/"}]})
    assert exc_info.value.problems == ["routes[0].name: must be a string or an integer"]


def test_integer_route_names_are_accepted():
    settings = validate_config({"routes": [{"name": 7, "pattern": "/"}]})
    assert settings.routes[0].name == 7


def test_load_raw_config_unreadable_path(tmp_path):
    with pytest.raises(PathwayConfigError, match="Cannot read route file"):
        load_raw_config(tmp_path)
