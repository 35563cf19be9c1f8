"""
Tests for ConfigStore: get/set/merge/resolve and the re-resolution protocol.
"""

import json

import pytest

from stratum.config.sentinels import UNDEFINED
from stratum.config.sources import parse_args, parse_env, parse_file
from stratum.config.store import ConfigStore
from stratum.exceptions import ReservedNamespaceError, ResolutionDepthError


def definition():
    return {
        "arr": [],
        "env": "${env:APP_ENV, dev}",
        "self": {
            "test": "${self:app.name}",
        },
        "lib": {
            "env": "${self:APP_ENV, dev}",
            "$env": "${self:env}",
            "app": "${self:app}",
            "utilities": {
                "aws": {
                    "lambda": {
                        "locationResolver": "location-resolver-${self:lib.env}",
                    },
                },
            },
        },
        "app": {
            "a": "a",
            "b": "b",
            "c": "c",
            "arr": ["${self:app.a}", "${self:app.b}", "${self:app.c}"],
            "arrRef": "${self:app.arr}",
            "tricky-self-name": "tricky-${self:app.gozio-config}-${self:app.name}-${self:app.name}",
            "gozio-config": "${self:app.name}",
            "secret": "${sm:atlas.apiPublicKey}",
            "secret2": "${self:app.${sm:name}}",
            "name": "gozio-config",
            "defaultUndefined": "${self:app.nothing}",
            "defaultUndefined2": '${self:app.nothing, "undefined"}',
            "defaultBoolean": "${self:app.nothing, true}",
            "defaultString": "${self:app.nothing, 'true'}",
            "apostrophe": "${self:app.nothing, rich's world}",
            "absoluteSingleQuote": "${self:app.nothing, ''hello''}",
            "absoluteDoubleQuote": "${self:app.nothing, '\"hello\"'}",
            "selfRef": "${self:self.test}",
            "anotherEnv": "another-${self:env}",
            "dynamicDefault": "${self:app.secret, ${self:lib.utilities.aws.lambda.locationResolver}}",
            "dynamicHttpDefault": "${sm:auth0.audience, https://example.auth0.com/api/v2/}",
            "lib": "${self:lib}",
            "bool": "@{eq:${self:app.name}, gozio-config}",
        },
    }


ENVIRON = {
    "testMe": "testMe",
    "test__me__nested": "testMeNested",
    "APP_ENV": "test",
}


@pytest.fixture
def store():
    cfg = ConfigStore(definition(), {"eq": lambda a, b: a == b})
    cfg.merge(parse_env(ENVIRON, pick=["testMe", "test__me__nested"]))
    cfg.merge(parse_args(["--config=app.config.yml", "--verbose"], pick=["config"]))
    return cfg


@pytest.fixture
def secrets():
    return {"name": "name", "atlas": {"apiPublicKey": "foobar"}}


def assert_base(cfg):
    """Values that no merge, set or resolve in these tests should disturb."""
    assert cfg.get("name") is None
    assert cfg.get("verbose") is None
    assert cfg.get("config") == "app.config.yml"
    assert cfg.get("app.defaultUndefined") is None
    assert cfg.get("app.defaultUndefined2") == "undefined"
    assert cfg.get("app.defaultBoolean") is True
    assert cfg.get("app.defaultString") == "true"
    assert cfg.get("testMe") == "testMe"
    assert cfg.get("test.me.nested") == "testMeNested"
    assert cfg.get("lib:utilities:aws:lambda:locationResolver") == "location-resolver-dev"
    assert cfg.get("app.apostrophe") == "rich's world"
    assert cfg.get("app.absoluteSingleQuote") == "'hello'"
    assert cfg.get("app.absoluteDoubleQuote") == '"hello"'
    assert cfg.get("app.arr") == ["a", "b", "c"]
    assert cfg.get("app.arrRef") == ["a", "b", "c"]


class TestGet:
    """Tests for reading resolved values."""

    def test_values(self, store):
        assert store.get("arr") == []
        assert store.get("env") == "dev"
        assert store.get("app.name") == "gozio-config"
        assert store.get("app.selfRef") == "gozio-config"
        assert store.get("self.test") == "gozio-config"
        assert store.get("app.secret") is None
        assert store.get("app.secret2") is None
        assert store.get("app.anotherEnv") == "another-dev"
        assert store.get("app.gozio-config") == "gozio-config"
        assert store.get("app.tricky-self-name") == "tricky-gozio-config-gozio-config-gozio-config"
        assert store.get("app.dynamicDefault") == "location-resolver-dev"
        assert store.get("app.dynamicHttpDefault") == "https://example.auth0.com/api/v2/"
        assert store.get("app.bool") is True
        assert_base(store)

    def test_whole_tree(self, store):
        tree = store.get()
        assert tree["config"] == "app.config.yml"
        assert tree["testMe"] == "testMe"
        assert tree["test"] == {"me": {"nested": "testMeNested"}}
        assert tree["app"]["name"] == "gozio-config"
        assert tree["app"]["defaultUndefined"] is UNDEFINED
        assert tree["app"]["defaultUndefined2"] == "undefined"
        assert tree["app"]["defaultBoolean"] is True
        assert tree["app"]["defaultString"] == "true"
        assert store.get("app") is tree["app"]

    def test_default_value(self, store):
        assert store.get("app.nothing", "hello world") == "hello world"
        assert store.get("app.defaultUndefined", "fallback") == "fallback"
        assert store.get("app.defaultBoolean", "fallback") is True

    def test_colon_path(self, store):
        assert store.get("app:name") == "gozio-config"

    def test_object_reference(self, store):
        assert store.get("lib.$env") == "dev"
        assert store.get("app.lib.$env") == "dev"
        lib = store.get("app.lib")
        assert lib["env"] == "dev"
        assert lib["utilities"] == {"aws": {"lambda": {"locationResolver": "location-resolver-dev"}}}
        assert isinstance(lib["app"], dict)
        assert store.get("app.lib.app.arr") == ["a", "b", "c"]
        assert store.get("app.lib.nothing.arr") is None

    def test_private_state_not_exposed(self, store):
        for name in ("config", "data", "dictionary", "definition", "substitute", "substitution_regex"):
            assert not hasattr(store, name)


class TestMerge:
    """Tests for merging sources into the definition tree."""

    def test_merge_yaml_file(self, store, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(
            "lib:\n  name: config.yml\napp:\n  name: config.yml\n  description: YML Configuration\n"
        )
        store.merge(parse_file(path))
        assert store.get("lib.name") == "config.yml"
        assert store.get("app.name") == "config.yml"
        assert store.get("app.bool") is False
        assert store.get("app.description") == "YML Configuration"
        assert store.get("app.gozio-config") == "config.yml"
        assert store.get("app.tricky-self-name") == "tricky-config.yml-config.yml-config.yml"
        assert_base(store)

    def test_merge_json_file(self, store, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"lib": {"name": "config.json"}, "app": {"name": "config.json"}}))
        store.merge(parse_file(path))
        assert store.get("app.name") == "config.json"
        assert store.get("app.gozio-config") == "config.json"
        assert store.get("app.tricky-self-name") == "tricky-config.json-config.json-config.json"
        assert_base(store)

    def test_merge_flat_data(self, store):
        store.merge({"very.nested.object": {"a": "a", "b": ["b"]}})
        store.merge({"app.delayed": ["${self:very.nested.object}"]})
        assert store.get("app.delayed") == [{"a": "a", "b": ["b"]}]
        assert_base(store)

    def test_merge_none_is_noop(self, store):
        before = store.get()
        assert store.merge(None) is store
        assert store.get() is before

    def test_merge_keeps_unrelated_branches(self):
        cfg = ConfigStore({"app": {"a": "a", "b": "b"}})
        cfg.merge({"app": {"b": "B"}})
        assert cfg.get("app") == {"a": "a", "b": "B"}

    def test_placeholders_in_merged_data(self, store):
        store.resolve({"env": ENVIRON})
        store.merge({"newData": "${env:APP_ENV}"})
        assert store.get("newData") == "test"


class TestResolve:
    """Tests for registering namespaces."""

    def test_resolve_secrets_and_env(self, store, secrets):
        store.resolve({"sm": secrets, "env": ENVIRON})
        assert store.get("app.secret") == "foobar"
        assert store.get("app.secret2") == "gozio-config"
        assert store.get("app.dynamicDefault") == "foobar"
        assert store.get("env") == "test"
        assert store.get("app.anotherEnv") == "another-test"
        assert store.get("lib.$env") == "test"
        assert_base(store)

    def test_dictionary_merge_is_additive(self, store, secrets):
        store.resolve({"sm": secrets, "env": ENVIRON})
        store.resolve({"sm": {"atlas": {"more": "attributes"}}})
        store.merge({"more": "${sm:atlas.more}"})
        assert store.get("app.secret") == "foobar"
        assert store.get("app.secret2") == "gozio-config"
        assert store.get("env") == "test"
        assert store.get("more") == "attributes"
        assert_base(store)

    def test_reserved_self_rejected(self, store, secrets):
        store.resolve({"sm": secrets})
        before = store.get()
        with pytest.raises(ReservedNamespaceError, match="reserved key"):
            store.resolve({"self": "blah", "sm": {"atlas": {"apiPublicKey": "other"}}})
        assert store.get() is before
        assert store.get("app.secret") == "foobar"
        store.resolve()
        assert store.get("app.secret") == "foobar"

    def test_reserved_self_rejected_in_constructor(self):
        with pytest.raises(ReservedNamespaceError):
            ConfigStore({"a": 1}, {"self": {}})

    def test_namespace_sources_are_copied(self, store, secrets):
        store.resolve({"sm": secrets})
        secrets["atlas"]["apiPublicKey"] = "hacked"
        store.set("something", "else")
        assert store.get("app.secret") == "foobar"

    def test_idempotent(self, store, secrets):
        store.resolve({"sm": secrets})
        first = store.get()
        store.resolve()
        assert store.get() == first
        assert store.get() is not first

    def test_self_sees_latest_definition(self):
        cfg = ConfigStore({"greeting": "hello ${self:name, nobody}"})
        assert cfg.get("greeting") == "hello nobody"
        cfg.merge({"name": "world"})
        assert cfg.get("greeting") == "hello world"


class TestSet:
    """Tests for setting single values."""

    def test_set_value(self, store):
        store.set("lib.name", "newName")
        assert store.get("lib.name") == "newName"
        assert store.get("app.lib.name") == "newName"
        assert_base(store)

    def test_set_colon_path(self):
        cfg = ConfigStore()
        cfg.set("a:b", 1)
        assert cfg.get() == {"a": {"b": 1}}

    def test_set_placeholder(self, store):
        store.set("app.greeting", "hi ${self:app.name}")
        assert store.get("app.greeting") == "hi gozio-config"

    def test_set_returns_store(self):
        cfg = ConfigStore()
        assert cfg.set("a", 1) is cfg

    def test_set_object_is_copied(self, store):
        obj = {"a": "a"}
        store.set("app.object", obj)
        assert store.get("app.object") == {"a": "a"}
        obj["b"] = "b"
        assert store.get("app.object") == {"a": "a"}
        store.set("something", "else")
        assert store.get("app.object") == {"a": "a"}


class TestLiveReferences:
    """Values returned by get are live until the next resolution pass."""

    def test_mutating_array(self, store):
        arr = store.get("app.arr")
        assert arr == ["a", "b", "c"]
        arr.append("d")
        assert store.get("app.arr") == ["a", "b", "c", "d"]
        assert store.get("app.arr") is arr

    def test_mutating_object(self, store):
        store.set("app.object", {"a": "a"})
        obj = store.get("app.object")
        obj["b"] = "b"
        assert store.get("app.object") == {"a": "a", "b": "b"}

    def test_resolution_rebuilds_tree(self, store):
        arr = store.get("app.arr")
        arr.append("d")
        store.set("something", "else")
        assert store.get("app.arr") == ["a", "b", "c"]


class TestScenarios:
    """End-to-end resolution scenarios."""

    def test_self_concatenation(self):
        cfg = ConfigStore({"app": {"a": "a", "b": "b", "name": "x", "ref": "${self:app.a}-${self:app.b}"}})
        assert cfg.get("app.ref") == "a-b"

    def test_env_fallback(self):
        cfg = ConfigStore({"val": "${env:MISSING, fallback}"}, {"env": {}})
        assert cfg.get("val") == "fallback"

    def test_boolean_default(self):
        cfg = ConfigStore({"flag": "${self:app.missing, true}"})
        assert cfg.get("flag") is True

    def test_cycle_left_partially_resolved(self):
        cfg = ConfigStore({"loop": "${self:loop}", "ok": "fine"})
        assert cfg.get("loop") == "${self:loop}"
        assert cfg.get("ok") == "fine"

    def test_cycle_strict(self):
        with pytest.raises(ResolutionDepthError):
            ConfigStore({"loop": "${self:loop}"}, strict=True)

    def test_mutually_referencing_mappings(self):
        keys = 8
        cfg = ConfigStore(
            {
                "a": {f"x{i}": "${self:b}" for i in range(keys)},
                "b": {f"y{i}": "${self:a}" for i in range(keys)},
            }
        )
        raw_b = {f"y{i}": "${self:a}" for i in range(keys)}
        assert cfg.get("a.x0.y0.x0") == raw_b
        assert cfg.get("a.x7.y7.x7") == raw_b
        assert cfg.get("b.y2.x4.y6.x1") == "${self:b}"

    def test_mutually_referencing_mappings_strict(self):
        with pytest.raises(ResolutionDepthError):
            ConfigStore({"a": {"b": "${self:b}"}, "b": {"a": "${self:a}"}}, strict=True)

    def test_non_string_keys_referenced_by_text(self):
        cfg = ConfigStore({"web": "${self:ports.8080}", "all": "${self:ports}"})
        cfg.set("ports", {8080: "web", 443: "${self:ports.8080}-tls"})
        assert cfg.get("web") == "web"
        assert cfg.get("ports.443") == "web-tls"
        assert cfg.get("all") == {8080: "web", 443: "web-tls"}

    def test_non_string_keys_from_namespace(self):
        cfg = ConfigStore({"name": "${svc:ports.8080, none}"}, {"svc": {"ports": {8080: "web"}}})
        assert cfg.get("name") == "web"

    def test_function_namespace_registered_later(self):
        cfg = ConfigStore({"upper": "@{upper:app.name}", "app": {"name": "svc"}})
        assert cfg.get("upper") is None
        cfg.resolve({"upper": str.upper})
        assert cfg.get("upper") == "SVC"


class TestPrint:
    """Tests for the diagnostic dump."""

    def test_render_nested(self, store):
        text = store.render()
        assert "config" in text
        assert "data" in text
        assert "gozio-config" in text

    def test_render_flat_sorted(self, store):
        text = store.render(flat=True, sort=True)
        assert "data.app.name" in text
        assert "config.app.name" in text

    def test_render_debug_only_unresolved(self, store):
        text = store.render(flat=True, debug=True)
        assert "data.app.defaultUndefined" in text
        assert "data.app.name" not in text

    def test_print_returns_text(self, store):
        from rich.console import Console

        console = Console(record=True, width=200)
        text = store.print(sort=True, console=console)
        assert text
        assert "gozio-config" in console.export_text()

    def test_empty_store(self):
        assert ConfigStore().render()


class TestUtilities:
    """Static flatten/unflatten helpers."""

    def test_flatten(self):
        assert ConfigStore.flatten({"a": {"b": 1}}) == {"a.b": 1}

    def test_unflatten(self):
        assert ConfigStore.unflatten({"a.b": 1}) == {"a": {"b": 1}}
