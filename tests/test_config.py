"""
Tests for miniconfig.config module.

Tests the Config store including:
- Construction with targets and handlers
- Directory + explicit file merging
- Handler registration and removal
- Map-style access and the MISSING sentinel
- Refresh rebuilding from empty and atomic failure handling
- JSON serialization
"""

from __future__ import annotations

import json
import threading

import pytest

from miniconfig import MISSING, Coalesced, Config
from miniconfig.exceptions import ConfigError, ParseError
from miniconfig.handlers import parse_json


class TestConfigLoading:
    """Tests for construction and the initial refresh."""

    def test_load_directory(self, tmp_test_dir, create_json_file, sample_db_config):
        """Test that a directory target is scanned at construction."""
        create_json_file("conf/db.json", sample_db_config)

        config = Config(targets=tmp_test_dir / "conf")

        assert config["db"]["user"] == "app"
        assert config.last_refresh.parsed == (tmp_test_dir / "conf" / "db.json",)

    def test_single_string_target(self, create_json_file):
        """Test that a plain string path is accepted."""
        path = create_json_file("app.json", {"app": {"name": "demo"}})

        config = Config(targets=str(path))

        assert config["app"] == {"name": "demo"}

    def test_missing_target_is_ignored(self, tmp_test_dir):
        """Test that a nonexistent target produces an empty config."""
        config = Config(targets=[tmp_test_dir / "not-there"])

        assert len(config) == 0
        assert config.targets == []

    def test_auto_refresh_disabled(self, create_json_file):
        """Test that auto_refresh=False leaves the store empty."""
        path = create_json_file("app.json", {"a": 1})

        config = Config(targets=path, auto_refresh=False)

        assert len(config) == 0
        assert config.last_refresh is None
        config.refresh()
        assert config["a"] == 1

    def test_all_builtin_formats(self, tmp_test_dir, write_file):
        """Test that xml, yaml, yml, ini and json are read out of the box."""
        write_file("conf/a.xml", "<c><xml><enabled>1</enabled></xml></c>")
        write_file("conf/b.yaml", "yaml:\n  enabled: true\n")
        write_file("conf/c.yml", "yml:\n  enabled: true\n")
        write_file("conf/d.ini", "[ini]\nenabled = 1\n")
        write_file("conf/e.json", '{"json": {"enabled": true}}')

        config = Config(targets=tmp_test_dir / "conf")

        assert sorted(config) == ["ini", "json", "xml", "yaml", "yml"]


class TestMergingSources:
    """Tests for merging across files, directories and merge() calls."""

    def test_directory_and_explicit_file_combine(self, tmp_test_dir, write_file):
        """Test that db.user collects one value per source, in discovery order."""
        write_file("conf/a.json", '{"db": {"user": "from-json"}}')
        write_file("conf/b.ini", "[db]\nuser = from-ini\n")
        override = write_file("override.json", '{"db": {"user": "from-override"}}')

        config = Config(targets=[tmp_test_dir / "conf", override])

        # ini is registered before json, explicit files come last
        assert config["db"]["user"] == ["from-ini", "from-json", "from-override"]

    def test_colliding_files_do_not_overwrite(self, tmp_test_dir, create_json_file):
        """Test that a key defined in two directories becomes a sequence."""
        create_json_file("one/app.json", {"app": {"debug": False, "name": "a"}})
        create_json_file("two/app.json", {"app": {"debug": True}})

        config = Config(targets=[tmp_test_dir / "one", tmp_test_dir / "two"])

        assert config["app"] == {"debug": [False, True], "name": "a"}

    def test_merge_appends_to_file_values(self, create_json_file):
        """Test that merge() coalesces with values loaded from files."""
        path = create_json_file("app.json", {"db": {"user": "a"}})
        config = Config(targets=path)

        config.merge({"db": {"user": "b"}})
        config.merge({"db": {"user": "c", "port": 1}})

        assert config["db"] == {"user": ["a", "b", "c"], "port": 1}
        assert isinstance(config["db"]["user"], Coalesced)

    def test_merge_overwrite(self, create_json_file):
        """Test that merge(overwrite=True) lets the incoming value win."""
        path = create_json_file("app.json", {"db": {"user": "a", "host": "h"}})
        config = Config(targets=path)

        config.merge({"db": {"user": "b"}}, overwrite=True)

        assert config["db"] == {"user": "b", "host": "h"}

    def test_merge_rejects_non_mapping(self):
        """Test that merging a list raises ConfigError."""
        config = Config()

        with pytest.raises(ConfigError, match="mapping"):
            config.merge(["a", "b"])


class TestHandlers:
    """Tests for handler registration through Config."""

    def test_user_handler_overrides_builtin(self, create_json_file):
        """Test that a handler passed at construction replaces the built-in."""
        path = create_json_file("app.json", {"ignored": True})

        config = Config(targets=path, handlers={"json": lambda p: {"custom": p.name}})

        assert dict(config) == {"custom": "app.json"}

    def test_handler_for_several_extensions(self, tmp_test_dir, write_file):
        """Test a tuple key binding one handler to many extensions."""
        write_file("conf/a.env", "")
        write_file("conf/b.dotenv", "")

        config = Config(
            targets=tmp_test_dir / "conf",
            handlers={("env", "dotenv"): lambda p: {"env": p.suffix}},
        )

        assert sorted(config["env"]) == [".dotenv", ".env"]

    def test_register_handler_after_construction(self, write_file):
        """Test that a new handler applies from the next refresh."""
        path = write_file("app.conf", "x")
        config = Config(targets=path)
        assert len(config) == 0

        config.register_handler("conf", lambda p: {"conf": p.read_text()})
        config.refresh()

        assert config["conf"] == "x"

    def test_remove_handler_ignores_extension(self, tmp_test_dir, write_file):
        """Test that removing ini stops .ini files from being read."""
        write_file("conf/a.ini", "[ini]\nk = v\n")
        write_file("conf/b.json", '{"json": {"k": "v"}}')
        config = Config(targets=tmp_test_dir / "conf")
        assert "ini" in config

        config.remove_handler("ini")
        config.refresh()

        assert "ini" not in config
        assert "json" in config

    def test_extensions_are_case_sensitive(self, tmp_test_dir, write_file):
        """Test that upper-case file extensions need their own handler."""
        write_file("conf/APP.JSON", '{"upper": 1}')
        write_file("conf/app.json", '{"lower": 1}')
        upper = write_file("extra/OTHER.JSON", '{"explicit": 1}')
        config = Config(targets=[tmp_test_dir / "conf", upper])

        assert dict(config) == {"lower": 1}

        config.register_handler("JSON", parse_json)
        config.refresh()

        assert dict(config) == {"lower": 1, "upper": 1, "explicit": 1}

    def test_remove_unknown_handler_is_noop(self):
        """Test that removing an unbound extension does not raise."""
        config = Config()

        config.remove_handler("toml")

        assert "json" in config.handlers

    def test_handlers_property_is_a_copy(self):
        """Test that changing the returned registry has no effect."""
        config = Config()

        config.handlers.remove("json")

        assert "json" in config.handlers


class TestAccess:
    """Tests for map-style access."""

    def test_get_missing_returns_sentinel(self):
        """Test that get() never raises for a missing key."""
        config = Config()

        assert config.get("nope") is MISSING
        assert config.get("nope", "fallback") == "fallback"
        assert not MISSING

    def test_stored_none_is_distinguishable(self):
        """Test that a key stored as None is not MISSING."""
        config = Config()

        config.set("x", None)

        assert config.get("x") is None
        assert config.has("x")

    def test_set_bypasses_merge(self, create_json_file):
        """Test that set() replaces instead of coalescing."""
        path = create_json_file("app.json", {"x": 1})
        config = Config(targets=path)

        config.set("x", 5)

        assert config.get("x") == 5

    def test_item_assignment_and_deletion(self):
        """Test dict-style set, get, contains and delete."""
        config = Config()

        config["db"] = {"user": "app"}
        assert "db" in config
        assert config["db"]["user"] == "app"

        del config["db"]
        assert "db" not in config

    def test_delete_missing_is_noop(self):
        """Test that deleting an absent key does not raise."""
        config = Config()

        config.delete("nope")
        del config["nope"]

        assert len(config) == 0

    def test_getitem_missing_raises_key_error(self):
        """Test that indexing a missing key behaves like a dict."""
        with pytest.raises(KeyError):
            Config()["nope"]

    def test_lookup_and_get_path(self, create_json_file):
        """Test nested traversal by key sequence and dotted path."""
        path = create_json_file(
            "app.json",
            {"db": {"user": "a", "replicas": ["r1", "r2"]}, "ports": {"80": "http"}},
        )
        config = Config(targets=path)
        config.merge({"db": {"user": "b"}})

        assert config.lookup("db", "user") == ["a", "b"]
        assert config.lookup("db", "user", 1) == "b"
        assert config.get_path("db.replicas.0") == "r1"
        assert config.get_path("ports.80") == "http"
        assert config.lookup("db", "missing") is MISSING
        assert config.lookup("db", "user", 5) is MISSING
        assert config.get_path("db/user/0", sep="/") == "a"
        assert config.get_path("nope.deeper", default=0) == 0

    def test_get_path_digit_key_then_index(self, create_json_file):
        """Test a digit-only mapping key followed by a sequence index."""
        path = create_json_file("app.json", {"ports": {"80": ["http", "alt"]}})
        config = Config(targets=path)

        assert config.get_path("ports.80.1") == "alt"
        assert config.get_path("ports.80.2") is MISSING

    def test_get_path_integer_mapping_keys(self, write_file):
        """Test that YAML integer keys are reachable by their digits."""
        path = write_file("ports.yaml", "ports:\n  80: http\n  443: https\n")
        config = Config(targets=path)

        assert config.get_path("ports.443") == "https"

    def test_get_path_non_ascii_digits_are_plain_keys(self):
        """Test that segments like superscript two never become indexes."""
        config = Config()
        config.set("a", ["x", "y", "z"])

        assert config.get_path("a.²") is MISSING
        assert config.get_path("a.٢", default=None) is None
        assert config.get_path("a.-1") is MISSING


class TestRefresh:
    """Tests for refresh() semantics."""

    def test_refresh_drops_programmatic_values(self, create_json_file):
        """Test that values from merge() and set() vanish on refresh."""
        path = create_json_file("app.json", {"a": 1})
        config = Config(targets=path)
        config.merge({"merged": True})
        config.set("direct", True)

        config.refresh()

        assert dict(config) == {"a": 1}

    def test_refresh_picks_up_new_files(self, tmp_test_dir, create_json_file):
        """Test that directories are rescanned on each refresh."""
        create_json_file("conf/a.json", {"a": 1})
        config = Config(targets=tmp_test_dir / "conf")

        create_json_file("conf/b.json", {"b": 2})
        config.refresh()

        assert dict(config) == {"a": 1, "b": 2}

    def test_refresh_is_not_cumulative(self, create_json_file):
        """Test that refreshing twice does not duplicate values."""
        path = create_json_file("app.json", {"a": 1})
        config = Config(targets=path)

        config.refresh()
        config.refresh()

        assert config["a"] == 1

    def test_strict_failure_keeps_previous_store(self, tmp_test_dir, write_file):
        """Test that a failed strict refresh leaves the old store in place."""
        write_file("conf/a.json", '{"a": 1}')
        config = Config(targets=tmp_test_dir / "conf")
        write_file("conf/b.json", "{broken")

        with pytest.raises(ParseError):
            config.refresh()

        assert dict(config) == {"a": 1}

    def test_strict_failure_at_construction_raises(self, write_file):
        """Test that a malformed file fails the constructor in strict mode."""
        path = write_file("bad.ini", "no section here\n")

        with pytest.raises(ParseError, match="bad.ini"):
            Config(targets=path)

    def test_non_strict_skips_bad_files(self, tmp_test_dir, write_file):
        """Test that strict=False skips failures and reports them."""
        write_file("conf/a.json", '{"a": 1}')
        write_file("conf/b.xml", "<unclosed>")

        config = Config(targets=tmp_test_dir / "conf", strict=False)

        assert dict(config) == {"a": 1}
        assert not config.last_refresh.ok
        assert config.last_refresh.failures[0].extension == "xml"

    def test_refresh_logs_through_injected_logger(
        self, create_json_file, recording_logger
    ):
        """Test that the instance logger receives refresh messages."""
        path = create_json_file("app.json", {"a": 1})

        Config(targets=path, logger=recording_logger)

        assert any(p == "REFRESH" for _, p, _ in recording_logger.messages)

    def test_directory_replaced_by_file(self, tmp_test_dir, write_file):
        """Test that a directory turned into a file refreshes to empty."""
        write_file("conf/a.json", '{"a": 1}')
        config = Config(targets=tmp_test_dir / "conf")
        (tmp_test_dir / "conf" / "a.json").unlink()
        (tmp_test_dir / "conf").rmdir()
        write_file("conf", "now a file")

        result = config.refresh()

        assert dict(config) == {}
        assert result.ok

    def test_concurrent_merges_are_serialized(self):
        """Test that merges from many threads are all recorded."""
        config = Config()
        config.set("counter", {"k": 0})

        def worker(n: int) -> None:
            for i in range(50):
                config.merge({"counter": {"k": n * 100 + i}})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(config["counter"]["k"]) == 1 + 4 * 50


class TestSerialization:
    """Tests for JSON serialization of the store."""

    def test_to_json_and_back(self, create_json_file):
        """Test that a coalesced store survives a JSON round trip as lists."""
        path = create_json_file("app.json", {"db": {"user": "a"}})
        config = Config(targets=path)
        config.merge({"db": {"user": "b"}})

        restored = Config.from_json(config.to_json())

        assert restored.to_dict() == {"db": {"user": ["a", "b"]}}
        assert restored.targets == []

    def test_save_and_load(self, tmp_test_dir):
        """Test writing a store to disk and reading it back."""
        config = Config()
        config.set("app", {"name": "demo"})
        out = tmp_test_dir / "nested" / "store.json"

        config.save(out)

        assert out.read_text(encoding="utf-8").endswith("\n")
        assert Config.load_json(out)["app"] == {"name": "demo"}

    def test_to_dict_is_detached(self):
        """Test that changing to_dict() output leaves the store alone."""
        config = Config()
        config.set("app", {"name": "demo"})

        snapshot = config.to_dict()
        snapshot["app"]["name"] = "changed"

        assert config["app"]["name"] == "demo"

    def test_from_json_rejects_non_object(self):
        """Test that a JSON array is not accepted as a store."""
        with pytest.raises(ConfigError, match="JSON object"):
            Config.from_json(json.dumps([1, 2]))

    def test_from_json_rejects_invalid_json(self):
        """Test that malformed text raises ConfigError."""
        with pytest.raises(ConfigError, match="Invalid serialized config"):
            Config.from_json("{nope")

    def test_to_json_unserializable_raises(self):
        """Test that values JSON can't represent raise ConfigError."""
        config = Config()
        config.set("obj", object())

        with pytest.raises(ConfigError, match="cannot be serialized"):
            config.to_json()
