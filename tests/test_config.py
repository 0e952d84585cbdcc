from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazyssm import config
from config_fixtures import write_config


class ConfigTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self._tmp.name) / "config.json"
        patcher = mock.patch("lazyssm.config.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()


class ServerInventoryTests(ConfigTestCase):
    def test_servers_are_flattened_in_config_order(self) -> None:
        write_config(self.config_path)

        servers = config.load_servers()

        self.assertEqual([server.alias for server in servers], ["api-1", "api-2", "stg", "pg"])
        self.assertEqual(servers[0].address, "10.0.0.5")
        self.assertEqual(servers[1].address, "api2.example.com")
        self.assertEqual(servers[1].port, 2222)
        self.assertEqual(servers[2].label, "stg (staging)")

    def test_group_and_environment_filters(self) -> None:
        write_config(self.config_path)

        self.assertEqual([s.alias for s in config.servers_for_group("web")], ["api-1", "api-2", "stg"])
        self.assertEqual([s.alias for s in config.servers_for_group("web", "staging")], ["stg"])
        self.assertEqual(config.servers_for_group("missing"), [])

    def test_bad_port_falls_back_to_default(self) -> None:
        write_config(
            self.config_path,
            {"groups": [{"name": "g", "environments": [{"name": "e", "servers": [
                {"alias": "s", "ip": "10.0.0.1", "user": "u", "port": "22x"},
            ]}]}]},
        )
        self.assertEqual(config.load_servers()[0].port, 22)


class PreferenceTests(ConfigTestCase):
    def test_missing_file_gives_defaults(self) -> None:
        self.assertEqual(config.load_config(), {})
        self.assertFalse(config.load_show_hidden())
        self.assertIsNone(config.load_download_dir())
        self.assertIsNone(config.load_theme_name())
        self.assertEqual(config.load_servers(), [])

    def test_malformed_file_is_ignored_with_warning(self) -> None:
        self.config_path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("lazyssm.config", level="WARNING"):
            self.assertEqual(config.load_config(), {})

    def test_non_object_json_is_ignored(self) -> None:
        self.config_path.write_text("[1, 2]", encoding="utf-8")
        self.assertEqual(config.load_config(), {})

    def test_save_show_hidden_keeps_other_keys(self) -> None:
        write_config(self.config_path)

        config.save_show_hidden(False)

        saved = json.loads(self.config_path.read_text(encoding="utf-8"))
        self.assertIs(saved["show_hidden"], False)
        self.assertEqual(len(saved["groups"]), 2)
        self.assertFalse(config.load_show_hidden())

    def test_non_boolean_show_hidden_is_false(self) -> None:
        write_config(self.config_path, {"show_hidden": "yes"})
        self.assertFalse(config.load_show_hidden())

    def test_download_dir_expands_user(self) -> None:
        write_config(self.config_path)
        self.assertEqual(config.load_download_dir(), Path("~/Downloads/lazyssm").expanduser())

    def test_use_config_path_redirects_loads(self) -> None:
        other = Path(self._tmp.name) / "other.json"
        write_config(other, {"theme": "ocean"})

        config.use_config_path(other)

        self.assertEqual(config.load_theme_name(), "ocean")


if __name__ == "__main__":
    unittest.main()
