import json
import tempfile
import unittest
from pathlib import Path

from vc_changelog.config.loader import CONFIG_FILE_NAME, get_config_path, load_config, save_default_config
from vc_changelog.config.settings import ChangelogConfig, OutputFormat, SortKey
from vc_changelog.errors import ConfigError


class TestLoadConfig(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def write(self, content: str) -> None:
        (self.root / CONFIG_FILE_NAME).write_text(content, encoding="utf-8")

    def test_missing_file_uses_defaults(self) -> None:
        self.assertEqual(load_config(self.root), ChangelogConfig())

    def test_values_are_read(self) -> None:
        self.write(json.dumps({
            "categories": [{"tag": "feat", "label": "New"}, {"tag": "fix", "label": "Fixed"}],
            "excluded_categories": ["fix"],
            "sort_key": "date_desc",
            "output_format": "json",
            "dedupe": True,
        }))
        config = load_config(self.root)
        self.assertEqual([spec.tag for spec in config.categories], ["feat", "fix"])
        self.assertEqual(config.label_for("feat"), "New")
        self.assertEqual(config.excluded_categories, frozenset({"fix"}))
        self.assertIs(config.sort_key, SortKey.DATE_DESC)
        self.assertIs(config.output_format, OutputFormat.JSON)
        self.assertTrue(config.dedupe)
        self.assertFalse(config.include_merges)

    def test_invalid_json(self) -> None:
        self.write("{ invalid json }")
        with self.assertRaises(ConfigError):
            load_config(self.root)

    def test_top_level_must_be_object(self) -> None:
        self.write("[1, 2]")
        with self.assertRaises(ConfigError):
            load_config(self.root)

    def test_validation_errors_propagate(self) -> None:
        self.write(json.dumps({"sort_key": "alphabetical"}))
        with self.assertRaises(ConfigError):
            load_config(self.root)


class TestSaveDefaultConfig(unittest.TestCase):
    def test_written_file_loads_back_as_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            path = save_default_config(root)
            self.assertEqual(path, get_config_path(root))
            data = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(data["tag_skip_pattern"], "rc")
            self.assertEqual(load_config(root), ChangelogConfig())

    def test_unwritable_location(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                save_default_config(Path(tmp) / "missing" / "dir")


if __name__ == "__main__":
    unittest.main()
