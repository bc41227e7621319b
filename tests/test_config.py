import os

from sqlshift import config
from sqlshift.config import _expand_env, load_config


class TestExpandEnv:

    def test_set_variable_wins(self, monkeypatch):
        monkeypatch.setenv("SQLSHIFT_TEST_HOST", "db.example.org")
        assert _expand_env("${SQLSHIFT_TEST_HOST:-localhost}") == "db.example.org"

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("SQLSHIFT_TEST_HOST", raising=False)
        assert _expand_env("${SQLSHIFT_TEST_HOST:-localhost}") == "localhost"

    def test_unset_without_default_is_none(self, monkeypatch):
        monkeypatch.delenv("SQLSHIFT_TEST_PASSWORD", raising=False)
        assert _expand_env("${SQLSHIFT_TEST_PASSWORD}") is None

    def test_nested_structures_and_embedded_placeholders(self, monkeypatch):
        monkeypatch.setenv("SQLSHIFT_TEST_NAME", "shop")
        data = {"a": ["x-${SQLSHIFT_TEST_NAME}-y", 3], "b": {"c": True}}
        assert _expand_env(data) == {"a": ["x-shop-y", 3], "b": {"c": True}}


class TestLoadConfig:

    def test_packaged_settings(self):
        assert config["conversion"]["streaming_threshold_mb"] == 50
        assert config["conversion"]["preview_lines"] == 20
        assert os.path.isabs(config["base_dirs"]["logs"])

    def test_alternative_settings_file(self, monkeypatch, tmp_path):
        settings = tmp_path / "alt.yaml"
        settings.write_text("base_dirs:\n  logs: rel_logs\nconversion:\n  progress_interval: 5\n", encoding="utf-8")
        monkeypatch.setenv("SQLSHIFT_SETTINGS", str(settings))

        loaded = load_config()
        assert loaded["conversion"]["progress_interval"] == 5
        assert os.path.isabs(loaded["base_dirs"]["logs"])
        assert loaded["base_dirs"]["logs"].endswith("rel_logs")

    def test_empty_settings_file(self, monkeypatch, tmp_path):
        settings = tmp_path / "empty.yaml"
        settings.write_text("", encoding="utf-8")
        monkeypatch.setenv("SQLSHIFT_SETTINGS", str(settings))
        assert load_config() == {"base_dirs": {}}


class TestLogging:

    def test_execution_log_is_created(self):
        from sqlshift.utils.logger import setup_logger

        logger = setup_logger("tests.execution", execution_name="unit_load")
        logger.info("statement 1 ok")

        exec_root = os.path.join(config["base_dirs"]["logs"], "db_execution")
        runs = [d for d in os.listdir(exec_root) if d.startswith("unit_load_execution_")]
        assert runs
        assert os.path.isfile(os.path.join(exec_root, runs[0], "execution.log"))

    def test_handlers_are_not_duplicated(self):
        import logging

        from sqlshift.utils.logger import setup_logger

        setup_logger("tests.a")
        before = len(logging.getLogger().handlers)
        setup_logger("tests.b")
        assert len(logging.getLogger().handlers) == before


class TestTimed:

    def test_duration_added_to_dict(self):
        from sqlshift.utils.timing import timed

        result = timed(lambda: {"status": "success"})
        assert result["status"] == "success"
        assert result["duration_s"] >= 0

    def test_other_results_pass_through(self):
        from sqlshift.utils.timing import timed

        assert timed(sum, [1, 2, 3]) == 6
