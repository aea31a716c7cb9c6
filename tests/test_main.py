"""Tests for the command line entry point."""

import logging

import pytest
import structlog

from policy_cache import main as cli
from policy_cache.in_memory_cache import InvalidArgumentError, LRUCache, create_cache


@pytest.fixture
def no_logging_setup(monkeypatch):
    """Keep main() from reconfiguring global logging during the test run."""
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


class TestDemo:
    """The reference scenarios replay with the expected lookups."""

    def test_run_demo(self):
        results = cli.run_demo()

        lru_results = results[:5]
        lfu_results = results[5:]
        assert lru_results == ["a", None, None, "c", "d"]
        assert lfu_results == ["a", None, "c", None, "c", "d", "a", None, "c", None]

    def test_main_demo(self, no_logging_setup):
        assert cli.main(["demo"]) == 0


class TestStressCommand:
    """`policy-cache stress` runs a workload and checks the result."""

    @pytest.mark.parametrize("policy", ["LRU", "lfu"])
    def test_main_stress(self, no_logging_setup, policy):
        argv = ["stress", "--policy", policy, "--threads", "3", "--ops", "200", "--capacity", "8", "--seed", "5"]
        assert cli.main(argv) == 0

    def test_integrity_failure_exit_code(self, no_logging_setup, monkeypatch):
        def corrupt(self):
            raise AssertionError("size counter disagrees with lookup table")

        monkeypatch.setattr(LRUCache, "assert_integrity", corrupt)

        assert cli.main(["stress", "--policy", "LRU", "--threads", "2", "--ops", "10"]) == 1

    def test_unknown_policy_rejected(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["stress", "--policy", "MRU"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.parse_args([])

    @pytest.mark.parametrize("option", ["--capacity", "--threads", "--ops", "--keys"])
    @pytest.mark.parametrize("value", ["0", "-4", "many"])
    def test_counts_must_be_positive(self, option, value, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args(["stress", option, value])

        assert exc_info.value.code == 2
        assert option in capsys.readouterr().err

    @pytest.mark.parametrize("option", ["--keys", "--threads", "--capacity"])
    def test_main_rejects_zero_counts(self, no_logging_setup, option):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["stress", option, "0", "--ops", "10"])

        assert exc_info.value.code == 2

    def test_invalid_argument_exit_code(self, no_logging_setup, monkeypatch):
        """A policy name that slipped past argparse, e.g. from settings, fails cleanly."""
        monkeypatch.setattr(cli, "create_cache", lambda policy, capacity: create_cache("MRU", capacity))

        assert cli.main(["stress", "--threads", "2", "--ops", "10"]) == 2

    @pytest.mark.parametrize("field", ["threads", "ops_per_thread", "key_space"])
    def test_run_stress_rejects_empty_workload(self, field):
        counts = {"threads": 2, "ops_per_thread": 10, "key_space": 4}
        counts[field] = 0

        with pytest.raises(InvalidArgumentError) as exc_info:
            cli.run_stress(LRUCache(4), **counts)

        assert exc_info.value.argument == field

    def test_stress_defaults(self):
        args = cli.parse_args(["stress"])

        assert args.threads == 8
        assert args.capacity == 64
        assert args.seed is None


class TestConfigureLogging:
    """structlog is wired to the standard library logger."""

    def test_configures_stdlib_factory(self, monkeypatch):
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: None)
        try:
            cli.configure_logging("debug", json_logs=True)
            config = structlog.get_config()

            assert isinstance(config["logger_factory"], structlog.stdlib.LoggerFactory)
            assert config["wrapper_class"] is structlog.stdlib.BoundLogger
            assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)
        finally:
            structlog.reset_defaults()

    def test_console_renderer(self, monkeypatch):
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: None)
        try:
            cli.configure_logging("info", json_logs=False)

            assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)
        finally:
            structlog.reset_defaults()
