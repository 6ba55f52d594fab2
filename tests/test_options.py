import logging
import re

import attr
import pytest

from excavator.errors import ConfigurationError
from excavator.logger import LoggerInterface
from excavator.logger import LoggingSink
from excavator.settings.config import DEFAULT_CALL_TEMPLATE
from excavator.settings.config import DEFAULT_QUERY_TEMPLATE
from excavator.settings.config import parse_sources
from excavator.settings.options import DebuggingOptions
from excavator.settings.options import SourceFilter
from tests.utils import ListLogger
from tests.utils import config_from_env


class TestConfig(object):
    def test_defaults(self):
        config = config_from_env({})
        assert config.enabled is True
        assert config.sources == []
        assert config.format.timestamp == "%Y-%m-%d %H:%M:%S.%f"
        assert config.format.precision == "%.05f"
        assert config.format.count == "%03d"
        assert config.format.call == DEFAULT_CALL_TEMPLATE
        assert config.format.query == DEFAULT_QUERY_TEMPLATE

    def test_environment_overrides(self):
        config = config_from_env(
            {
                "EXCAVATOR_ENABLED": "false",
                "EXCAVATOR_SOURCES": "Connection::commit, /^Statement::/ ,",
                "EXCAVATOR_FORMAT_PRECISION": "%.02f",
                "EXCAVATOR_FORMAT_QUERY": "%SOURCE% %QUERY%",
            }
        )
        assert config.enabled is False
        assert config.sources == ["Connection::commit", "/^Statement::/"]
        assert config.format.precision == "%.02f"
        assert config.format.query == "%SOURCE% %QUERY%"
        assert config.format.count == "%03d"

    def test_defaults_bag(self):
        config = config_from_env({"EXCAVATOR_SOURCES": "Statement::execute"})
        assert config.defaults() == {
            "logger": None,
            "format": {
                "timestamp": "%Y-%m-%d %H:%M:%S.%f",
                "precision": "%.05f",
                "count": "%03d",
                "call": DEFAULT_CALL_TEMPLATE,
                "query": DEFAULT_QUERY_TEMPLATE,
            },
            "sources": ["Statement::execute"],
        }

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, []),
            ("", []),
            ("a", ["a"]),
            (" a , b ,, ", ["a", "b"]),
        ],
    )
    def test_parse_sources(self, value, expected):
        assert parse_sources(value) == expected


class TestDebuggingOptions(object):
    @pytest.fixture
    def defaults(self):
        return config_from_env({}).defaults()

    def test_create_from_defaults(self, defaults):
        options = DebuggingOptions.create({}, dsn="sqlite::memory:", username="root", defaults=defaults)
        assert options.logger is None
        assert not options.logging_enabled
        assert options.sources == ()
        assert options.dsn == "sqlite::memory:"
        assert options.username == "root"
        assert options.format.call == DEFAULT_CALL_TEMPLATE
        assert options.format.query == DEFAULT_QUERY_TEMPLATE

    def test_format_is_deep_merged(self, defaults):
        sink = ListLogger()
        options = DebuggingOptions.create(
            {"logger": sink, "format": {"precision": "%.03f"}}, defaults=defaults
        )
        assert options.logger is sink
        assert options.logging_enabled
        assert options.format.precision == "%.03f"
        # untouched keys keep their defaults
        assert options.format.count == "%03d"
        assert options.format.query == DEFAULT_QUERY_TEMPLATE
        # the defaults are not modified
        assert defaults["format"]["precision"] == "%.05f"

    def test_sources_replace_defaults(self):
        defaults = config_from_env({"EXCAVATOR_SOURCES": "Connection::commit"}).defaults()
        assert DebuggingOptions.create({}, defaults=defaults).sources == (SourceFilter("Connection::commit"),)
        options = DebuggingOptions.create({"sources": ["Statement::execute"]}, defaults=defaults)
        assert [f.pattern for f in options.sources] == ["Statement::execute"]

    def test_single_source(self, defaults):
        options = DebuggingOptions.create({"sources": "/^Statement::/"}, defaults=defaults)
        assert len(options.sources) == 1
        assert options.should_log("Statement::execute")
        assert not options.should_log("Connection::prepare")

    def test_should_log_without_filters(self, defaults):
        options = DebuggingOptions.create({}, defaults=defaults)
        assert options.should_log("anything")

    def test_frozen(self, defaults):
        options = DebuggingOptions.create({}, defaults=defaults)
        with pytest.raises(attr.exceptions.FrozenInstanceError):
            options.logger = ListLogger()

    def test_standard_logger_is_adapted(self, defaults):
        logger = logging.getLogger("tests.calls")
        options = DebuggingOptions.create({"logger": logger}, defaults=defaults)
        assert isinstance(options.logger, LoggingSink)
        assert options.logger.logger is logger

    @pytest.mark.parametrize(
        "bag",
        [
            {"loggr": None},
            {"format": {"precission": "%.02f"}},
            {"format": "%.02f"},
            {"format": {"call": 42}},
            {"format": {"precision": "%q"}},
            {"format": {"count": "no pattern"}},
            {"logger": object()},
            {"sources": ["/unterminated"]},
            {"sources": ["/(/"]},
            {"sources": ["/abc/q"]},
            {"sources": [42]},
        ],
    )
    def test_invalid_options(self, bag, defaults):
        with pytest.raises(ConfigurationError):
            DebuggingOptions.create(bag, defaults=defaults)


class TestSourceFilter(object):
    def test_exact(self):
        f = SourceFilter.compile("Connection::commit")
        assert f.regex is None
        assert f.matches("Connection::commit")
        assert not f.matches("Connection::commit2")
        assert not f.matches("connection::commit")

    def test_regex_searches(self):
        f = SourceFilter.compile("/commit/")
        assert f.matches("Connection::commit")
        assert f.matches("Connection::commit2")
        assert not f.matches("Connection::rollback")

    def test_regex_flags(self):
        f = SourceFilter.compile("/^statement::/i")
        assert f.matches("Statement::execute")

    def test_delimiter_inside_pattern(self):
        f = SourceFilter.compile("/a/b/")
        assert f.matches("xa/bx")

    def test_compiled_pattern(self):
        f = SourceFilter.compile(re.compile(r"::execute$"))
        assert f.pattern == r"::execute$"
        assert f.matches("Statement::execute")


class TestLoggingSink(object):
    def test_protocol(self):
        assert isinstance(LoggingSink(), LoggerInterface)
        assert isinstance(ListLogger(), LoggerInterface)
        assert not isinstance(object(), LoggerInterface)

    def test_default_logger(self):
        sink = LoggingSink()
        assert sink.logger.name == "excavator.calls"
        assert sink.level == logging.DEBUG
        assert repr(sink) == "LoggingSink('excavator.calls', level=DEBUG)"

    def test_log(self, caplog):
        caplog.set_level(logging.DEBUG, logger="excavator.calls")
        LoggingSink().log("SELECT 100% done", {"SOURCE": "Statement::execute"})

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.getMessage() == "SELECT 100% done"
        assert record.levelno == logging.DEBUG
        assert record.excavator_scope == {"SOURCE": "Statement::execute"}

    def test_disabled_level(self, caplog):
        caplog.set_level(logging.WARNING, logger="excavator.calls")
        LoggingSink().log("SELECT 1", {})
        assert caplog.records == []
