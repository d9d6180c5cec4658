# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for StructlogAdapter — default LoggingPort implementation."""

import io
import logging
from abc import ABC, abstractmethod

import structlog
from structlog.testing import capture_logs

from pyintercept.core.config import Config
from pyintercept.interception import DefaultInterceptor, LoggingInterceptor, create_proxy
from pyintercept.logging import LoggingPort, StructlogAdapter, add_invocation_context


class Shipping(ABC):
    @abstractmethod
    def quote(self, weight: float) -> float: ...


class LoggingShipping(Shipping):
    def quote(self, weight):
        structlog.get_logger("shipping").info("quoting", weight=weight)
        return weight * 2.5


class ProbingShipping(Shipping):
    def __init__(self):
        self.events = []

    def quote(self, weight):
        self.events.append(add_invocation_context(None, "info", {"event": "quoting"}))
        return weight * 2.5


class TestStructlogAdapterConformance:
    def test_implements_logging_port(self):
        assert isinstance(StructlogAdapter(), LoggingPort)


class TestStructlogAdapterConfigure:
    def test_configure_with_defaults(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.configure(Config({}))
        assert adapter.levels() == {"root": "INFO"}

    def test_configure_reads_root_level(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.configure(Config({"pyintercept": {"logging": {"level": {"root": "debug"}}}}))
        assert adapter.levels()["root"] == "DEBUG"

    def test_configure_reads_per_logger_levels(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        config = Config(
            {"pyintercept": {"logging": {"level": {"root": "INFO", "pyintercept.interception": "debug"}}}}
        )
        adapter.configure(config)
        assert adapter.levels() == {"root": "INFO", "pyintercept.interception": "DEBUG"}
        assert logging.getLogger("pyintercept.interception").level == logging.DEBUG

    def test_json_format_renders_json(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.configure(Config({"pyintercept": {"logging": {"format": "JSON"}}}))
        assert isinstance(adapter.processors()[-1], structlog.processors.JSONRenderer)

    def test_console_format_by_default(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.configure(Config({}))
        assert isinstance(adapter.processors()[-1], structlog.dev.ConsoleRenderer)

    def test_format_env_override(self, monkeypatch):
        monkeypatch.setenv("PYINTERCEPT_LOGGING_FORMAT", "json")
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.configure(Config({}))
        assert isinstance(adapter.processors()[-1], structlog.processors.JSONRenderer)

    def test_call_context_processor_can_be_disabled(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        assert add_invocation_context in adapter.processors()
        adapter.configure(Config({"pyintercept": {"logging": {"call-context": "false"}}}))
        assert add_invocation_context not in adapter.processors()


class TestStructlogAdapterLevels:
    def test_get_logger_returns_bound_logger(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.configure(Config({}))
        logger = adapter.get_logger("pyintercept.test")
        assert callable(getattr(logger, "info", None))
        assert callable(getattr(logger, "debug", None))

    def test_set_level_updates_logger(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.set_level("pyintercept.calls", "warning")
        assert logging.getLogger("pyintercept.calls").level == logging.WARNING
        assert adapter.levels()["pyintercept.calls"] == "WARNING"

    def test_unknown_level_falls_back_to_info(self):
        adapter = StructlogAdapter(stream=io.StringIO())
        adapter.set_level("pyintercept.other", "chatty")
        assert logging.getLogger("pyintercept.other").level == logging.INFO


class TestInvocationContext:
    def test_events_inside_a_proxied_call_are_tagged(self):
        real = ProbingShipping()
        proxy = create_proxy(Shipping, DefaultInterceptor(), real)
        assert proxy.quote(2.0) == 5.0

        assert real.events == [{"event": "quoting", "invocation": "Shipping.quote", "invocation_state": "proceeded"}]

    def test_events_outside_a_proxied_call_are_untouched(self):
        event = add_invocation_context(None, "info", {"event": "idle"})
        assert event == {"event": "idle"}

    def test_logging_interceptor_uses_port_logger(self):
        requested = []

        class RecordingAdapter(StructlogAdapter):
            def get_logger(self, name):
                requested.append(name)
                return super().get_logger(name)

        interceptor = LoggingInterceptor(logger_name="shipping.calls", logging_port=RecordingAdapter())
        proxy = create_proxy(Shipping, interceptor, LoggingShipping())
        with capture_logs() as logs:
            proxy.quote(1.0)

        assert requested == ["shipping.calls"]
        assert [entry["event"] for entry in logs] == ["invocation_started", "quoting", "invocation_completed"]
