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
"""StructlogAdapter — default LoggingPort implementation backed by structlog."""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from typing import Any

import structlog

from pyintercept.core.config import Config
from pyintercept.interception.context import current_invocation

ROOT = "root"


def add_invocation_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor: tag events emitted inside a proxied call.

    Adds ``invocation`` (the qualified member name) and ``invocation_state``
    unless the event already carries them.
    """
    invocation = current_invocation()
    if invocation is not None:
        event_dict.setdefault("invocation", invocation.method.qualified_name)
        event_dict.setdefault("invocation_state", invocation.state.value)
    return event_dict


class StructlogAdapter:
    """Configures structlog and stdlib logging from ``pyintercept.logging``.

    Recognised keys::

        pyintercept:
          logging:
            format: console        # or json
            call-context: true     # tag events with the active invocation
            level:
              root: INFO
              pyintercept.calls: DEBUG
    """

    def __init__(self, stream: Any = None) -> None:
        self._stream = stream or sys.stdout
        self._levels: dict[str, str] = {ROOT: "INFO"}
        self._format = "console"
        self._call_context = True

    def configure(self, config: Config) -> None:
        level_section = {k: str(v).upper() for k, v in config.get_section("pyintercept.logging.level").items()}
        self._levels = {ROOT: level_section.pop(ROOT, "INFO"), **level_section}
        self._format = str(config.get("pyintercept.logging.format", "console")).lower()
        call_context = config.get("pyintercept.logging.call-context", True)
        if isinstance(call_context, str):
            call_context = call_context.lower() in ("true", "1", "yes")
        self._call_context = bool(call_context)

        self._setup_structlog()
        for name, level in self._levels.items():
            if name != ROOT:
                self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set the stdlib level of logger *name*; unknown level names mean INFO."""
        logging.getLogger(name).setLevel(getattr(logging, level.upper(), logging.INFO))
        self._levels[name] = level.upper()

    def levels(self) -> Mapping[str, str]:
        """Configured levels: ``root`` plus every per-logger override."""
        return dict(self._levels)

    def processors(self) -> list[structlog.types.Processor]:
        chain: list[structlog.types.Processor] = [structlog.contextvars.merge_contextvars]
        if self._call_context:
            chain.append(add_invocation_context)
        chain += [
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
        ]
        if self._format == "json":
            chain.append(structlog.processors.JSONRenderer())
        else:
            chain.append(structlog.dev.ConsoleRenderer())
        return chain

    def _setup_structlog(self) -> None:
        structlog.configure(
            processors=self.processors(),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=self._stream,
            level=getattr(logging, self._levels[ROOT], logging.INFO),
            force=True,
        )
