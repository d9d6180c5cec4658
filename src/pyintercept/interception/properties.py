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
"""Interception settings bound from ``pyintercept.interception``."""

from __future__ import annotations

from dataclasses import dataclass

from pyintercept.core.config import config_properties


@config_properties(prefix="pyintercept.interception")
@dataclass
class InterceptionProperties:
    """Settings shared by the proxy factory and the built-in interceptors.

    Attributes:
        enabled: When false, :class:`InterceptorBeanPostProcessor` leaves
            beans unwrapped.
        validate_return_types: Check substituted values of asynchronous
            members against the declared inner type.
        log_level: Level used by :class:`LoggingInterceptor`.
        log_arguments: Include argument values in LoggingInterceptor events.
    """

    enabled: bool = True
    validate_return_types: bool = True
    log_level: str = "DEBUG"
    log_arguments: bool = False
