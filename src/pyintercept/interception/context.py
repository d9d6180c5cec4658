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
"""Call-scoped context: the invocation currently being dispatched.

The proxy enters an :func:`invocation_scope` for every call, so code running
underneath it (the interceptor, the real member, log processors) can reach
the active :class:`Invocation` through :func:`current_invocation`. The value
lives in a ``ContextVar`` and follows asyncio tasks.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pyintercept.interception.invocation import Invocation

_current_invocation_var: ContextVar[Invocation | None] = ContextVar(
    "pyintercept_current_invocation", default=None
)


def current_invocation() -> Invocation | None:
    """Get the innermost invocation for the current task, or None."""
    return _current_invocation_var.get()


@contextmanager
def invocation_scope(invocation: Invocation) -> Iterator[Invocation]:
    """Make *invocation* current until the block exits; nested scopes restore the outer one."""
    token = _current_invocation_var.set(invocation)
    try:
        yield invocation
    finally:
        _current_invocation_var.reset(token)
