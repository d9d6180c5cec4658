"""Tests for proxy and invocation helper functions."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Coroutine
from typing import Any

import pytest

from pyintercept.interception.extensions import (
    get_real_instance,
    get_real_return_value,
    is_awaitable_type,
    is_proxy,
)
from pyintercept.interception.factory import create_proxy
from pyintercept.interception.interceptor import DefaultInterceptor
from pyintercept.interception.invocation import Invocation


class Ledger(ABC):
    @abstractmethod
    def balance(self) -> int: ...

    @abstractmethod
    async def balance_async(self) -> int: ...


class RealLedger(Ledger):
    def balance(self) -> int:
        return 100

    async def balance_async(self) -> int:
        await asyncio.sleep(0)
        return 100


class TargetCapturingInterceptor(DefaultInterceptor):
    def __init__(self) -> None:
        self.targets: list[Any] = []

    def intercept(self, invocation: Invocation) -> None:
        self.targets.append(get_real_instance(invocation))
        invocation.proceed()


class PeekingInterceptor(DefaultInterceptor):
    def __init__(self) -> None:
        self.peeked: list[Any] = []

    async def intercept_async(self, invocation: Invocation) -> None:
        invocation.proceed()
        self.peeked.append(await get_real_return_value(invocation))


class TestIsProxy:
    def test_proxy(self) -> None:
        assert is_proxy(create_proxy(Ledger, DefaultInterceptor(), RealLedger()))

    def test_plain_object(self) -> None:
        assert not is_proxy(RealLedger())


class TestGetRealInstance:
    def test_unwraps_proxy(self) -> None:
        real = RealLedger()
        assert get_real_instance(create_proxy(Ledger, DefaultInterceptor(), real)) is real

    def test_unwraps_nested_proxies(self) -> None:
        real = RealLedger()
        inner = create_proxy(Ledger, DefaultInterceptor(), real)
        outer = create_proxy(Ledger, DefaultInterceptor(), inner)
        assert get_real_instance(outer) is real
        assert outer.balance() == 100

    def test_plain_object_is_returned_unchanged(self) -> None:
        real = RealLedger()
        assert get_real_instance(real) is real

    def test_unwraps_invocation_target(self) -> None:
        real = RealLedger()
        interceptor = TargetCapturingInterceptor()
        inner = create_proxy(Ledger, DefaultInterceptor(), real)
        create_proxy(Ledger, interceptor, inner).balance()
        assert interceptor.targets == [real]


class TestIsAwaitableType:
    @pytest.mark.parametrize(
        "annotation",
        [Awaitable[int], Coroutine[Any, Any, str], asyncio.Future[int], asyncio.Task[str], Awaitable],
    )
    def test_async_shapes(self, annotation: Any) -> None:
        assert is_awaitable_type(annotation)

    @pytest.mark.parametrize("annotation", [int, list[int], None, Any])
    def test_plain_shapes(self, annotation: Any) -> None:
        assert not is_awaitable_type(annotation)


class TestGetRealReturnValue:
    @pytest.mark.asyncio
    async def test_settles_pending_real_call(self) -> None:
        interceptor = PeekingInterceptor()
        proxy = create_proxy(Ledger, interceptor, RealLedger())
        assert await proxy.balance_async() == 100
        assert interceptor.peeked == [100]

    @pytest.mark.asyncio
    async def test_unwrapped_real_result_is_not_validated(self) -> None:
        class LooseLedger(RealLedger):
            async def balance_async(self) -> Any:
                await asyncio.sleep(0)
                return "plenty"

        interceptor = PeekingInterceptor()
        proxy = create_proxy(Ledger, interceptor, LooseLedger())
        assert await proxy.balance_async() == "plenty"
        assert interceptor.peeked == ["plenty"]

    @pytest.mark.asyncio
    async def test_plain_value_is_returned(self) -> None:
        class Substituting(DefaultInterceptor):
            async def intercept_async(self, invocation: Invocation) -> None:
                invocation.return_value = 5
                seen.append(await get_real_return_value(invocation))

        seen: list[Any] = []
        proxy = create_proxy(Ledger, Substituting(), RealLedger())
        assert await proxy.balance_async() == 5
        assert seen == [5]

    @pytest.mark.asyncio
    async def test_awaitable_slot_is_unwrapped_in_place(self) -> None:
        async def later() -> int:
            return 7

        class PreWrapping(DefaultInterceptor):
            async def intercept_async(self, invocation: Invocation) -> None:
                invocation.return_value = later()
                seen.append(await get_real_return_value(invocation))
                seen.append(invocation.return_value)

        seen: list[Any] = []
        proxy = create_proxy(Ledger, PreWrapping(), RealLedger())
        assert await proxy.balance_async() == 7
        assert seen == [7, 7]
