'''Memoization of coroutine functions

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.
'''

import asyncio
import inspect
import sys

import pytest

from memocache import AsyncMemoized, memoize


def test_coroutine_functions_get_an_async_wrapper():
    async def fetch(x):
        return x

    memoized = memoize(fetch)
    assert isinstance(memoized, AsyncMemoized)
    assert memoized.__name__ == 'fetch'


@pytest.mark.skipif(sys.version_info < (3, 12), reason='markcoroutinefunction is 3.12+')
def test_wrapper_is_a_coroutine_function():
    async def fetch(x):
        return x

    class Client(object):
        @memoize(opaque='identity')
        async def get(self, x):
            return x

    assert inspect.iscoroutinefunction(memoize(fetch))
    assert inspect.iscoroutinefunction(Client().get)
    assert not inspect.iscoroutinefunction(memoize(lambda x: x))


async def hitAndMiss():
    calls = []

    @memoize
    async def fetch(x):
        calls.append(x)
        await asyncio.sleep(0)
        return x * 2

    assert await fetch(2) == 4
    assert await fetch(2) == 4
    assert await fetch(3) == 6
    assert calls == [2, 3]
    assert fetch.cacheInfo().hits == 1


def test_hit_and_miss():
    asyncio.run(hitAndMiss())


async def concurrentAwaiters():
    calls = []

    @memoize
    async def fetch(x):
        calls.append(x)
        await asyncio.sleep(0.01)
        return {'value': x}

    results = await asyncio.gather(*[fetch(1) for _ in range(5)])
    assert calls == [1]
    assert all(result is results[0] for result in results)
    assert fetch.inflight == {}


def test_concurrent_awaiters_are_coalesced():
    asyncio.run(concurrentAwaiters())


async def failureNotCached():
    calls = []

    @memoize
    async def flaky(x):
        calls.append(x)
        await asyncio.sleep(0.01)
        if len(calls) == 1:
            raise ConnectionError('unreachable')
        return x

    results = await asyncio.gather(
        *[flaky(5) for _ in range(4)], return_exceptions=True
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], ConnectionError)
    assert results.count(5) == 3
    assert len(calls) == 2

    assert await flaky(5) == 5
    assert len(calls) == 2


def test_failure_not_cached():
    asyncio.run(failureNotCached())


async def failureRetried():
    calls = []

    @memoize
    async def broken(x):
        calls.append(x)
        raise ValueError(x)

    with pytest.raises(ValueError):
        await broken(1)

    with pytest.raises(ValueError):
        await broken(1)

    assert calls == [1, 1]
    assert len(broken) == 0


def test_failure_retried():
    asyncio.run(failureRetried())


async def recursiveFibonacci():
    calls = []

    @memoize
    async def fib(n):
        calls.append(n)
        if n < 2:
            return n
        return await fib(n - 1) + await fib(n - 2)

    assert await fib(10) == 55
    assert len(calls) == 11


def test_recursive_fibonacci():
    asyncio.run(recursiveFibonacci())


async def recursiveGather():
    calls = []

    @memoize
    async def fib(n):
        calls.append(n)
        if n < 2:
            return n
        a, b = await asyncio.gather(fib(n - 1), fib(n - 2))
        return a + b

    assert await fib(12) == 144
    assert sorted(calls) == list(range(13))


def test_recursion_across_tasks():
    asyncio.run(recursiveGather())
