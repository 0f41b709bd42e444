'''Memoization of coroutine functions

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.

The awaited result is cached, not the coroutine object. When several tasks
await the same missing key only the first one runs the coroutine, the
others wait for it. If it fails or gets cancelled nothing is stored and the
waiting tasks retry.
'''

import asyncio
import inspect

from memocache.common.wrapper import MISSING, BaseMemoized


class Computation(object):
    '''A key being computed by one task'''

    def __init__(self):
        self.owner = asyncio.current_task()
        self.done = asyncio.Event()


class AsyncMemoized(BaseMemoized):
    def __init__(self, f, keyDeriver, bindArguments=True):
        super().__init__(f, keyDeriver, bindArguments)
        self.inflight = {}

        # Seen as a coroutine function by inspect on 3.12+, by asyncio before
        if hasattr(inspect, 'markcoroutinefunction'):
            inspect.markcoroutinefunction(self)
        else:
            self._is_coroutine = asyncio.coroutines._is_coroutine

    async def __call__(self, *args, **kwargs):
        call = self.normalizeCall(args, kwargs)
        if call is None:
            return await self.f(*args, **kwargs)

        args, kwargs = call
        key, pinned = self.keyDeriver.deriveKey(args, kwargs)

        while True:
            ret = self.cache.get(key, MISSING)
            if ret is not MISSING:
                self.hits += 1
                return ret

            computation = self.inflight.get(key)
            if computation is None:
                computation = Computation()
                self.inflight[key] = computation
                owner = True
                break

            if computation.owner is asyncio.current_task():
                owner = False
                break

            await computation.done.wait()

        self.misses += 1
        try:
            ret = await self.compute(args, kwargs)
            self.store(key, pinned, ret)
        finally:
            if owner:
                del self.inflight[key]
                computation.done.set()

        return ret

    async def compute(self, args, kwargs):
        try:
            return await self.f(*args, **kwargs)
        except Exception as e:
            self.recordFailure(e)
            raise
