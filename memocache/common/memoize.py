'''Memoization decorator for functions taking any arguments.

Copyright (c) 2018-2020 Machine Zone, Inc. All rights reserved.

Each call to memoize creates a new private cache. Results are stored
verbatim and never evicted or overwritten. A call that raises is not
cached, the next call with the same arguments runs the function again.

Recursive functions should call the memoized name, every sub call then
gets cached:

    @memoize
    def fib(n):
        return n if n < 2 else fib(n - 1) + fib(n - 2)

With threadSafe=True at most one thread computes a given key, the others
wait for its result. The function is never called with a lock held, so
recursion on other keys cannot deadlock. Two threads whose computations
depend on each other's keys will still deadlock, the same way that
recursion would never terminate in a single thread.
'''

import inspect
import threading

from memocache.common.keys import (
    DEFAULT_KEY_STRATEGY,
    DEFAULT_OPAQUE_POLICY,
    makeKeyDeriver,
)
from memocache.common.memoize_async import AsyncMemoized
from memocache.common.wrapper import MISSING, BaseMemoized


class Computation(object):
    '''A key being computed by one thread'''

    def __init__(self):
        self.owner = threading.get_ident()
        self.done = threading.Event()


class Memoized(BaseMemoized):
    def __init__(self, f, keyDeriver, threadSafe=False, bindArguments=True):
        super().__init__(f, keyDeriver, bindArguments)

        self.threadSafe = threadSafe
        self.lock = threading.Lock()
        self.inflight = {}

    def __call__(self, *args, **kwargs):
        call = self.normalizeCall(args, kwargs)
        if call is None:
            return self.f(*args, **kwargs)

        args, kwargs = call
        key, pinned = self.keyDeriver.deriveKey(args, kwargs)

        if self.threadSafe:
            return self.lookupOrComputeLocked(key, pinned, args, kwargs)
        else:
            return self.lookupOrCompute(key, pinned, args, kwargs)

    def compute(self, args, kwargs):
        try:
            return self.f(*args, **kwargs)
        except Exception as e:
            self.recordFailure(e)
            raise

    def lookupOrCompute(self, key, pinned, args, kwargs):
        ret = self.cache.get(key, MISSING)
        if ret is not MISSING:
            self.hits += 1
            return ret

        self.misses += 1
        ret = self.compute(args, kwargs)
        self.store(key, pinned, ret)
        return ret

    def lookupOrComputeLocked(self, key, pinned, args, kwargs):
        while True:
            with self.lock:
                ret = self.cache.get(key, MISSING)
                if ret is not MISSING:
                    self.hits += 1
                    return ret

                computation = self.inflight.get(key)
                if computation is None:
                    computation = Computation()
                    self.inflight[key] = computation
                    owner = True
                    self.misses += 1
                    break

                # Same thread re-entering its own key, waiting would hang
                if computation.owner == threading.get_ident():
                    owner = False
                    self.misses += 1
                    break

            # Either the result is stored, or the owner failed and we retry
            computation.done.wait()

        try:
            ret = self.compute(args, kwargs)
            with self.lock:
                self.store(key, pinned, ret)
        finally:
            if owner:
                with self.lock:
                    del self.inflight[key]
                computation.done.set()

        return ret


def memoize(
    f=None,
    *,
    keyStrategy=DEFAULT_KEY_STRATEGY,
    keyFunction=None,
    opaque=DEFAULT_OPAQUE_POLICY,
    threadSafe=False,
    bindArguments=True,
):
    '''Memoization decorator for functions taking one or more arguments.

    Works bare (@memoize), with options (@memoize(keyStrategy='identity'))
    or as a plain call (memoize(f)). Coroutine functions get an
    AsyncMemoized wrapper, which always coalesces concurrent awaiters.
    '''
    keyDeriver = makeKeyDeriver(keyStrategy, keyFunction, opaque)

    def decorator(f):
        if not callable(f):
            raise TypeError(f'memoize expects a callable, got {type(f).__name__}')

        if inspect.iscoroutinefunction(f):
            return AsyncMemoized(f, keyDeriver, bindArguments)

        return Memoized(f, keyDeriver, threadSafe, bindArguments)

    if f is None:
        return decorator

    return decorator(f)
