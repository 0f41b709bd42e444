'''Shared plumbing for the sync and async memoized wrappers

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.
'''

import collections
import functools
import inspect
import logging

from memocache.common.keys import KeyDeriver

CacheInfo = collections.namedtuple(
    'CacheInfo', ['hits', 'misses', 'failures', 'currsize']
)

MISSING = object()


def getSignature(f):
    '''None for callables that cannot be introspected (some builtins)'''

    try:
        return inspect.signature(f)
    except (TypeError, ValueError):
        return None


class BaseMemoized(object):
    def __init__(self, f, keyDeriver: KeyDeriver, bindArguments: bool = True) -> None:
        # Copy __name__, __doc__, __wrapped__ first, our own state wins
        functools.update_wrapper(self, f)

        self.f = f
        self.name = getattr(f, '__qualname__', None) or repr(f)
        self.keyDeriver = keyDeriver
        self.signature = getSignature(f) if bindArguments else None

        # key -> result, only ever grows
        self.cache = {}

        # key -> argument objects referenced by id() in the key
        self.pinned = {}

        self.hits = 0
        self.misses = 0
        self.failures = 0

    def normalizeCall(self, args, kwargs):
        '''Map equivalent calls (positional vs keyword, defaults) to one form.

        Returns None when the arguments do not match the signature, the
        caller then forwards the call to f so that f raises its own error.
        '''
        if self.signature is None:
            return args, kwargs

        try:
            bound = self.signature.bind(*args, **kwargs)
        except TypeError as e:
            logging.debug(f'{self.name}: cannot bind arguments, not cached: {e}')
            return None

        bound.apply_defaults()
        return bound.args, bound.kwargs

    def store(self, key, pinned, value):
        '''Store value unless key is already present'''

        if key in self.cache:
            return

        self.cache[key] = value
        if pinned:
            self.pinned[key] = pinned

    def recordFailure(self, e):
        self.failures += 1
        logging.debug(f'{self.name} raised {e!r}, result not cached')

    def cacheInfo(self) -> CacheInfo:
        return CacheInfo(self.hits, self.misses, self.failures, len(self.cache))

    def __len__(self):
        return len(self.cache)

    def __get__(self, obj, objtype=None):
        '''Support instance methods'''

        if obj is None:
            return self

        return functools.partial(self.__call__, obj)

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.name} {self.keyDeriver.name}>'
