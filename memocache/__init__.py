'''Memoization of pure functions

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.
'''

from memocache.common.keys import UnsupportedArgumentError, canonicalKey
from memocache.common.memoize import Memoized, memoize
from memocache.common.memoize_async import AsyncMemoized
from memocache.common.wrapper import CacheInfo

__all__ = [
    'AsyncMemoized',
    'CacheInfo',
    'Memoized',
    'UnsupportedArgumentError',
    'canonicalKey',
    'memoize',
]
