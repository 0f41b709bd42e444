'''Derive cache keys from argument lists

Copyright (c) 2020 Machine Zone, Inc. All rights reserved.

Strategies:

canonical  length-prefixed, type-tagged byte encoding of the arguments.
           Distinguishes 1, 1.0 and True. Dicts and sets are sorted by their
           encoded items, so two equal dicts share a key whatever their
           insertion order. Enums, dataclasses, dates and times,
           Decimal, Fraction, UUID and paths are encoded by value.
           Decimal('1.0') and Decimal('1.00') keep their own keys.
           Cycles and opaque objects raise, unless opaque='identity'
           where opaque objects are keyed by id().
identity   every argument is keyed by id(). Entries pin the arguments so
           that an id cannot be recycled while the entry is alive.
native     (args, sorted kwargs) used as a plain dict key. Cheap, but
           1 == 1.0 == True so those calls collide.
'''

import dataclasses
import datetime
import decimal
import enum
import fractions
import pathlib
import struct
import uuid
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from memocache.common.memo_types import ArgsTuple, DerivedKey, KwargsDict

KEY_STRATEGIES = ('canonical', 'identity', 'native')
OPAQUE_POLICIES = ('raise', 'identity')

DEFAULT_KEY_STRATEGY = 'canonical'
DEFAULT_OPAQUE_POLICY = 'raise'

_LENGTH = struct.Struct('>Q')
_DOUBLE = struct.Struct('>d')

# All NaNs encode the same way
_NAN_BYTES = _DOUBLE.pack(float('nan'))


class UnsupportedArgumentError(TypeError):
    pass


def _length(n: int) -> bytes:
    return _LENGTH.pack(n)


def _chunk(tag: bytes, payload: bytes) -> bytes:
    return tag + _length(len(payload)) + payload


def _encodeFloat(value: float) -> bytes:
    if value != value:
        return _NAN_BYTES
    return _DOUBLE.pack(value)


def _encodeInt(value: int) -> bytes:
    size = (value.bit_length() + 8) // 8
    return value.to_bytes(size, 'big', signed=True)


def _encodeIsoformat(value) -> bytes:
    # isoformat() carries the utc offset of aware values
    return value.isoformat().encode('ascii')


def _encodeTimedelta(value: datetime.timedelta) -> bytes:
    return b''.join(
        _chunk(b'i', _encodeInt(n))
        for n in (value.days, value.seconds, value.microseconds)
    )


def _encodeFraction(value: fractions.Fraction) -> bytes:
    # Fractions are always stored in lowest terms
    return _chunk(b'i', _encodeInt(value.numerator)) + _chunk(
        b'i', _encodeInt(value.denominator))


def _qualifiedName(cls) -> bytes:
    return f'{cls.__module__}.{cls.__qualname__}'.encode('utf-8')


class CanonicalEncoder(object):
    '''Encode one argument list. Not reusable across calls.'''

    def __init__(self, opaque: str = DEFAULT_OPAQUE_POLICY) -> None:
        self.opaque = opaque
        self.path = set()
        self.pinned = []

    def encodeCall(self, args: ArgsTuple, kwargs: KwargsDict) -> bytes:
        parts = [b'A', _length(len(args))]
        for arg in args:
            parts.append(self.encode(arg))

        parts.append(b'K')
        parts.append(_length(len(kwargs)))
        for name in sorted(kwargs):
            parts.append(_chunk(b's', name.encode('utf-8')))
            parts.append(self.encode(kwargs[name]))

        return b''.join(parts)

    def encode(self, value: Any) -> bytes:
        cls = type(value)

        # bool and Enum come first, they subclass int
        if value is None:
            return b'N'
        if cls is bool:
            return b'T' if value else b'F'
        if isinstance(value, enum.Enum):
            # Flag members combined with | or Flag(0) have no name
            return _chunk(b'E', _qualifiedName(cls)) + self.encode(value.value)

        encoder = _SCALARS.get(cls)
        if encoder is not None:
            tag, fn = encoder
            return _chunk(tag, fn(value))

        if cls in _CONTAINERS:
            return self.encodeContainer(value, cls)

        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return self.encodeDataclass(value)

        if isinstance(value, pathlib.PurePath):
            return self.encodePath(value)

        for base in _SUBCLASSABLE:
            if isinstance(value, base):
                return _chunk(b'X', _qualifiedName(cls)) + self.encodeAs(value, base)

        return self.encodeOpaque(value)

    def encodeAs(self, value, base) -> bytes:
        if base in _CONTAINERS:
            return self.encodeContainer(value, base)
        tag, fn = _SCALARS[base]
        return _chunk(tag, fn(value))

    def encodeContainer(self, value, kind) -> bytes:
        marker = id(value)
        if marker in self.path:
            raise UnsupportedArgumentError(
                f'cyclic reference in {type(value).__name__} argument')

        self.path.add(marker)
        try:
            if kind is dict:
                items = sorted(
                    self.encode(k) + self.encode(v) for k, v in value.items()
                )
            elif kind in (set, frozenset):
                items = sorted(self.encode(item) for item in value)
            else:
                items = [self.encode(item) for item in value]
        finally:
            self.path.discard(marker)

        tag = _CONTAINERS[kind]
        return tag + _length(len(items)) + b''.join(items)

    def encodeDataclass(self, value) -> bytes:
        marker = id(value)
        if marker in self.path:
            raise UnsupportedArgumentError(
                f'cyclic reference in {type(value).__name__} argument')

        # Same fields as the generated __eq__
        fields = [field for field in dataclasses.fields(value) if field.compare]

        self.path.add(marker)
        try:
            parts = [_chunk(b'C', _qualifiedName(type(value))), _length(len(fields))]
            for field in fields:
                try:
                    attr = getattr(value, field.name)
                except AttributeError:
                    raise UnsupportedArgumentError(
                        f'field {field.name} of {type(value).__name__} argument '
                        'is not set, declare it with compare=False or pass a keyFunction'
                    )
                parts.append(_chunk(b's', field.name.encode('utf-8')))
                parts.append(self.encode(attr))
        finally:
            self.path.discard(marker)

        return b''.join(parts)

    def encodePath(self, value) -> bytes:
        # PurePosixPath('a') == PosixPath('a'), only the flavour matters
        flavour = pathlib.PureWindowsPath if isinstance(
            value, pathlib.PureWindowsPath) else pathlib.PurePosixPath
        return _chunk(b'P', _qualifiedName(flavour)) + _chunk(
            b's', str(value).encode('utf-8', 'surrogatepass'))

    def encodeOpaque(self, value) -> bytes:
        if self.opaque != 'identity':
            raise UnsupportedArgumentError(
                f'cannot derive a cache key from {type(value).__name__} '
                'argument, pass a keyFunction that maps it to plain values, '
                'or opaque="identity" if it is a handle compared by identity'
            )

        self.pinned.append(value)
        return _chunk(b'@', _qualifiedName(type(value))) + _chunk(
            b'#', _encodeInt(id(value)))


_SCALARS = {
    int: (b'i', _encodeInt),
    float: (b'f', _encodeFloat),
    complex: (b'c', lambda z: _encodeFloat(z.real) + _encodeFloat(z.imag)),
    str: (b's', lambda s: s.encode('utf-8', 'surrogatepass')),
    bytes: (b'b', bytes),
    bytearray: (b'y', bytes),
    datetime.datetime: (b'W', _encodeIsoformat),
    datetime.date: (b'J', _encodeIsoformat),
    datetime.time: (b'H', _encodeIsoformat),
    datetime.timedelta: (b'G', _encodeTimedelta),
    decimal.Decimal: (b'M', lambda d: str(d).encode('ascii')),
    fractions.Fraction: (b'Q', _encodeFraction),
    uuid.UUID: (b'U', lambda u: u.bytes),
}

_CONTAINERS = {
    tuple: b't',
    list: b'l',
    dict: b'd',
    set: b'S',
    frozenset: b'Z',
}

# Checked in order for subclasses of builtins (namedtuple, OrderedDict, ...)
_SUBCLASSABLE = (int, float, complex, str, bytes, bytearray,
                 datetime.datetime, datetime.date, datetime.time,
                 datetime.timedelta, decimal.Decimal, fractions.Fraction,
                 uuid.UUID, tuple, list, dict, set, frozenset)


def canonicalKey(*args, **kwargs) -> bytes:
    '''Return the canonical key of a call, opaque arguments raise'''

    return CanonicalEncoder().encodeCall(args, kwargs)


class KeyDeriver(object):
    '''Base class, deriveKey returns (key, pinned objects)'''

    name = 'base'

    def deriveKey(self, args: ArgsTuple,
                  kwargs: KwargsDict) -> Tuple[DerivedKey, tuple]:
        raise NotImplementedError()

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.name}>'


class CanonicalKeyDeriver(KeyDeriver):
    name = 'canonical'

    def __init__(self, opaque: str = DEFAULT_OPAQUE_POLICY) -> None:
        self.opaque = opaque

    def deriveKey(self, args, kwargs):
        encoder = CanonicalEncoder(self.opaque)
        key = encoder.encodeCall(args, kwargs)
        return key, tuple(encoder.pinned)


class IdentityKeyDeriver(KeyDeriver):
    name = 'identity'

    def deriveKey(self, args, kwargs):
        names = sorted(kwargs)
        key = (
            len(args),
            tuple(id(arg) for arg in args),
            tuple((name, id(kwargs[name])) for name in names),
        )
        pinned = args + tuple(kwargs[name] for name in names)
        return key, pinned


class NativeKeyDeriver(KeyDeriver):
    name = 'native'

    def deriveKey(self, args, kwargs):
        key = (args, tuple(sorted(kwargs.items())))
        try:
            hash(key)
        except TypeError as e:
            raise UnsupportedArgumentError(f'unhashable argument: {e}')

        return key, ()


class CustomKeyDeriver(KeyDeriver):
    name = 'custom'

    def __init__(self, keyFunction: Callable[..., Hashable]) -> None:
        self.keyFunction = keyFunction

    def deriveKey(self, args, kwargs):
        key = self.keyFunction(*args, **kwargs)
        try:
            hash(key)
        except TypeError as e:
            raise UnsupportedArgumentError(f'keyFunction returned an unhashable key: {e}')

        return key, ()


def makeKeyDeriver(keyStrategy: str = DEFAULT_KEY_STRATEGY,
                   keyFunction: Optional[Callable[..., Hashable]] = None,
                   opaque: str = DEFAULT_OPAQUE_POLICY) -> KeyDeriver:
    if opaque not in OPAQUE_POLICIES:
        raise ValueError(f'Invalid opaque policy "{opaque}", use one of {OPAQUE_POLICIES}')

    if keyFunction is not None:
        if keyStrategy not in (None, DEFAULT_KEY_STRATEGY):
            raise ValueError(
                f'keyFunction cannot be combined with key strategy "{keyStrategy}"')
        return CustomKeyDeriver(keyFunction)

    if keyStrategy is None:
        keyStrategy = DEFAULT_KEY_STRATEGY

    derivers: Dict[str, Callable[[], KeyDeriver]] = {
        'canonical': lambda: CanonicalKeyDeriver(opaque),
        'identity': IdentityKeyDeriver,
        'native': NativeKeyDeriver,
    }

    factory = derivers.get(keyStrategy)
    if factory is None:
        raise ValueError(
            f'Invalid key strategy "{keyStrategy}", use one of {KEY_STRATEGIES}')

    return factory()
