'''Default memoize options, persisted in a yaml file

Copyright (c) 2018-2020 Machine Zone, Inc. All rights reserved.
'''

import logging
import os
from pathlib import Path

import yaml

from memocache.common.keys import (
    DEFAULT_KEY_STRATEGY,
    DEFAULT_OPAQUE_POLICY,
    KEY_STRATEGIES,
    OPAQUE_POLICIES,
)
from memocache.common.memo_types import YamlDict

DEFAULTS = {
    'key_strategy': DEFAULT_KEY_STRATEGY,
    'opaque': DEFAULT_OPAQUE_POLICY,
    'thread_safe': False,
    'bind_arguments': True,
}


class MemoConfig:
    def __init__(self, path: str) -> None:
        self.path = path
        self.data: YamlDict = {}

        if os.path.exists(self.path):
            with open(self.path) as f:
                self.data = yaml.load(f.read(), Loader=yaml.FullLoader) or {}

            self.validateConfig()
        else:
            msg = f'Memocache config file does not exists: "{path}". '
            msg += 'Use `memocache init` to create a default config file'
            logging.warning(msg)

    def validateConfig(self):
        if not isinstance(self.data, dict):
            raise ValueError('Config file should contain a mapping')

        memoize = self.data.get('memoize')
        if memoize is None:
            raise ValueError('No memoize section present in config file')

        if not isinstance(memoize, dict):
            raise ValueError('memoize section is not a dict')

        for name in memoize:
            if name not in DEFAULTS:
                raise ValueError(f'Unknown memoize option "{name}"')

        strategy = memoize.get('key_strategy', DEFAULT_KEY_STRATEGY)
        if strategy not in KEY_STRATEGIES:
            raise ValueError(f'Invalid key_strategy "{strategy}"')

        opaque = memoize.get('opaque', DEFAULT_OPAQUE_POLICY)
        if opaque not in OPAQUE_POLICIES:
            raise ValueError(f'Invalid opaque policy "{opaque}"')

        for flag in ('thread_safe', 'bind_arguments'):
            if not isinstance(memoize.get(flag, False), bool):
                raise ValueError(f'{flag} should be a boolean')

    def getOption(self, name):
        memoize = self.data.get('memoize') or {}
        return memoize.get(name, DEFAULTS[name])

    def getKeyStrategy(self) -> str:
        return os.getenv('MEMOCACHE_KEY_STRATEGY') or self.getOption('key_strategy')

    def getOpaquePolicy(self) -> str:
        return self.getOption('opaque')

    def isThreadSafe(self) -> bool:
        value = os.getenv('MEMOCACHE_THREAD_SAFE')
        if value is not None:
            return value.lower() in ('1', 'true', 'yes', 'on')

        return self.getOption('thread_safe')

    def memoizeOptions(self) -> dict:
        '''Keyword arguments for memoize()'''

        return {
            'keyStrategy': self.getKeyStrategy(),
            'opaque': self.getOpaquePolicy(),
            'threadSafe': self.isThreadSafe(),
            'bindArguments': self.getOption('bind_arguments'),
        }

    def generateDefaultConfig(self):
        self.data['memoize'] = dict(DEFAULTS)

        # write to disk
        with open(self.path, 'w') as f:
            yaml.dump(self.data, f, default_flow_style=False)

        # dump to the console
        with open(self.path) as f:
            print(f.read())


def getDefaultConfigPath():
    path = os.getenv('MEMOCACHE_CONFIG')
    if path:
        return path

    path = Path.home() / '.memocache.yaml'
    return str(path)


def loadDefaultConfig() -> MemoConfig:
    return MemoConfig(getDefaultConfigPath())


def getDefaultMemoizeOption(name):
    return loadDefaultConfig().memoizeOptions()[name]


def getDefaultKeyStrategy() -> str:
    return getDefaultMemoizeOption('keyStrategy')


def getDefaultOpaquePolicy() -> str:
    return getDefaultMemoizeOption('opaque')


def getDefaultThreadSafe() -> bool:
    return getDefaultMemoizeOption('threadSafe')


def getDefaultBindArguments() -> bool:
    return getDefaultMemoizeOption('bindArguments')


def formatMemoizeOptions(options: dict) -> str:
    return ' '.join(f'{name}={value}' for name, value in options.items())
