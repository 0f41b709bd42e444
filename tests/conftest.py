'''Copyright (c) 2020 Machine Zone, Inc. All rights reserved.'''

import coloredlogs
import pytest

coloredlogs.install(level='INFO')


@pytest.fixture()
def configPath(tmp_path, monkeypatch):
    path = tmp_path / 'memocache.yaml'
    monkeypatch.setenv('MEMOCACHE_CONFIG', str(path))
    monkeypatch.delenv('MEMOCACHE_KEY_STRATEGY', raising=False)
    monkeypatch.delenv('MEMOCACHE_THREAD_SAFE', raising=False)
    yield path
