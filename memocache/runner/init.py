'''Setup memocache

Copyright (c) 2018-2020 Machine Zone, Inc. All rights reserved.
'''
import click

from memocache.common.memo_config import MemoConfig, getDefaultConfigPath


@click.command()
@click.option('--path', default=getDefaultConfigPath)
def init(path):
    '''Write a default config file
    '''

    memoConfig = MemoConfig(path)
    memoConfig.generateDefaultConfig()
