'''
Author: Lucas Rath

Process-wide settings of the covprior distributions.

    check_distribution_parameters:
        if True (default), every distribution validates its parameters at construction,
        at every parameter change and before sampling. Distributions accept a
        `check_parameters` argument that overrides this default per instance/call.

Settings can be loaded from a yaml file with the same keys, e.g.:

    check_distribution_parameters: false
'''

from pathlib import Path
from contextlib import contextmanager
from typing import Union
import yaml


class Control():
    check_distribution_parameters:bool = True

    @classmethod
    def settings(cls) -> dict:
        return {'check_distribution_parameters': cls.check_distribution_parameters}

    @classmethod
    def update(cls, **settings):
        for k, v in settings.items():
            if k not in cls.settings():
                raise KeyError(f'unknown setting `{k}`, must be one of {list(cls.settings())}')
            setattr(cls, k, bool(v))

    @classmethod
    def resolve(cls, check_parameters:bool=None) -> bool:
        ''' Per-call flag if given, otherwise the process-wide default '''
        if check_parameters is None:
            return cls.check_distribution_parameters
        return bool(check_parameters)

    @classmethod
    def load(cls, cfg_file:Union[str,Path]) -> dict:
        ''' Apply the settings found in a yaml file and return them '''
        with open(cfg_file, 'r') as f:
            cfg = yaml.safe_load(f) or {}
        cls.update(**cfg)
        return cfg

    @classmethod
    @contextmanager
    def override(cls, **settings):
        ''' Temporarily change settings, e.g. `with Control.override(check_distribution_parameters=False):` '''
        old = cls.settings()
        cls.update(**settings)
        try:
            yield cls
        finally:
            cls.update(**old)
