"""
Generator configuration

Defaults can be overridden with environment variables:
    CPPX_EXTENSION   - source extension to look for (default .cppx)
    CPPX_HEADER_EXT  - declaration artifact extension (default .h)
    CPPX_SOURCE_EXT  - definition artifact extension (default .cpp)
    CPPX_JOBS        - number of files processed in parallel (default 1)

Command line flags override the environment.
"""

import os
from dataclasses import dataclass, replace

from .logger import logger

DEFAULT_EXTENSION = '.cppx'
DEFAULT_HEADER_EXTENSION = '.h'
DEFAULT_SOURCE_EXTENSION = '.cpp'


def _normalize_extension(ext: str) -> str:
    if ext and not ext.startswith('.'):
        return '.' + ext
    return ext


@dataclass(frozen=True)
class GeneratorConfig:
    extension: str = DEFAULT_EXTENSION
    header_extension: str = DEFAULT_HEADER_EXTENSION
    source_extension: str = DEFAULT_SOURCE_EXTENSION
    jobs: int = 1
    force: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'extension', _normalize_extension(self.extension))
        object.__setattr__(self, 'header_extension', _normalize_extension(self.header_extension))
        object.__setattr__(self, 'source_extension', _normalize_extension(self.source_extension))
        if self.jobs < 1:
            object.__setattr__(self, 'jobs', 1)

    @classmethod
    def from_env(cls, environ=None) -> 'GeneratorConfig':
        """Build a configuration from ``CPPX_*`` environment variables"""
        env = os.environ if environ is None else environ
        jobs_text = env.get('CPPX_JOBS', '1')
        try:
            jobs = int(jobs_text)
        except ValueError:
            logger.warning("Ignoring invalid CPPX_JOBS", value=jobs_text)
            jobs = 1
        return cls(
            extension=env.get('CPPX_EXTENSION', DEFAULT_EXTENSION),
            header_extension=env.get('CPPX_HEADER_EXT', DEFAULT_HEADER_EXTENSION),
            source_extension=env.get('CPPX_SOURCE_EXT', DEFAULT_SOURCE_EXTENSION),
            jobs=jobs,
        )

    def override(self, **changes) -> 'GeneratorConfig':
        """Return a copy with every non-None value in ``changes`` applied"""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})
