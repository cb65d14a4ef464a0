"""
Batch driver: converts every .cppx file under a directory into a .h/.cpp pair

Pipeline per file:
    mmap (read-only) -> scan -> split -> write both artifacts

A failure in one file is logged and the batch moves on to the next one.
"""

import mmap
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from typing import List, Optional

from .build import BuildCache, OutputManager, get_output_manager, configure_output_manager
from .config import GeneratorConfig
from .core import scan, split
from .errors import CppxError
from .logger import logger

OK_RESULT = 0
ERROR_RESULT = 1


def find_source_files(base_dir: str, extension: str = '.cppx') -> List[str]:
    """Return the files under ``base_dir`` (recursively) with ``extension``, sorted"""
    def on_walk_error(e: OSError):
        logger.error("An error occurred while obtaining the files to process",
                     path=e.filename, reason=e.strerror)

    files = []
    for root, dirs, names in os.walk(base_dir, onerror=on_walk_error):
        dirs.sort()
        for name in sorted(names):
            path = os.path.join(root, name)
            if os.path.splitext(name)[1] == extension and os.path.isfile(path):
                files.append(path)
    return files


@contextmanager
def map_source(path: str):
    """Map ``path`` read-only; yields ``b""`` for an empty file"""
    with open(path, 'rb') as f:
        if os.fstat(f.fileno()).st_size == 0:
            yield b""
            return
        with mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ) as mapped:
            yield mapped


def generate_file(path: str, output: Optional[OutputManager] = None, force: bool = False) -> bool:
    """
    Generate the .h/.cpp pair for one source file.

    Returns False when the artifacts were up-to-date and nothing was written.
    Raises ScanError on malformed input and OSError on file-system failures.
    """
    output = output or get_output_manager()
    targets = output.targets_for(path)
    if BuildCache.check_timestamp_skip(targets.header_file, targets.source_out_file, path, force):
        logger.info("Up to date, skipping", path=path)
        return False

    with map_source(path) as source:
        tokens = scan(source)
        result = split(source, tokens, targets.base_name, targets.header_name)

    output.write(targets, result.declaration, result.definition)
    logger.debug("generated", path=path, guard=result.guard)
    return True


def _report_file(path: str):
    try:
        size = os.path.getsize(path)
    except OSError:
        logger.info(path)
    else:
        logger.info(f"{path} ({size} bytes)")


def _run_one(path: str, output: OutputManager, force: bool) -> bool:
    """Run generate_file, logging and absorbing per-file failures; True on success"""
    try:
        generate_file(path, output, force)
    except CppxError as e:
        logger.error(f"{path}: {e}")
        return False
    except OSError as e:
        logger.error(f"{path}: {e.strerror or e}", path=e.filename or path)
        return False
    return True


def generate_code(base_dir: str = '.', config: Optional[GeneratorConfig] = None) -> int:
    """
    Generate code for every source under ``base_dir`` and its subdirectories.

    Returns OK_RESULT, or ERROR_RESULT if the directory cannot be accessed
    or at least one file failed.
    """
    config = config or GeneratorConfig.from_env()

    if not os.path.isdir(base_dir):
        logger.error(f"Could not access directory: {base_dir}")
        return ERROR_RESULT

    logger.info(f"Processing directory: {base_dir}")
    files = find_source_files(base_dir, config.extension)
    if not files:
        logger.warning(f"No extended C++ files ({config.extension}) found in '{base_dir}' "
                       f"or in its subdirectories")
        return OK_RESULT

    logger.info(f"Found {len(files)} files to process:")
    for path in files:
        _report_file(path)

    output = configure_output_manager(config)
    if config.jobs > 1:
        with ThreadPoolExecutor(max_workers=config.jobs) as executor:
            futures = {executor.submit(_run_one, path, output, config.force): path for path in files}
            results = [future.result() for future in as_completed(futures)]
    else:
        results = [_run_one(path, output, config.force) for path in files]

    failed = results.count(False)
    if failed:
        logger.error(f"{failed} of {len(files)} files failed")
        return ERROR_RESULT
    return OK_RESULT
