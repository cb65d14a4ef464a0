from .cache import BuildCache
from .output_manager import OutputManager, OutputTargets, get_output_manager, configure_output_manager

__all__ = [
    'BuildCache',
    'OutputManager',
    'OutputTargets',
    'get_output_manager',
    'configure_output_manager',
]
