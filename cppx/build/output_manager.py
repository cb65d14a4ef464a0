import os
from dataclasses import dataclass

from ..config import GeneratorConfig
from ..logger import logger


@dataclass(frozen=True)
class OutputTargets:
    """Paths of the two artifacts generated from one source"""
    source_file: str
    header_file: str
    source_out_file: str

    @property
    def base_name(self) -> str:
        return os.path.splitext(os.path.basename(self.source_file))[0]

    @property
    def header_name(self) -> str:
        """Name used by the definition artifact to include its header"""
        return os.path.basename(self.header_file)


class OutputManager:
    """
    Computes and writes the artifact pair for each source file.

    Targets are remembered per source so a batch can report what it wrote.
    """

    def __init__(self, config: GeneratorConfig = None):
        self.config = config or GeneratorConfig()
        # Key: source file path, value: OutputTargets
        self._targets = {}

    def targets_for(self, source_file: str) -> OutputTargets:
        """
        Get or compute the artifact paths for a source file.

        The artifacts are siblings of the source with its extension
        replaced by the header and source extensions.
        """
        if source_file not in self._targets:
            stem = os.path.splitext(source_file)[0]
            self._targets[source_file] = OutputTargets(
                source_file,
                stem + self.config.header_extension,
                stem + self.config.source_extension,
            )
        return self._targets[source_file]

    def write(self, targets: OutputTargets, declaration: str, definition: str):
        """Write both artifacts (UTF-8, surrogateescape, newlines preserved)"""
        for path, text in ((targets.header_file, declaration), (targets.source_out_file, definition)):
            with open(path, 'w', encoding='utf-8', errors='surrogateescape', newline='') as f:
                f.write(text)
            logger.debug("wrote artifact", path=path, size=len(text))

    def clear_all(self):
        """Forget all targets (for testing/reset)."""
        self._targets.clear()


# Global singleton instance
_output_manager = OutputManager()


def get_output_manager():
    """Get the global OutputManager singleton."""
    return _output_manager


def configure_output_manager(config: GeneratorConfig):
    """Point the global OutputManager at a new configuration."""
    _output_manager.config = config
    _output_manager.clear_all()
    return _output_manager
