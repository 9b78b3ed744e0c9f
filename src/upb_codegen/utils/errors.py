"""Exception hierarchy shared across the code generation helper."""
from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Base class for all build related failures."""


class FatalBuildError(BuildError):
    """The build cannot continue; callers are expected to abort."""


class RecoverableBuildError(BuildError):
    """A reported failure the caller may react to (retry, regenerate, skip)."""


class UnsupportedPlatformError(FatalBuildError):
    pass


class VersionMismatchError(FatalBuildError):
    pass


class MissingEnvironmentError(FatalBuildError):
    pass


class ProtocExecutionError(FatalBuildError):
    pass


class CompilerExecutionError(FatalBuildError):
    pass


class ConfigFileNotFound(FatalBuildError):
    pass


class SchemaFileNotFound(FatalBuildError):
    pass


class SchemaValidationError(FatalBuildError):
    pass


class UnsupportedVersionError(FatalBuildError):
    pass


class InvalidConfigurationError(FatalBuildError):
    pass


class ProtocLaunchError(RecoverableBuildError):
    pass


class MissingGeneratedFileError(RecoverableBuildError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"expected generated file {path} does not exist")
        self.path = path
