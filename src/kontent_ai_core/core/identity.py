"""
SDK and source identity for the X-KC-SDKID / X-KC-SOURCE tracking headers.

X-KC-SDKID:  "{repository_host};{sdk_name};{sdk_version}"
X-KC-SOURCE: "{source_name};{source_version}"

Identity is computed explicitly and injected into the pipeline when it is
built; nothing here keeps process-wide lazy state except the memoised
header strings, which are pure functions of their inputs.
"""

import logging
import sys
from dataclasses import dataclass
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, packages_distributions, version
from pathlib import Path
from types import ModuleType
from typing import List, MutableMapping, Optional

from .headers import SDK_TRACKING_HEADER, SOURCE_TRACKING_HEADER

logger = logging.getLogger(__name__)

CORE_DISTRIBUTION = "kontent-ai-core"
DEFAULT_REPOSITORY_HOST = "pypi.org"
SOURCE_TRACKING_ATTRIBUTE = "__source_tracking__"


def _distribution_version(distribution: str, default: str) -> str:
    try:
        return version(distribution)
    except PackageNotFoundError:
        return default


@dataclass(frozen=True)
class SdkIdentity:
    """
    Name and version of the SDK issuing requests.

    Examples:
        >>> SdkIdentity("kontent-ai-delivery", "2.1.0").to_tracking_string()
        'pypi.org;kontent-ai-delivery;2.1.0'
        >>> SdkIdentity.core().name
        'kontent-ai-core'
    """
    name: str
    version: str

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("SDK name must not be empty")
        if not self.version or not self.version.strip():
            raise ValueError("SDK version must not be empty")

    def to_tracking_string(self, repository_host: str = DEFAULT_REPOSITORY_HOST) -> str:
        return f"{repository_host};{self.name};{self.version}"

    @classmethod
    def core(cls) -> "SdkIdentity":
        """Identity of this core package, from installed metadata (1.0.0 if unknown)."""
        return cls(CORE_DISTRIBUTION, _distribution_version(CORE_DISTRIBUTION, "1.0.0"))

    @classmethod
    def from_distribution(cls, distribution: str) -> "SdkIdentity":
        """Identity of an installed SDK distribution (0.0.0 if not installed)."""
        return cls(distribution, _distribution_version(distribution, "0.0.0"))


@lru_cache(maxsize=64)
def compute_sdk_tracking_header(
    identity: SdkIdentity,
    repository_host: str = DEFAULT_REPOSITORY_HOST
) -> str:
    """X-KC-SDKID value, memoised per (identity, host)."""
    return identity.to_tracking_string(repository_host)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SOURCE TRACKING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class SourceTracking:
    """
    Source declaration placed on the entry program.

    A tool built on top of an SDK declares itself in its main module:

        >>> __source_tracking__ = SourceTracking("my-migration-tool", 1, 4, 0)
        >>> __source_tracking__ = SourceTracking("my-tool", 2, 0, 0, prerelease="beta.1")
        >>> __source_tracking__ = SourceTracking.from_package("my-tool")

    from_package() reads the version from installed metadata when the
    header is computed; explicit versions are used verbatim.
    """
    name: Optional[str]
    major: int = 0
    minor: int = 0
    patch: int = 0
    prerelease: Optional[str] = None
    load_from_package: bool = False

    @classmethod
    def from_package(cls, name: Optional[str] = None) -> "SourceTracking":
        return cls(name=name, load_from_package=True)

    def to_header(self, fallback_name: Optional[str] = None) -> Optional[str]:
        name = self.name or fallback_name
        if not name:
            return None

        if self.load_from_package:
            return f"{name};{_distribution_version(name, '0.0.0')}"

        suffix = f"-{self.prerelease}" if self.prerelease else ""
        return f"{name};{self.major}.{self.minor}.{self.patch}{suffix}"


def _entry_package(main_module: Optional[ModuleType]) -> Optional[str]:
    if main_module is None:
        return None

    package = getattr(main_module, "__package__", None)
    if not package:
        spec = getattr(main_module, "__spec__", None)
        package = getattr(spec, "name", None)
    if not package:
        return None
    return package.split(".")[0]


def _entry_distribution(package: Optional[str]) -> Optional[str]:
    if not package:
        return None
    distributions = packages_distributions().get(package)
    if not distributions:
        return None
    return distributions[0]


def compute_source_tracking_header(
    main_module: Optional[ModuleType] = None,
    argv: Optional[List[str]] = None,
) -> Optional[str]:
    """
    X-KC-SOURCE value for the running program.

    Resolution order:
    1. SourceTracking declared as __source_tracking__ on the main module
    2. Installed distribution that owns the main module's package
    3. Process name with version "unknown"
    4. None

    Never raises.
    """
    if main_module is None:
        main_module = sys.modules.get("__main__")
    if argv is None:
        argv = sys.argv

    try:
        package = _entry_package(main_module)

        declaration = getattr(main_module, SOURCE_TRACKING_ATTRIBUTE, None)
        if isinstance(declaration, SourceTracking):
            header = declaration.to_header(fallback_name=_entry_distribution(package) or package)
            if header:
                return header

        distribution = _entry_distribution(package)
        if distribution:
            return f"{distribution};{_distribution_version(distribution, '0.0.0')}"
    except Exception as e:
        logger.debug("Failed to resolve source tracking from entry program: %s", e)

    try:
        if argv and argv[0]:
            process_name = Path(argv[0]).stem
            if process_name and process_name != "-c":
                return f"{process_name};unknown"
    except Exception as e:
        logger.debug("Failed to resolve process name for source tracking: %s", e)

    return None


@dataclass(frozen=True)
class TrackingHeaders:
    """Tracking header values resolved once per built pipeline."""
    sdk_header: str
    source_header: Optional[str] = None

    @classmethod
    def resolve(
        cls,
        identity: Optional[SdkIdentity] = None,
        repository_host: str = DEFAULT_REPOSITORY_HOST,
    ) -> "TrackingHeaders":
        identity = identity or SdkIdentity.core()
        return cls(
            sdk_header=compute_sdk_tracking_header(identity, repository_host),
            source_header=compute_source_tracking_header(),
        )

    def apply(self, headers: MutableMapping[str, str]) -> None:
        """Set (not append) the tracking headers on an outgoing request."""
        headers[SDK_TRACKING_HEADER] = self.sdk_header
        if self.source_header:
            headers[SOURCE_TRACKING_HEADER] = self.source_header
