"""
JDK providers.

Each provider gives access to the JDKs of one source: a folder of JDKs, an
environment variable, the links jdkman maintains, or the JDKs jdkman installs
itself. Providers are created by name through `jdkman.providers.registry`.
"""

from .base import FoldersJdkProvider
from .env import (
    CurrentJdkProvider,
    JavaHomeJdkProvider,
    MultiHomeJdkProvider,
    PathJdkProvider,
)
from .identity import DefaultJdkProvider, LinkedJdkProvider
from .managed import ManagedJdkProvider
from .platform import (
    ExternalJdkProvider,
    LinuxJdkProvider,
    MiseJdkProvider,
    ScoopJdkProvider,
    SdkmanJdkProvider,
)

__all__ = [
    # Base classes
    "FoldersJdkProvider",
    # Environment
    "CurrentJdkProvider",
    "JavaHomeJdkProvider",
    "MultiHomeJdkProvider",
    "PathJdkProvider",
    # Links
    "DefaultJdkProvider",
    "LinkedJdkProvider",
    # Installed by jdkman
    "ManagedJdkProvider",
    # Other tools
    "ExternalJdkProvider",
    "LinuxJdkProvider",
    "MiseJdkProvider",
    "ScoopJdkProvider",
    "SdkmanJdkProvider",
]
