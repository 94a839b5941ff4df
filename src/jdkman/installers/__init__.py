"""
Installers that download JDKs from remote catalogs.
"""

from jdkman.installers.base import CatalogJdkInstaller
from jdkman.installers.foojay import FoojayJdkInstaller
from jdkman.installers.metadata import MetadataJdkInstaller
from jdkman.installers.registry import InstallerRegistry, default_installer_registry

__all__ = [
    "CatalogJdkInstaller",
    "FoojayJdkInstaller",
    "InstallerRegistry",
    "MetadataJdkInstaller",
    "default_installer_registry",
]
