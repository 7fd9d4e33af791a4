"""Teams app manifest versions and the generators that edit them."""

from .generators import BaseManifestGenerator
from .versions import SUPPORTED_MANIFEST_VERSIONS, ManifestGeneratorFactory

__all__ = [
    "BaseManifestGenerator",
    "ManifestGeneratorFactory",
    "SUPPORTED_MANIFEST_VERSIONS",
]
