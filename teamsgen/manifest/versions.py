"""Manifest version table and dispatch to version specific generators."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Type

from ..errors import InvalidVersionError
from ..models import ManifestVersionEntry
from .generators import (
    BaseManifestGenerator,
    ManifestGenerator18,
    ManifestGenerator19,
    ManifestGenerator110,
    ManifestGenerator111,
    ManifestGeneratorDevPreview,
)

_SCHEMA_BASE = "https://developer.microsoft.com/en-us/json-schemas/teams"

SUPPORTED_MANIFEST_VERSIONS: tuple[ManifestVersionEntry, ...] = (
    ManifestVersionEntry("v1_8", f"{_SCHEMA_BASE}/v1.8/MicrosoftTeams.schema.json", "1.8"),
    ManifestVersionEntry("v1_9", f"{_SCHEMA_BASE}/v1.9/MicrosoftTeams.schema.json", "1.9", default=True),
    ManifestVersionEntry("v1_10", f"{_SCHEMA_BASE}/v1.10/MicrosoftTeams.schema.json", "1.10"),
    ManifestVersionEntry("v1_11", f"{_SCHEMA_BASE}/v1.11/MicrosoftTeams.schema.json", "1.11"),
    ManifestVersionEntry(
        "devPreview",
        "https://raw.githubusercontent.com/OfficeDev/microsoft-teams-app-schema/preview/DevPreview/MicrosoftTeams.schema.json",
        "devPreview",
    ),
)

_BUILTIN_GENERATORS: Dict[str, Type[BaseManifestGenerator]] = {
    "v1_8": ManifestGenerator18,
    "v1_9": ManifestGenerator19,
    "v1_10": ManifestGenerator110,
    "v1_11": ManifestGenerator111,
    "devPreview": ManifestGeneratorDevPreview,
}


class ManifestGeneratorFactory:
    """Maps manifest version tokens to generator strategies.

    Adding a version takes one table entry and one generator class, passed to
    the constructor or to :meth:`register`.
    """

    def __init__(
        self,
        versions: Sequence[ManifestVersionEntry] = SUPPORTED_MANIFEST_VERSIONS,
        generators: Optional[Mapping[str, Type[BaseManifestGenerator]]] = None,
    ) -> None:
        self._versions: List[ManifestVersionEntry] = []
        self._generators: Dict[str, Type[BaseManifestGenerator]] = {}
        source = _BUILTIN_GENERATORS if generators is None else generators
        for entry in versions:
            generator_cls = source.get(entry.manifest_version)
            if generator_cls is None:
                raise ValueError(f"No manifest generator registered for {entry.manifest_version}")
            self.register(entry, generator_cls)

    @property
    def versions(self) -> List[ManifestVersionEntry]:
        return list(self._versions)

    def register(self, entry: ManifestVersionEntry, generator_cls: Type[BaseManifestGenerator]) -> None:
        if any(existing.manifest_version == entry.manifest_version for existing in self._versions):
            raise ValueError(f"Duplicate manifest version token: {entry.manifest_version}")
        if entry.default and any(existing.default for existing in self._versions):
            raise ValueError("Only one manifest version can be the default")
        self._versions.append(entry)
        self._generators[entry.manifest_version] = generator_cls

    def version_from_value(self, value: str) -> str:
        """Return the version token whose display value is exactly ``value``."""
        matches = [entry for entry in self._versions if entry.manifest_value == value]
        if len(matches) != 1:
            raise InvalidVersionError(f"Invalid manifest version: {value!r}")
        return matches[0].manifest_version

    def create_manifest_generator(self, manifest_version: str) -> BaseManifestGenerator:
        generator_cls = self._generators.get(manifest_version)
        if generator_cls is None:
            raise InvalidVersionError(f"Invalid manifest version: {manifest_version!r}")
        return generator_cls()

    def is_schema_recognized(self, manifest: Optional[Mapping[str, Any]]) -> bool:
        """Return True when the manifest's ``$schema`` is known or absent."""
        if not manifest:
            return True
        schema = manifest.get("$schema")
        if schema is None:
            return True
        return any(entry.schema_url == schema for entry in self._versions)

    def default_version(self) -> Optional[ManifestVersionEntry]:
        for entry in self._versions:
            if entry.default:
                return entry
        return None

    def visible_versions(self) -> List[ManifestVersionEntry]:
        return [entry for entry in self._versions if not entry.hide]


__all__ = ["ManifestGeneratorFactory", "SUPPORTED_MANIFEST_VERSIONS"]
