"""Version specific mutations of the Teams app manifest."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, MutableMapping, Optional

from ..errors import InvalidVersionError, ManifestError, ResolutionError
from ..identifiers import resolve_identifier
from ..logging import get_logger
from ..models import GeneratorOptions

logger = get_logger("manifest")

_ACTION_CONTEXTS = ("compose", "commandBox", "message")


class BaseManifestGenerator:
    """Registers a messaging extension command in a manifest document.

    Subclasses bind the behaviour to one manifest schema version.
    """

    manifest_version = ""
    supports_action_commands = False

    def update_message_extension_manifest(
        self,
        manifest: MutableMapping[str, Any],
        options: GeneratorOptions,
        environ: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, Any]:
        """Add the extension's command to ``manifest`` in place and return the command.

        The command joins the compose extension of the same bot, comparing bot
        ids after resolving environment references against ``environ``.
        """
        descriptor = options.descriptor
        extensions = manifest.setdefault("composeExtensions", [])
        if not isinstance(extensions, list):
            raise ManifestError("composeExtensions in the manifest must be a list")

        extension = self._find_extension(extensions, descriptor.identifier, environ)
        if extension is None:
            extension = {
                "botId": descriptor.identifier,
                "canUpdateConfiguration": True,
                "commands": [],
            }
            extensions.append(extension)
            logger.debug("Added composeExtension for bot %s", descriptor.identifier)

        commands = extension.setdefault("commands", [])
        if any(isinstance(c, dict) and c.get("id") == descriptor.name for c in commands):
            raise ManifestError(f"The manifest already declares a command with id {descriptor.name!r}")

        command = self._build_command(options)
        commands.append(command)
        logger.info("Registered %s command %s in the manifest", command["type"], descriptor.name)
        return command

    @staticmethod
    def _find_extension(
        extensions: List[Any], bot_id: str, environ: Optional[Mapping[str, str]] = None
    ) -> Dict[str, Any] | None:
        candidates = [extension for extension in extensions if isinstance(extension, dict)]
        for extension in candidates:
            if extension.get("botId") == bot_id:
                return extension
        wanted = _resolved_bot_id(bot_id, environ)
        if wanted is None:
            return None
        for extension in candidates:
            existing = extension.get("botId")
            if isinstance(existing, str) and _resolved_bot_id(existing, environ) == wanted:
                return extension
        return None

    def _build_command(self, options: GeneratorOptions) -> Dict[str, Any]:
        if options.extension_type == "action":
            if not self.supports_action_commands:
                raise InvalidVersionError(
                    f"Action based messaging extensions are not supported by manifest version {self.manifest_version}"
                )
            return self._action_command(options)
        return self._query_command(options)

    def _query_command(self, options: GeneratorOptions) -> Dict[str, Any]:
        descriptor = options.descriptor
        return {
            "id": descriptor.name,
            "title": descriptor.title,
            "description": descriptor.description,
            "initialRun": True,
            "type": "query",
            "parameters": [
                {
                    "name": "parameter",
                    "description": "Description of the parameter",
                    "title": "Parameter",
                }
            ],
        }

    def _action_command(self, options: GeneratorOptions) -> Dict[str, Any]:
        descriptor = options.descriptor
        context = [value for value in options.action_context if value in _ACTION_CONTEXTS]
        command: Dict[str, Any] = {
            "id": descriptor.name,
            "title": descriptor.title,
            "description": descriptor.description,
            "initialRun": True,
            "type": "action",
            "context": context or ["compose"],
            "fetchTask": options.action_input_type in {"adaptiveCard", "taskModule"},
        }
        if options.action_input_type == "static":
            command["parameters"] = [
                {
                    "name": "email",
                    "title": "E-mail",
                    "description": "Enter an e-mail address",
                    "inputType": "text",
                },
                {
                    "name": "includeImage",
                    "title": "Include image",
                    "description": "Include image in Hero Card",
                    "inputType": "toggle",
                },
            ]
        else:
            command["parameters"] = [
                {
                    "name": "parameter",
                    "description": "Description of the parameter",
                    "title": "Parameter",
                }
            ]
        return command


def _resolved_bot_id(token: str, environ: Optional[Mapping[str, str]]) -> str | None:
    try:
        return resolve_identifier(token, environ).lower()
    except ResolutionError:
        return None


class ManifestGenerator18(BaseManifestGenerator):
    manifest_version = "1.8"


class ManifestGenerator19(BaseManifestGenerator):
    manifest_version = "1.9"


class ManifestGenerator110(BaseManifestGenerator):
    manifest_version = "1.10"


class ManifestGenerator111(BaseManifestGenerator):
    manifest_version = "1.11"


class ManifestGeneratorDevPreview(BaseManifestGenerator):
    manifest_version = "devPreview"
    supports_action_commands = True


__all__ = [
    "BaseManifestGenerator",
    "ManifestGenerator18",
    "ManifestGenerator19",
    "ManifestGenerator110",
    "ManifestGenerator111",
    "ManifestGeneratorDevPreview",
]
