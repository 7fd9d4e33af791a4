"""Pipeline orchestration for adding messaging extensions to a Teams project."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from .analyzers.host_locator import HostLocator
from .analyzers.tree_sitter import TypeScriptParser
from .augment import SourceAugmenter, insert_export_declaration
from .config import TeamsGenConfig, load_config
from .errors import GeneratorError, HostNotFoundError, InvalidVersionError, ManifestError, ResolutionError
from .identifiers import EMPTY_GUID, environment_reference, is_guid, load_environment, strip_quotes
from .logging import get_logger
from .manifest import ManifestGeneratorFactory
from .models import ComponentDescriptor, GeneratorOptions, HostClassReference, SourceAugmentationPlan
from .naming import fix_file_names, validate_component_title
from .stores import ChangeSet, ProjectOptionsStore

_EXTENSION_TEMPLATES = (
    "src/app/{messageExtensionName}/{messageExtensionClassName}.ts",
    "src/app/scripts/{messageExtensionName}/{messageExtensionClassName}Config.tsx",
    "src/app/web/{messageExtensionName}/config.html",
)
_TASK_MODULE_TEMPLATES = (
    "src/app/scripts/{messageExtensionName}/{messageExtensionClassName}Action.tsx",
    "src/app/web/{messageExtensionName}/action.html",
)
_UNIT_TEST_TEMPLATES = ("src/app/scripts/{messageExtensionName}/__tests__/{messageExtensionClassName}Config.spec.tsx",)

# Bot class staged for a new host when the project has none yet.
_NEW_BOT_SOURCE = """\
import { BotDeclaration } from "express-msteams-host";
import * as debug from "debug";
import { ConversationState, MemoryStorage, TeamsActivityHandler } from "botbuilder";

// Initialize debug logging module
const log = debug("msteams");

/**
 * Implementation for {bot_title}
 */
@BotDeclaration(
    "/api/messages",
    new MemoryStorage(),
    // eslint-disable-next-line no-undef
    process.env.{bot_id_env},
    // eslint-disable-next-line no-undef
    process.env.MICROSOFT_APP_PASSWORD)
export class {bot_class_name} extends TeamsActivityHandler {
    private readonly conversationState: ConversationState;

    /**
     * The constructor
     * @param conversationState
     */
    public constructor(conversationState: ConversationState) {
        super();
        this.conversationState = conversationState;
    }
}
"""


class TemplateRenderer(Protocol):
    """Renders template files into the project tree."""

    def render(self, files: Sequence[Tuple[str, str]], options: GeneratorOptions) -> List[Path]:
        """Render ``(template, destination)`` pairs and return the written paths."""


@dataclass
class MessageExtensionRequest:
    """Answers describing the messaging extension to add."""

    title: str
    description: Optional[str] = None
    host: str = "existing"
    bot_id: Optional[str] = None
    extension_type: str = "query"
    action_context: List[str] = field(default_factory=lambda: ["compose", "commandBox"])
    action_input_type: Optional[str] = None
    action_response_type: Optional[str] = None
    manifest_version: Optional[str] = None
    guard_rerun: bool = True


@dataclass
class ScaffoldOutcome:
    """Result of a scaffolding run."""

    options: GeneratorOptions
    paths: List[Path]
    diff: str
    dry_run: bool
    templates: List[Tuple[str, str]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class Orchestrator:
    """Coordinates manifest mutation and host augmentation for one invocation.

    Every write is staged first and committed only after all steps succeeded.
    """

    def __init__(
        self,
        factory: ManifestGeneratorFactory | None = None,
        augmenter: SourceAugmenter | None = None,
        renderer: TemplateRenderer | None = None,
        parser: TypeScriptParser | None = None,
    ) -> None:
        self.parser = parser or TypeScriptParser()
        self.factory = factory or ManifestGeneratorFactory()
        self.augmenter = augmenter or SourceAugmenter(self.parser)
        self.renderer = renderer
        self.logger = get_logger("orchestrator")

    def run_message_extension(
        self,
        path: str | Path,
        request: MessageExtensionRequest,
        *,
        dry_run: bool = False,
    ) -> ScaffoldOutcome:
        """Add a messaging extension described by ``request`` to the project at ``path``."""
        root = self._resolve_root(path)
        self.logger.info("Adding message extension %r to %s", request.title, root)
        config = load_config(root)
        store = ProjectOptionsStore(root / config.options_file)
        changes = ChangeSet(root)

        environ = load_environment(root, config.env_file)

        manifest = self._load_manifest(changes, config)
        manifest_version = self._select_manifest_version(request, store, manifest)
        options = self._build_options(root, config, store, request, manifest_version, environ)

        generator = self.factory.create_manifest_generator(manifest_version)
        generator.update_message_extension_manifest(manifest, options, environ)
        changes.stage_json(config.manifest_path, manifest)

        warnings: List[str] = []
        templates: List[Tuple[str, str]] = []
        # Externally hosted bots have no implementation in this project.
        if options.descriptor.host != "external":
            templates = self.templates_for(options)
            self._stage_client_exports(changes, config, options, warnings)
            warnings.extend(self._stage_host_augmentation(changes, config, options))

        store.append_unique("messageExtensions", options.descriptor.name)
        if store.get_str("manifestVersion") is None:
            store.set("manifestVersion", manifest_version)
        if store.dirty:
            changes.stage(config.options_file, store.dumps())

        if dry_run:
            self.logger.info("Dry run: %d file(s) would change", len(changes.paths))
            return ScaffoldOutcome(
                options=options,
                paths=[root / relative for relative in changes.paths],
                diff=changes.diff(),
                dry_run=True,
                templates=templates,
                warnings=warnings,
            )

        written: List[Path] = []
        if templates:
            if self.renderer is not None:
                written.extend(self.renderer.render(templates, options))
            else:
                for _, destination in templates:
                    self.logger.info("Template rendering skipped for %s (no renderer configured)", destination)
        written.extend(changes.commit())
        store.mark_clean()
        return ScaffoldOutcome(
            options=options,
            paths=written,
            diff="",
            dry_run=False,
            templates=templates,
            warnings=warnings,
        )

    def locate_host(self, path: str | Path, bot_id: str) -> HostClassReference:
        """Return the host class correlated with ``bot_id`` in the project at ``path``."""
        root = self._resolve_root(path)
        config = load_config(root)
        environ = load_environment(root, config.env_file)
        return self._locator(config, environ).locate(root, config.host.glob, bot_id)

    def templates_for(self, options: GeneratorOptions) -> List[Tuple[str, str]]:
        """Return ``(template, destination)`` pairs for the extension's own files."""
        templates = list(_EXTENSION_TEMPLATES)
        if options.uses_task_module:
            templates.extend(_TASK_MODULE_TEMPLATES)
        if options.unit_tests_enabled:
            templates.extend(_UNIT_TEST_TEMPLATES)
        values = options.template_values()
        return [(template, fix_file_names(template, values)) for template in templates]

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _resolve_root(path: str | Path) -> Path:
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Project path not found: {path}")
        if not root.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {path}")
        return root

    def _locator(self, config: TeamsGenConfig, environ: Dict[str, str]) -> HostLocator:
        return HostLocator(
            config.host.marker,
            config.host.argument_index,
            environ=environ,
            parser=self.parser,
        )

    def _load_manifest(self, changes: ChangeSet, config: TeamsGenConfig) -> Dict[str, Any]:
        try:
            manifest = changes.read_json(config.manifest_path)
        except FileNotFoundError as exc:
            raise ManifestError(f"Manifest not found at {config.manifest_path}") from exc
        except json.JSONDecodeError as exc:
            raise ManifestError(f"Manifest {config.manifest_path} is not valid JSON: {exc}") from exc
        if not isinstance(manifest, dict):
            raise ManifestError(f"Manifest {config.manifest_path} must contain a JSON object")
        if not self.factory.is_schema_recognized(manifest):
            raise InvalidVersionError(
                f"The manifest schema {manifest.get('$schema')!r} is not supported by this generator"
            )
        return manifest

    def _select_manifest_version(
        self,
        request: MessageExtensionRequest,
        store: ProjectOptionsStore,
        manifest: Dict[str, Any],
    ) -> str:
        tokens = {entry.manifest_version for entry in self.factory.versions}
        if request.manifest_version:
            if request.manifest_version in tokens:
                return request.manifest_version
            return self.factory.version_from_value(request.manifest_version)

        stored = store.get_str("manifestVersion")
        if stored:
            if stored not in tokens:
                raise InvalidVersionError(f"Invalid manifest version in {store.path.name}: {stored!r}")
            return stored

        declared = manifest.get("manifestVersion")
        if isinstance(declared, str) and declared:
            return self.factory.version_from_value(declared)

        default = self.factory.default_version()
        if default is None:
            raise InvalidVersionError("No manifest version given and no default version is configured")
        return default.manifest_version

    def _build_options(
        self,
        root: Path,
        config: TeamsGenConfig,
        store: ProjectOptionsStore,
        request: MessageExtensionRequest,
        manifest_version: str,
        environ: Dict[str, str],
    ) -> GeneratorOptions:
        problem = validate_component_title(request.title, root, host=request.host)
        if problem:
            raise GeneratorError(problem)

        descriptor = ComponentDescriptor.from_title(
            request.title,
            description=request.description,
            host=request.host,
        )
        options = GeneratorOptions(
            descriptor=descriptor,
            manifest_version=manifest_version,
            extension_type=request.extension_type,
            action_context=list(request.action_context),
            action_input_type=request.action_input_type,
            action_response_type=request.action_response_type,
            bot_id_env=store.get_str("botidEnv", "MICROSOFT_APP_ID") or "MICROSOFT_APP_ID",
            unit_tests_enabled=store.get_bool("unitTestsEnabled"),
            guard_rerun=request.guard_rerun,
        )

        if request.host == "external":
            bot_id = request.bot_id or ""
            if not is_guid(bot_id):
                raise ResolutionError(bot_id, "an externally hosted bot needs its Microsoft App ID as a GUID")
            descriptor.identifier = bot_id
        elif request.host == "new":
            bot_id = request.bot_id or EMPTY_GUID
            if not is_guid(bot_id):
                raise ResolutionError(bot_id, "a new bot needs its Microsoft App ID as a GUID")
            options.attach_new_bot(bot_id)
        else:
            if not request.bot_id:
                raise GeneratorError("An existing host requires the bot id to attach the message extension to")
            host = self._locator(config, environ).locate(root, config.host.glob, request.bot_id)
            descriptor.identifier = _manifest_bot_id(request.bot_id)
            options.host = host
            options.bot_name = host.component_name
            options.bot_class_name = host.class_name
        return options

    def _stage_client_exports(
        self,
        changes: ChangeSet,
        config: TeamsGenConfig,
        options: GeneratorOptions,
        warnings: List[str],
    ) -> None:
        name = options.descriptor.name
        class_name = options.descriptor.class_name
        exports = [(f"./{name}/{class_name}Config", f"Automatically added for the {name} message extension")]
        if options.uses_task_module:
            exports.append(
                (f"./{name}/{class_name}Action", f"Automatically added for the {name} message extension action")
            )
        if not changes.exists(config.client_script):
            message = f"{config.client_script} not found; export {', '.join(m for m, _ in exports)} manually"
            self.logger.warning(message)
            warnings.append(message)
            return
        text = changes.read(config.client_script)
        for module, comment in exports:
            text = insert_export_declaration(text, module, comment, parser=self.parser)
        changes.stage(config.client_script, text)

    def _stage_host_augmentation(
        self,
        changes: ChangeSet,
        config: TeamsGenConfig,
        options: GeneratorOptions,
    ) -> List[str]:
        host = options.host
        if host is None:
            raise HostNotFoundError("No host class was selected for the message extension")
        if not changes.exists(host.path):
            if options.descriptor.host != "new":
                raise HostNotFoundError(f"Host source file {host.path} does not exist")
            self.logger.info("Creating bot %s at %s", host.class_name, host.path)
            changes.stage(host.path, self._new_bot_source(options))
        plan = SourceAugmentationPlan.for_message_extension(
            options.descriptor,
            host_marker=config.host.marker,
            host_class=host.class_name,
            extension_marker=config.extension.marker,
            extension_module=config.extension.module,
            guard_rerun=options.guard_rerun,
        )
        result = self.augmenter.augment(changes.read(host.path), plan, path=host.path)
        if result.changed:
            changes.stage(host.path, result.text)
        return result.warnings

    @staticmethod
    def _new_bot_source(options: GeneratorOptions) -> str:
        return (
            _NEW_BOT_SOURCE.replace("{bot_title}", options.bot_title or "")
            .replace("{bot_id_env}", options.bot_id_env)
            .replace("{bot_class_name}", options.bot_class_name or "")
        )


def _manifest_bot_id(token: str) -> str:
    """Return ``token`` the way the manifest refers to a bot: a GUID or ``{{NAME}}``."""
    literal = strip_quotes(token.strip())
    if is_guid(literal):
        return literal
    name = environment_reference(literal)
    if name is None:
        return token
    return f"{{{{{name}}}}}"


__all__ = [
    "MessageExtensionRequest",
    "Orchestrator",
    "ScaffoldOutcome",
    "TemplateRenderer",
]
