"""Core data models shared across teamsgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .naming import (
    MESSAGE_EXTENSION_SUFFIX,
    camel_case,
    class_name_for,
    host_source_path,
    normalize_component_name,
)

HOST_KINDS = ("new", "existing", "external")
EXTENSION_TYPES = ("query", "action")


@dataclass
class ComponentDescriptor:
    """One generated capability, e.g. a messaging extension."""

    name: str
    title: str
    description: str
    class_name: str
    host: str
    identifier: str

    @classmethod
    def from_title(
        cls,
        title: str,
        *,
        description: str | None = None,
        host: str = "new",
        identifier: str = "",
        suffix: str = MESSAGE_EXTENSION_SUFFIX,
    ) -> "ComponentDescriptor":
        if host not in HOST_KINDS:
            raise ValueError(f"Unknown host kind {host!r}; expected one of {', '.join(HOST_KINDS)}")
        name = normalize_component_name(title, suffix)
        return cls(
            name=name,
            title=title,
            description=description or f"Description of {title}",
            class_name=class_name_for(name),
            host=host,
            identifier=identifier,
        )

    @property
    def source_path(self) -> str:
        return host_source_path(self.name, self.class_name)


@dataclass(frozen=True)
class ManifestVersionEntry:
    """Row of the static manifest version table."""

    manifest_version: str
    schema_url: str
    manifest_value: str
    default: bool = False
    hide: bool = False


@dataclass(frozen=True)
class ImportEdit:
    """Import declaration the host file must end up with."""

    module: str
    default_binding: Optional[str] = None
    named_bindings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FieldEdit:
    """Decorated class field inserted as the second member of the host class."""

    name: str
    type_name: str
    marker: str
    marker_argument: str
    visibility: str = "private"
    docs: Tuple[str, ...] = ()
    lint_comment: Optional[str] = "// tslint:disable-next-line: variable-name"


@dataclass(frozen=True)
class StatementEdit:
    """Statement prepended to the host constructor body."""

    text: str
    comment: Optional[str] = None


@dataclass
class SourceAugmentationPlan:
    """Ordered structural edits applied to one host source file.

    ``guard_rerun`` skips the default import, field and constructor statement
    when the host class already declares the field. With it switched off the
    legacy behaviour applies and those edits are inserted again; named import
    bindings are deduplicated either way.
    """

    host_marker: str
    host_class: Optional[str] = None
    imports: List[ImportEdit] = field(default_factory=list)
    field_edit: Optional[FieldEdit] = None
    statement: Optional[StatementEdit] = None
    guard_rerun: bool = True

    @classmethod
    def for_message_extension(
        cls,
        descriptor: ComponentDescriptor,
        *,
        host_marker: str = "BotDeclaration",
        host_class: Optional[str] = None,
        extension_marker: str = "MessageExtensionDeclaration",
        extension_module: str = "express-msteams-host",
        guard_rerun: bool = True,
    ) -> "SourceAugmentationPlan":
        """Build the plan wiring a message extension into its host bot."""
        field_name = f"_{descriptor.name}"
        return cls(
            host_marker=host_marker,
            host_class=host_class,
            imports=[
                ImportEdit(module=extension_module, named_bindings=(extension_marker,)),
                ImportEdit(
                    module=f"../{descriptor.name}/{descriptor.class_name}",
                    default_binding=descriptor.class_name,
                ),
            ],
            field_edit=FieldEdit(
                name=field_name,
                type_name=descriptor.class_name,
                marker=extension_marker,
                marker_argument=descriptor.name,
                docs=(f"Local property for {descriptor.class_name}",),
            ),
            statement=StatementEdit(
                text=f"this.{field_name} = new {descriptor.class_name}();",
                comment=f"Message extension {descriptor.class_name}",
            ),
            guard_rerun=guard_rerun,
        )


@dataclass(frozen=True)
class HostClassReference:
    """The single class carrying the host marker for a correlation key."""

    path: str
    class_name: str
    correlation_key: str
    component_name: str


@dataclass
class AugmentationResult:
    """New source text plus the non-fatal problems met while producing it."""

    text: str
    warnings: List[str] = field(default_factory=list)
    changed: bool = True


@dataclass
class GeneratorOptions:
    """Explicit settings for one generator invocation."""

    descriptor: ComponentDescriptor
    manifest_version: str
    extension_type: str = "query"
    action_context: List[str] = field(default_factory=lambda: ["compose", "commandBox"])
    action_input_type: Optional[str] = None
    action_response_type: Optional[str] = None
    bot_id_env: str = "MICROSOFT_APP_ID"
    unit_tests_enabled: bool = False
    host: Optional[HostClassReference] = None
    bot_name: Optional[str] = None
    bot_class_name: Optional[str] = None
    bot_title: Optional[str] = None
    guard_rerun: bool = True

    def __post_init__(self) -> None:
        if self.extension_type not in EXTENSION_TYPES:
            raise ValueError(
                f"Unknown messaging extension type {self.extension_type!r}; "
                f"expected one of {', '.join(EXTENSION_TYPES)}"
            )

    @property
    def uses_task_module(self) -> bool:
        return self.extension_type == "action" and self.action_input_type == "taskModule"

    def attach_new_bot(self, bot_id_literal: str) -> None:
        """Derive the bot that will host the extension when no bot exists yet."""
        self.bot_title = f"{self.descriptor.title} Bot"
        self.bot_name = camel_case(self.bot_title)
        self.bot_class_name = class_name_for(self.bot_name)
        self.descriptor.identifier = f"{{{{{self.bot_id_env}}}}}"
        self.host = HostClassReference(
            path=host_source_path(self.bot_name, self.bot_class_name),
            class_name=self.bot_class_name,
            correlation_key=bot_id_literal,
            component_name=self.bot_name,
        )

    def template_values(self) -> dict[str, str]:
        values = {
            "messageExtensionName": self.descriptor.name,
            "messageExtensionClassName": self.descriptor.class_name,
        }
        if self.bot_name and self.bot_class_name:
            values["botName"] = self.bot_name
            values["botClassName"] = self.bot_class_name
        return values


__all__ = [
    "AugmentationResult",
    "ComponentDescriptor",
    "EXTENSION_TYPES",
    "FieldEdit",
    "GeneratorOptions",
    "HOST_KINDS",
    "HostClassReference",
    "ImportEdit",
    "ManifestVersionEntry",
    "SourceAugmentationPlan",
    "StatementEdit",
]
