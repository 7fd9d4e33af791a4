"""Helper utilities for constructing throwaway Teams projects in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Mapping, Optional

APP_ID = "2f1b7c34-8a5d-4e0f-9b6a-1c2d3e4f5a6b"
OTHER_APP_ID = "9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d"
SCHEMA_1_9 = "https://developer.microsoft.com/en-us/json-schemas/teams/v1.9/MicrosoftTeams.schema.json"

BOT_SOURCE = """
import { BotDeclaration } from "express-msteams-host";
import * as debug from "debug";
import { ConversationState, MemoryStorage, TeamsActivityHandler } from "botbuilder";

// Initialize debug logging module
const log = debug("msteams");

/**
 * Implementation for {title}
 */
@BotDeclaration(
    "/api/messages",
    new MemoryStorage(),
    // eslint-disable-next-line no-undef
    {app_id},
    // eslint-disable-next-line no-undef
    process.env.MICROSOFT_APP_PASSWORD)
export class {class_name} extends TeamsActivityHandler {
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

CLIENT_SCRIPT = """
// Default entry point for client scripts
// Automatically generated
// Please avoid from modifying to much...
import * as ReactDOM from "react-dom";
import * as React from "react";

export const render = (type: any, element: HTMLElement) => {
    ReactDOM.render(React.createElement(type, {}), element);
};

// Automatically added for the myTab tab
export * from "./myTab/MyTab";
"""


def bot_source(class_name: str = "MyBot", app_id: str = "process.env.MICROSOFT_APP_ID", title: str = "My Bot") -> str:
    """Return the source of a generated bot carrying ``@BotDeclaration``."""
    return (
        textwrap.dedent(BOT_SOURCE)
        .lstrip("\n")
        .replace("{title}", title)
        .replace("{app_id}", app_id)
        .replace("{class_name}", class_name)
    )


class ProjectBuilder:
    """Utility for writing files into a throwaway generated Teams project."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_manifest(
        self,
        *,
        schema: Optional[str] = SCHEMA_1_9,
        manifest_version: Optional[str] = "1.9",
        compose_extensions: Optional[list[Any]] = None,
    ) -> None:
        document: dict[str, Any] = {}
        if schema is not None:
            document["$schema"] = schema
        if manifest_version is not None:
            document["manifestVersion"] = manifest_version
        document["name"] = {"short": "My App"}
        document["composeExtensions"] = compose_extensions if compose_extensions is not None else []
        self.write_json("src/manifest/manifest.json", document)

    def write_json(self, relative: str, document: Any) -> None:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")

    def write_bot(
        self,
        name: str = "myBot",
        class_name: str = "MyBot",
        app_id: str = "process.env.MICROSOFT_APP_ID",
    ) -> str:
        relative = f"src/app/{name}/{class_name}.ts"
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(bot_source(class_name, app_id), encoding="utf-8")
        return relative

    def write_client_script(self) -> None:
        self.write({"src/app/scripts/client.ts": CLIENT_SCRIPT})

    def standard_project(self, *, env: Optional[Mapping[str, str]] = None) -> None:
        """Write a manifest, client script, one bot and a ``.env`` file."""
        self.write_manifest()
        self.write_client_script()
        self.write_bot()
        values = {"MICROSOFT_APP_ID": APP_ID} if env is None else dict(env)
        self.write({".env": "".join(f"{key}={value}\n" for key, value in values.items())})

    def read(self, relative: str) -> str:
        return (self.root / relative).read_text(encoding="utf-8")

    def read_json(self, relative: str) -> Any:
        return json.loads(self.read(relative))

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["APP_ID", "OTHER_APP_ID", "ProjectBuilder", "SCHEMA_1_9", "bot_source"]
