"""CLI entrypoints for teamsgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from rich.console import Console

from .errors import GeneratorError
from .logging import configure_logging
from .models import EXTENSION_TYPES, HOST_KINDS
from .orchestrator import MessageExtensionRequest, Orchestrator

_ACTION_CONTEXTS = ("compose", "commandBox", "message")
_ACTION_INPUTS = ("static", "adaptiveCard", "taskModule")
_ACTION_RESPONSES = ("message", "adaptiveCard")

error_console = Console(stderr=True)


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the Teams project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teamsgen",
        description="Add components to a generated Microsoft Teams app project.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    extension_parser = subparsers.add_parser(
        "message-extension",
        help="Add a messaging extension and wire it into its bot.",
    )
    _add_verbose_option(extension_parser, suppress_default=True)
    _add_path_argument(extension_parser)
    extension_parser.add_argument("--title", required=True, help="Title of the messaging extension.")
    extension_parser.add_argument("--description", help="Description shown for the command.")
    extension_parser.add_argument(
        "--host",
        choices=HOST_KINDS,
        default="existing",
        help="Bot hosting the extension: a new one (its class is created when missing), one in this project or an external one.",
    )
    extension_parser.add_argument(
        "--bot-id",
        help="Microsoft App ID of the hosting bot: a GUID, {{ENV_VAR}} or process.env.ENV_VAR.",
    )
    extension_parser.add_argument(
        "--type",
        dest="extension_type",
        choices=EXTENSION_TYPES,
        default="query",
        help="Kind of messaging extension command.",
    )
    extension_parser.add_argument(
        "--action-context",
        nargs="+",
        choices=_ACTION_CONTEXTS,
        help="Where an action command is available (action commands only).",
    )
    extension_parser.add_argument(
        "--action-input",
        choices=_ACTION_INPUTS,
        help="How an action command collects its input.",
    )
    extension_parser.add_argument(
        "--action-response",
        choices=_ACTION_RESPONSES,
        help="How an action command responds.",
    )
    extension_parser.add_argument(
        "--manifest-version",
        help="Manifest version token or value (defaults to the project's version).",
    )
    extension_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the changes as a diff without writing anything.",
    )
    extension_parser.add_argument(
        "--allow-duplicates",
        action="store_true",
        help="Insert the field and constructor statement even if the bot already declares them.",
    )

    locate_parser = subparsers.add_parser(
        "locate-host",
        help="Show the bot class a bot id resolves to.",
    )
    _add_verbose_option(locate_parser, suppress_default=True)
    _add_path_argument(locate_parser)
    locate_parser.add_argument("--bot-id", required=True, help="Bot id to look up.")

    versions_parser = subparsers.add_parser(
        "manifest-versions",
        help="List the supported manifest versions.",
    )
    _add_verbose_option(versions_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for teamsgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    orchestrator = Orchestrator()

    if args.command == "message-extension":
        request = MessageExtensionRequest(
            title=args.title,
            description=args.description,
            host=args.host,
            bot_id=args.bot_id,
            extension_type=args.extension_type,
            action_input_type=args.action_input,
            action_response_type=args.action_response,
            manifest_version=args.manifest_version,
            guard_rerun=not args.allow_duplicates,
        )
        if args.action_context:
            request.action_context = list(args.action_context)
        try:
            outcome = orchestrator.run_message_extension(args.path, request, dry_run=bool(args.dry_run))
        except (GeneratorError, OSError, ValueError) as exc:
            _fail(parser, f"teamsgen message-extension failed: {exc}")
        for warning in outcome.warnings:
            print(f"warning: {warning}")
        if outcome.dry_run:
            print("Project changes (dry-run):")
            print(outcome.diff or "(no diff)")
        else:
            for path in outcome.paths:
                print(f"Updated {_relativize(path)}")
            print(f"Message extension {outcome.options.descriptor.class_name} added")
    elif args.command == "locate-host":
        try:
            host = orchestrator.locate_host(args.path, args.bot_id)
        except (GeneratorError, OSError) as exc:
            _fail(parser, f"teamsgen locate-host failed: {exc}")
        print(f"{host.class_name} ({host.path}) bot id {host.correlation_key}")
    elif args.command == "manifest-versions":
        for entry in orchestrator.factory.visible_versions():
            suffix = " (default)" if entry.default else ""
            print(f"{entry.manifest_version}\t{entry.manifest_value}{suffix}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _fail(parser: argparse.ArgumentParser, message: str) -> NoReturn:
    error_console.print(message, style="red", markup=False, highlight=False, soft_wrap=True)
    error_console.print("Run with --verbose for more details.", markup=False, highlight=False, soft_wrap=True)
    parser.exit(1)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
