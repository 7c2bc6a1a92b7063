"""Command-line entry point for qtcli.

Usage::

    qtcli new myapp                       # pick a project preset interactively
    qtcli new myapp --preset @projects/cpp/qwidget
    qtcli new-file mainwindow.h           # resolved by extension
    qtcli preset ls -a
    qtcli preset cat @types/cpp
    qtcli test prompt @projects/cpp/qwidget
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable

from qtcli import __version__
from qtcli.config import Settings
from qtcli.errors import (
    AbortedError,
    NotFoundError,
    PersistenceError,
    QtCliError,
    RenderError,
)
from qtcli.expression import ExpressionEvaluator
from qtcli.generator import Generator
from qtcli.library import BUILTIN_PREFIX, TemplateLibrary
from qtcli.manifests import TargetKind
from qtcli.presets import Preset, PresetStore
from qtcli.prompt.keys import KeyReader
from qtcli.prompt.widgets import confirm
from qtcli.resolver import PresetResolver
from qtcli.utils import (
    console,
    is_valid_dir_name,
    is_valid_file_name,
    print_error,
    print_success,
    print_warning,
    setup_logging,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 3
EXIT_RENDER = 4
EXIT_PERSISTENCE = 5
EXIT_ABORTED = 130


class App:
    """Everything a command needs, built once per invocation."""

    def __init__(
        self,
        settings: Settings,
        keys: KeyReader | None = None,
        verbose: bool = False,
    ) -> None:
        self.settings = settings
        self.keys = keys
        self.verbose = verbose
        self.evaluator = ExpressionEvaluator()
        self.library = TemplateLibrary(settings)
        self.store = PresetStore.open(settings.preset_file)
        self.resolver = PresetResolver(
            self.store, self.library, evaluator=self.evaluator, keys=keys
        )
        self.generator = Generator(self.library, evaluator=self.evaluator)

    def ask_yes_no(self, question: str) -> bool:
        result = confirm("confirm", question, default="n", keys=self.keys).run()
        if not result.done:
            raise AbortedError()
        return result.value_as_bool(False)

    def generate(self, preset: Preset, name: str, dry_run: bool) -> None:
        result = self.generator.render(preset, name, base_dir=Path.cwd(), dry_run=dry_run)
        if self.verbose or dry_run:
            result.print()
        if dry_run:
            print_warning(f"dry run, {len(result)} file(s) not written")


# ---------------------------------------------------------------------------
# new / new-file
# ---------------------------------------------------------------------------


def cmd_new(app: App, args: argparse.Namespace) -> int:
    name = args.name.strip()
    if not is_valid_dir_name(name):
        raise QtCliError(f"invalid project name, given = '{name}'")
    if (Path.cwd() / name).exists():
        raise QtCliError(f"directory already exists, given = '{name}'")

    preset = app.resolver.resolve(TargetKind.PROJECT, args.preset)
    app.generate(preset, name, args.dry_run)
    if not args.dry_run:
        print_success(f"Project '{name}' created")
    return EXIT_OK


def cmd_new_file(app: App, args: argparse.Namespace) -> int:
    name = (args.name or "").strip() or app.resolver.ask_file_name()
    if not is_valid_file_name(name):
        raise QtCliError(f"invalid file name, given = '{name}'")

    # File templates append their own extension to ``name``.
    stem, ext = os.path.splitext(name)
    known_type = app.library.has_file_type(ext)
    if known_type:
        name = stem

    if args.preset or not known_type:
        preset: Preset = app.resolver.resolve(TargetKind.FILE, args.preset)
    else:
        preset = app.resolver.resolve_by_extension(ext)

    app.generate(preset, name, args.dry_run)
    if not args.dry_run:
        print_success(f"File '{name}' created")
    return EXIT_OK


# ---------------------------------------------------------------------------
# preset
# ---------------------------------------------------------------------------


def _echo(text: str) -> None:
    console.print(text, markup=False, highlight=False)


def cmd_preset_ls(app: App, args: argparse.Namespace) -> int:
    if len(app.store) == 0:
        _echo("<no custom preset>")
    for item in app.store.items:
        _echo(f"{item.name} -> {BUILTIN_PREFIX}{item.template_dir}")

    if args.all:
        for builtin in app.library.all_builtins():
            _echo(f"{builtin.name} ({builtin.kind.value})")
    return EXIT_OK


def cmd_preset_cat(app: App, args: argparse.Namespace) -> int:
    name: str = args.name
    if name.startswith(BUILTIN_PREFIX):
        data = app.library.find_builtin_any(name[len(BUILTIN_PREFIX):]).to_preset_data()
    else:
        data = app.store.find_by_name(name)
    _echo(data.to_yaml().rstrip("\n"))
    return EXIT_OK


def cmd_preset_mv(app: App, args: argparse.Namespace) -> int:
    app.store.rename(args.old, args.new)
    app.store.save()
    print_success(f"Renamed '{args.old}' to '{args.new}'")
    return EXIT_OK


def cmd_preset_rm(app: App, args: argparse.Namespace) -> int:
    app.store.find_by_name(args.name)
    if not args.yes and not app.ask_yes_no(f"Remove preset '{args.name}'?"):
        return EXIT_OK
    app.store.remove(args.name)
    app.store.save()
    print_success(f"Removed '{args.name}'")
    return EXIT_OK


def cmd_preset_clear(app: App, args: argparse.Namespace) -> int:
    if len(app.store) == 0:
        _echo("<no custom preset>")
        return EXIT_OK
    if not args.yes and not app.ask_yes_no("Remove all presets?"):
        return EXIT_OK
    app.store.remove_all()
    app.store.save()
    print_success("Removed all presets")
    return EXIT_OK


# ---------------------------------------------------------------------------
# test
# ---------------------------------------------------------------------------


def _builtin_dir(name: str) -> str:
    return name[len(BUILTIN_PREFIX):] if name.startswith(BUILTIN_PREFIX) else name


def cmd_test_prompt(app: App, args: argparse.Namespace) -> int:
    builtin = app.library.find_builtin_any(_builtin_dir(args.name))
    options = app.resolver.run_questions(builtin.template_dir)
    _echo(builtin.to_preset_data(options).to_yaml().rstrip("\n"))
    return EXIT_OK


def cmd_test_default(app: App, args: argparse.Namespace) -> int:
    builtin = app.library.find_builtin_any(_builtin_dir(args.name))
    _echo(builtin.to_preset_data().to_yaml().rstrip("\n"))
    return EXIT_OK


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qtcli",
        description="Scaffold Qt projects and files from question-driven templates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  qtcli new myapp\n"
            "  qtcli new myapp --preset @projects/cpp/qwidget\n"
            "  qtcli new-file mainwindow.h\n"
            "  qtcli preset ls -a\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging and a table of the generated files",
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>")
    commands.required = True

    new = commands.add_parser("new", help="Create a new project")
    new.add_argument("name", help="Project directory to create")
    new.add_argument("--preset", "-p", default=None, help="User preset name, or @dir for a built-in")
    new.add_argument("--dry-run", action="store_true", help="Check and list the files without writing")
    new.set_defaults(handler=cmd_new)

    new_file = commands.add_parser("new-file", help="Create a new file")
    new_file.add_argument("name", nargs="?", default=None, help="File to create; asked for when omitted")
    new_file.add_argument("--preset", "-p", default=None, help="User preset name, or @dir for a built-in")
    new_file.add_argument("--dry-run", action="store_true", help="Check and list the files without writing")
    new_file.set_defaults(handler=cmd_new_file)

    preset = commands.add_parser("preset", help="Manage user presets")
    preset_commands = preset.add_subparsers(dest="preset_command", metavar="<action>")
    preset_commands.required = True

    ls = preset_commands.add_parser("ls", help="List user presets")
    ls.add_argument("--all", "-a", action="store_true", help="Also list built-in presets")
    ls.set_defaults(handler=cmd_preset_ls)

    cat = preset_commands.add_parser("cat", help="Print a preset")
    cat.add_argument("name", help="User preset name, or @dir for a built-in")
    cat.set_defaults(handler=cmd_preset_cat)

    mv = preset_commands.add_parser("mv", help="Rename a user preset")
    mv.add_argument("old")
    mv.add_argument("new")
    mv.set_defaults(handler=cmd_preset_mv)

    rm = preset_commands.add_parser("rm", help="Remove a user preset")
    rm.add_argument("name")
    rm.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    rm.set_defaults(handler=cmd_preset_rm)

    clear = preset_commands.add_parser("clear", help="Remove every user preset")
    clear.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    clear.set_defaults(handler=cmd_preset_clear)

    test = commands.add_parser("test", help="Inspect built-in templates")
    test_commands = test.add_subparsers(dest="test_command", metavar="<action>")
    test_commands.required = True

    test_prompt = test_commands.add_parser("prompt", help="Run the questions of a built-in")
    test_prompt.add_argument("name", help="@dir of a built-in template")
    test_prompt.set_defaults(handler=cmd_test_prompt)

    test_default = test_commands.add_parser("default", help="Print the default answers of a built-in")
    test_default.add_argument("name", help="@dir of a built-in template")
    test_default.set_defaults(handler=cmd_test_default)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def exit_code_for(exc: QtCliError) -> int:
    if isinstance(exc, AbortedError):
        return EXIT_ABORTED
    if isinstance(exc, NotFoundError):
        return EXIT_NOT_FOUND
    if isinstance(exc, RenderError):
        return EXIT_RENDER
    if isinstance(exc, PersistenceError):
        return EXIT_PERSISTENCE
    return EXIT_ERROR


def main(
    argv: list[str] | None = None,
    settings: Settings | None = None,
    keys: KeyReader | None = None,
) -> int:
    """Run one qtcli command and return its exit status.

    ``settings`` and ``keys`` default to the environment and the terminal.
    """
    args = build_parser().parse_args(argv)

    try:
        settings = settings or Settings.from_env()
    except ValueError as exc:
        print_error(f"invalid configuration: {exc}")
        return EXIT_ERROR

    setup_logging("DEBUG" if args.verbose else settings.log_level)
    handler: Callable[[App, argparse.Namespace], int] = args.handler

    try:
        app = App(settings, keys=keys, verbose=args.verbose)
        return handler(app, args)
    except AbortedError:
        print_warning("Aborted.")
        return EXIT_ABORTED
    except QtCliError as exc:
        logger.debug("command failed", exc_info=True)
        print_error(str(exc))
        return exit_code_for(exc)


if __name__ == "__main__":
    sys.exit(main())
