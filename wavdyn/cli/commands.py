"""Text command surface for the console view."""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Callable

from wavdyn.errors import BadArguments, CommandError, UnknownCommand
from wavdyn.runtime.session import Session

HELP_TEXT = (
    "Available commands: `tasks` (or `list`) | `kill <ID>` | `clear` | `quit` (or `exit`)"
)

_TASK_ID = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True)
class CommandOutcome:
    ok: bool
    message: str = ""
    quit: bool = False


def _cmd_tasks(session: Session, args: list[str]) -> CommandOutcome:
    lines = ["Current task list:"]
    for task in session.pool.registry.snapshot():
        lines.append(f"ID: {task.id}, Name: {task.name}, State: {task.state.describe()}")
    text = "\n".join(lines)
    session.logger.info(text)
    return CommandOutcome(True, text)


def _cmd_kill(session: Session, args: list[str]) -> CommandOutcome:
    if len(args) != 1:
        raise BadArguments("usage: kill <task_id>")
    if not _TASK_ID.fullmatch(args[0]):
        raise BadArguments("'kill <id>' requires a numeric id.")
    task_id = int(args[0])
    session.pool.request_kill(task_id)
    return CommandOutcome(True, f"Kill requested for task {task_id}.")


def _cmd_clear(session: Session, args: list[str]) -> CommandOutcome:
    session.store.clear()
    session.logger.info("Console log cleared.")
    return CommandOutcome(True, "Console log cleared.")


def _cmd_quit(session: Session, args: list[str]) -> CommandOutcome:
    session.pool.shutdown()
    session.error_msg = "Shutdown signal sent to the worker pool."
    return CommandOutcome(True, session.error_msg, quit=True)


COMMANDS: dict[str, Callable[[Session, list[str]], CommandOutcome]] = {
    "tasks": _cmd_tasks,
    "list": _cmd_tasks,
    "kill": _cmd_kill,
    "clear": _cmd_clear,
    "quit": _cmd_quit,
    "exit": _cmd_quit,
}


def execute_command(session: Session, line: str) -> CommandOutcome:
    """
    Run one console command line against a session.

    The verb is case-insensitive. Unknown verbs and bad arguments are
    reported in the outcome (and in session.error_msg), never raised.
    """
    session.logger.command("Executed: %s", line)
    session.error_msg = None
    parts = line.split()
    if not parts:
        return CommandOutcome(True)
    verb, args = parts[0].lower(), parts[1:]
    try:
        handler = COMMANDS.get(verb)
        if handler is None:
            raise UnknownCommand(parts[0])
        return handler(session, args)
    except CommandError as exc:
        session.error_msg = f"Command error: {exc}"
        return CommandOutcome(False, session.error_msg)
