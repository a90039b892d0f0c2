"""Interactive questions asked when the CLI runs in a terminal.

Each answer feeds ``merge_options``; flags given on the command line are
never asked about.
"""

from __future__ import annotations

from typing import Any

from rich.prompt import Confirm, Prompt

from fastify_starter.config import Database, Linter, Orm, project_name_problems
from fastify_starter.utils import console, print_error

DEFAULT_PROJECT_NAME = "my-fastify-app"

_CHOICE_QUESTIONS: dict[str, tuple[str, list[str]]] = {
    "database": ("Which database would you like to use?", [d.value for d in Database]),
    "orm": ("Which ORM would you like to use?", [o.value for o in Orm]),
    "linter": ("Which linter/formatter would you like to use?", [lint.value for lint in Linter]),
}

_CONFIRM_QUESTIONS: dict[str, str] = {
    "install_dependencies": "Install dependencies?",
    "init_git": "Initialize git repository?",
}


def ask_project_name(default: str = DEFAULT_PROJECT_NAME) -> str:
    """Ask until the answer is a usable project name."""
    while True:
        name = Prompt.ask("What is your project name?", default=default, console=console)
        problems = project_name_problems(name)
        if not problems:
            return name
        print_error(f"Invalid project name: {'; '.join(problems)}")


def ask_option(field: str, default: Any) -> Any:
    """Prompt callback for ``merge_options``."""
    if field in _CHOICE_QUESTIONS:
        question, choices = _CHOICE_QUESTIONS[field]
        return Prompt.ask(question, choices=choices, default=default, console=console)
    if field in _CONFIRM_QUESTIONS:
        return Confirm.ask(_CONFIRM_QUESTIONS[field], default=default, console=console)
    return default
