"""Interactive single-choice prompt built on Typer."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping, Sequence

import click
import typer

from iosctl.core.errors import PromptFailedError

CI_ENV_VAR_NAME = "CI"


def ci_enabled(env: Mapping[str, str] | None = None) -> bool:
    value = (env if env is not None else os.environ).get(CI_ENV_VAR_NAME, "")
    return value.strip().lower() not in ("", "0", "false")


class TerminalPrompt:
    """Numbered list prompt; refuses to run without a usable terminal."""

    def __init__(self, *, env: Mapping[str, str] | None = None) -> None:
        self._env = env

    def choose(self, title: str, items: Sequence[object], item_label: str) -> int:
        if not items:
            raise PromptFailedError(f"Nothing to choose from for {item_label}")
        if ci_enabled(self._env):
            raise PromptFailedError(
                f"Multiple {item_label}s found in CI mode. Pass a target hint to choose one."
            )
        if not sys.stdin.isatty():
            raise PromptFailedError(
                f"Multiple {item_label}s found in non-interactive mode. Pass a target hint to choose one."
            )

        typer.echo(f"{title}:")
        for i, item in enumerate(items, start=1):
            typer.echo(f"  [{i}] {item}")
        try:
            selected = typer.prompt(
                item_label.capitalize(),
                type=click.IntRange(1, len(items)),
            )
        except (click.exceptions.Abort, EOFError) as exc:
            raise PromptFailedError(f"Failed to prompt for iOS {item_label}: input aborted") from exc
        return int(selected) - 1
