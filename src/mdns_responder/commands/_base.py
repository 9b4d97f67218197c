"""Click base classes: commands that carry usage examples.

Examples are declared as ``(description, command line)`` pairs.  ``--help``
only mentions that they exist; ``--examples`` prints them and exits.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click

# (what it does, command line); the description may be None.
Example = tuple[str | None, str]


def render_examples(command_path: str, examples: Sequence[Example]) -> str:
    lines = [f"Examples for '{command_path}':"]
    for description, command_line in examples:
        lines.append("")
        if description:
            lines.append(f"  # {description}")
        lines.append(f"  $ {command_line}")
    return "\n".join(lines)


class _ExamplesMixin:
    """Accepts ``examples=`` and wires the eager ``--examples`` flag."""

    def __init__(self, *args: Any, examples: Sequence[Example] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples: tuple[Example, ...] = tuple(examples)
        if self.examples:
            self.params.append(  # type: ignore[attr-defined]
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._print_examples,
                    help="Show usage examples and exit.",
                )
            )

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value:
            click.echo(render_examples(ctx.command_path, self.examples))
            ctx.exit(0)

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        super().format_epilog(ctx, formatter)  # type: ignore[misc]
        if self.examples:
            formatter.write_paragraph()
            formatter.write_text(f"Run '{ctx.command_path} --examples' for usage examples.")


class ResponderCommand(_ExamplesMixin, click.Command):
    pass


class ResponderGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands default to :class:`ResponderCommand`."""

    command_class = ResponderCommand
