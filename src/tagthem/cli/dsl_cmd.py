"""DSL CLI commands — parse."""

import click

from tagthem.config import Settings
from tagthem.dsl import LexerError, ParseError, Parser, pretty_format


@click.command("parse")
@click.argument("expression")
@click.option(
    "--case-sensitive",
    is_flag=True,
    default=False,
    help="Only accept lowercase and/or/not keywords.",
)
def parse_cmd(expression: str, case_sensitive: bool):
    """Parse EXPRESSION and print its tree."""
    case_sensitive = case_sensitive or Settings.from_env().case_sensitive

    parser = Parser(expression, case_sensitive=case_sensitive)
    try:
        ast = parser.parse()
    except (LexerError, ParseError) as e:
        click.echo(click.style(f"Invalid expression: {e}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(pretty_format(ast), nl=False)
    click.echo(f"\nTags: {', '.join(parser.tags)}")
    if parser.field_paths:
        click.echo(f"Field paths: {', '.join(parser.field_paths)}")
