"""tagthem CLI entry point."""

import click

from tagthem.config import Settings, configure_logging


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Logging level (DEBUG, INFO, WARNING, ...). Defaults to TAGTHEM_LOG_LEVEL.",
)
def cli(log_level: str | None):
    """tagthem — tag nested data and evaluate tag rules."""
    configure_logging(log_level or Settings.from_env().log_level)


# Register subcommands
from tagthem.cli.dsl_cmd import parse_cmd  # noqa: E402
from tagthem.cli.rules_cmd import evaluate_cmd, tag_cmd, validate_cmd  # noqa: E402

cli.add_command(parse_cmd)
cli.add_command(validate_cmd)
cli.add_command(tag_cmd)
cli.add_command(evaluate_cmd)
