"""Rules CLI commands — validate, tag, evaluate."""

import json
from pathlib import Path
from typing import IO

import click
import yaml

from tagthem.config import Settings
from tagthem.dsl import EvaluationError, LexerError, ParseError
from tagthem.rules import RuleEngine, RulesConfig, build_engine, load_rules_config
from tagthem.tagger import ExtractorError

_CONFIG_ERRORS = (LexerError, ParseError, ValueError, yaml.YAMLError)
_RUN_ERRORS = (ExtractorError, EvaluationError, ValueError)


def _fail(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)
    raise SystemExit(1)


def _load(config_path: Path | None) -> tuple[RulesConfig, RuleEngine]:
    """Load the configuration and build the engine, exiting on error."""
    settings = Settings.from_env()
    config_path = config_path or settings.config_path
    if config_path is None:
        raise click.UsageError("No configuration given; use --config or TAGTHEM_CONFIG.")

    try:
        config = load_rules_config(config_path)
        case_sensitive = True if settings.case_sensitive else None
        engine = build_engine(config, case_sensitive=case_sensitive)
    except OSError as e:
        _fail(f"Cannot read configuration: {e}")
    except _CONFIG_ERRORS as e:
        _fail(f"Invalid configuration {config_path}: {e}")
    return config, engine


def _paths(given: tuple[str, ...], configured: list[str]) -> list[str]:
    return list(given) if given else configured


def _read_input(source: IO[str], text: bool) -> str:
    content = source.read()
    return content.rstrip("\n") if text else content


config_option = click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Rules/extractors YAML file. Defaults to TAGTHEM_CONFIG.",
)
include_option = click.option(
    "--include",
    "include_paths",
    multiple=True,
    help="Only tag fields under this path prefix (repeatable).",
)
exclude_option = click.option(
    "--exclude",
    "exclude_paths",
    multiple=True,
    help="Skip fields under this path prefix (repeatable).",
)
text_option = click.option(
    "--text",
    is_flag=True,
    default=False,
    help="Treat INPUT as raw text instead of a JSON document.",
)


@click.command("validate")
@click.argument(
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
def validate_cmd(config_path: Path):
    """Check that CONFIG_PATH loads and all its rules parse."""
    config, engine = _load(config_path)

    click.echo(f"Loaded {len(config.extractors)} extractor(s):")
    for definition in config.extractors:
        click.echo(f"  ✓ {definition.name} ({definition.type})")

    click.echo(f"\nLoaded {len(engine.rule_names)} rule(s):")
    for name in engine.rule_names:
        click.echo(f"  ✓ {name} ({len(engine.get_rule(name))} expressions)")

    click.echo(click.style("\nConfiguration is valid.", fg="green", bold=True))


@click.command("tag")
@config_option
@include_option
@exclude_option
@text_option
@click.argument("source", type=click.File("r"), default="-")
def tag_cmd(config_path, include_paths, exclude_paths, text, source):
    """Print the tags found in SOURCE (JSON document, or '-' for stdin)."""
    config, engine = _load(config_path)
    content = _read_input(source, text)

    try:
        if text:
            results = engine.tagger.tag_text(content)
            output = {name: result.to_dict() for name, result in results.items()}
        else:
            fields_info = engine.tagger.tag_json(
                content,
                _paths(include_paths, config.include_paths),
                _paths(exclude_paths, config.exclude_paths),
            )
            output = [field_info.to_dict() for field_info in fields_info]
    except _RUN_ERRORS as e:
        _fail(f"Tagging failed: {e}")

    click.echo(json.dumps(output, indent=2, default=str))


@click.command("evaluate")
@config_option
@include_option
@exclude_option
@text_option
@click.argument("source", type=click.File("r"), default="-")
def evaluate_cmd(config_path, include_paths, exclude_paths, text, source):
    """Print the rules matched by SOURCE (JSON document, or '-' for stdin)."""
    config, engine = _load(config_path)
    content = _read_input(source, text)

    try:
        if text:
            matches = engine.process_text(content)
        else:
            matches = engine.process_json(
                content,
                _paths(include_paths, config.include_paths),
                _paths(exclude_paths, config.exclude_paths),
            )
    except _RUN_ERRORS as e:
        _fail(f"Evaluation failed: {e}")

    click.echo(json.dumps(matches, indent=2))
