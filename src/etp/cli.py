"""
Command-Line Interface for the template printer.

Usage:
    etp render TEMPLATE   - Render a template to printer bytes
    etp commands          - List commands available to templates
    etp models            - List supported printer models
"""

import json
import logging
import sys

import click

from .errors import EncodingError, EtpError, TemplateExecutionError
from .models import model_names
from .printer import Printer


def validate_model(ctx, param, value):
    """Validate a printer model identifier.

    Args:
        ctx: Click context
        param: Click parameter
        value: Model identifier, None or "" for baseline commands

    Returns:
        The identifier, or None for baseline commands

    Raises:
        click.BadParameter: If the model is not registered
    """
    if not value:
        return None
    if value not in model_names():
        raise click.BadParameter(
            f"Model '{value}' not supported. "
            f"Supported models: {', '.join(model_names())}"
        )
    return value


model_option = click.option(
    "--model",
    "-m",
    envvar="ETP_MODEL",
    callback=validate_model,
    help="Printer model (default: baseline commands only, env: ETP_MODEL)",
)


@click.group()
@click.option("--debug/--no-debug", default=False, help="Enable debug output")
@click.pass_context
def main(ctx, debug):
    """ESC/POS Template Printer CLI."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="[etp] %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("template", type=click.Path(exists=True, dir_okay=False))
@model_option
@click.option(
    "--data",
    "-d",
    type=click.File("r", encoding="utf-8"),
    help="JSON file with template data ('-' for stdin)",
)
@click.option(
    "--output",
    "-o",
    type=click.File("wb", lazy=True),
    default="-",
    help="Output file (default: stdout)",
)
@click.option(
    "--suppress-commands",
    is_flag=True,
    help="Leave out printer commands, render plain text only",
)
def render(template, model, data, output, suppress_commands):
    """Render TEMPLATE into ESC/POS bytes.

    Template data is read as JSON. Nothing is written if rendering fails.
    """
    with open(template, "rb") as f:
        source = f.read()

    values = None
    if data is not None:
        try:
            values = json.load(data)
        except json.JSONDecodeError as e:
            click.echo(f"Data error: invalid JSON: {e}", err=True)
            sys.exit(1)

    try:
        printer = Printer(model, source, suppress_commands=suppress_commands)
        printer.write_to(output, values)
    except EncodingError as e:
        click.echo(f"Encoding error: {e}", err=True)
        sys.exit(1)
    except TemplateExecutionError as e:
        click.echo(f"Template error: {e}", err=True)
        sys.exit(1)
    except EtpError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@model_option
def commands(model):
    """List commands available to templates."""
    printer = Printer(model)
    for name, command in sorted(printer.commands().items()):
        summary = command.description.splitlines()[0]
        click.echo(f"  {name}{command.signature}")
        click.echo(f"        {summary}")


@main.command()
def models():
    """List supported printer models."""
    for name in model_names():
        click.echo(name)


if __name__ == "__main__":
    main()
