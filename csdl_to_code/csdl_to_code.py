import json
import logging
import sys
from pathlib import Path

import click

from . import __version__
from .cli_utils import reconstruct_command_line
from .pipeline import AtomicWriter, GenerationError, GenerationOptions, PipelineGenerator


@click.command()
@click.version_option(__version__, prog_name="csdl_to_code")
@click.option("--output-file", "-o", default=None, type=click.Path(dir_okay=False, resolve_path=True), help="Write output to file. If not specified, output is printed to stdout")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True), help="JSON file with generation options")
@click.option("--no-serde", is_flag=True, default=False, help="Don't derive Serialize and Deserialize traits on generated types")
@click.option(
    "--no-empty-string-is-null",
    is_flag=True,
    default=False,
    help="Don't coerce empty strings into None when deserializing into Option<String>",
)
@click.option("--no-reflection", is_flag=True, default=False, help="Don't produce OpenDataModel traits and implementations for run-time reflection")
@click.option(
    "--no-expand",
    is_flag=True,
    default=False,
    help="Don't include navigation properties in the output structures. This makes deserializing $expand-ed properties impossible.",
)
@click.option("--no-header", is_flag=True, default=False, help="Don't write the generation comment at the top of the output")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log pipeline progress to stderr")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
def csdl_to_code(output_file, config, no_serde, no_empty_string_is_null, no_reflection, no_expand, no_header, verbose, input_file):
    """Generate Rust code from an OData metadata.xml document."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )

    if config is not None:
        with open(config) as f:
            try:
                options = GenerationOptions.from_dict(json.load(f))
            except ValueError as e:
                raise click.BadParameter(str(e), param_hint="--config") from e
    else:
        options = GenerationOptions()

    # CLI flags override the config file
    if no_serde:
        options.emit_serialization_support = False
    if no_empty_string_is_null:
        options.coerce_empty_string_to_null = False
    if no_reflection:
        options.emit_reflection_metadata = False
    if no_expand:
        options.include_navigation_properties = False
    if no_header:
        options.add_generation_comment = False

    with open(input_file, "rb") as f:
        source = f.read()

    codegen = PipelineGenerator(source, options, command_line=reconstruct_command_line(csdl_to_code))
    try:
        out = codegen.generate()
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    if output_file is None:
        click.echo(out, nl=False)
    else:
        try:
            AtomicWriter().write(Path(output_file), out)
        except ValueError as e:
            raise click.ClickException(str(e)) from e
