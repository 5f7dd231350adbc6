"""Entry point: python -m wadl2go

Reads a WADL description, generates a Go client file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import click

from .codegen import generate, write_output
from .config import DEFAULT_PACKAGE_NAME, GOJSON_ENV_VAR, INFERENCE_CHOICES, GeneratorConfig
from .context_builder import build_document
from .diagnostics import Diagnostics, GenerationError
from .inference import get_inferencer
from .loader import load_description


@dataclass
class GenerationResult:
    source: str
    method_count: int
    diagnostics: Diagnostics


def run(config: GeneratorConfig) -> GenerationResult:
    """Load, resolve and render; raises GenerationError on fatal problems."""
    config.validate()
    diagnostics = Diagnostics()

    app = load_description(config.wadl_file)
    document = build_document(app, config.base_dir, diagnostics, base_url=config.base_url)
    inferencer = get_inferencer(config.inference, config.gojson_command)
    source = generate(document, config.package_name, inferencer, diagnostics)

    return GenerationResult(source=source, method_count=len(document), diagnostics=diagnostics)


@click.command()
@click.option(
    "--wadl-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Specifies which file to parse.",
)
@click.option(
    "--to-file",
    required=True,
    type=click.Path(dir_okay=False),
    help="Specifies the destination file.",
)
@click.option(
    "--package-name",
    default=DEFAULT_PACKAGE_NAME,
    show_default=True,
    help="Specifies the package the generated file will be under.",
)
@click.option("--base-url", default="", help="Specifies a replacement for the given base URL.")
@click.option(
    "--inference",
    default="gojson",
    show_default=True,
    type=click.Choice(INFERENCE_CHOICES),
    help="How result types are inferred from example responses.",
)
@click.option(
    "--gojson",
    "gojson_command",
    default="gojson",
    envvar=GOJSON_ENV_VAR,
    show_default=True,
    help="gojson executable used by --inference gojson.",
)
@click.option("--debug", is_flag=True, help="Controls debug log messages.")
def main(
    wadl_file: str,
    to_file: str,
    package_name: str,
    base_url: str,
    inference: str,
    gojson_command: str,
    debug: bool,
) -> None:
    """Generate a Go client from a WADL description."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    config = GeneratorConfig(
        wadl_file=wadl_file,
        to_file=to_file,
        package_name=package_name,
        base_url=base_url,
        inference=inference,
        gojson_command=gojson_command,
        debug=debug,
    )
    try:
        result = run(config)
    except GenerationError as exc:
        raise click.ClickException(str(exc)) from exc

    write_output(result.source, config.to_file)
    click.echo(
        f"Generated {config.to_file} ({result.method_count} methods, "
        f"{len(result.diagnostics.warnings)} warnings)"
    )


if __name__ == "__main__":
    main()
