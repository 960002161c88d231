"""Command-line utilities for yaml-directives.

Renders documents with every directive resolved and lists the
directives known to the loader.
"""

from json import dumps
from typing import IO, Any

from click import Choice, ClickException, Context, File, argument, echo, group, option
from click import pass_context, pass_obj
from yaml import safe_dump

from yaml_directives.core import DocumentLoader
from yaml_directives.errors import DirectiveError

OUTPUT_FORMATS = ('yaml', 'json')


@group(help='Command-line utilities for yaml-directives.')
@option(
    '--strict',
    is_flag=True,
    default=False,
    help='Fail on plugin loading issues instead of warning.',
)
@option(
    '--max-depth',
    type=int,
    default=None,
    help='Maximum number of nested fragments per document.',
)
@pass_context
def cli(ctx: Context, strict: bool, max_depth: int | None) -> None:
    """Root CLI group for yaml-directives tools."""
    ctx.obj = {
        'strict': strict or None,
        'max_depth': max_depth,
    }


def _make_loader(options: dict[str, Any]) -> DocumentLoader:
    """Create a loader honoring the root group options.

    Options left unset fall back to `YAML_DIRECTIVES_*` settings.
    """
    return DocumentLoader(
        strict=options.get('strict'),
        max_depth=options.get('max_depth'),
    )


@cli.command(
    name='render',
    help='Resolve every directive of a YAML document and print the result.',
)
@option(
    '-v', '--var', 'variables',
    multiple=True,
    metavar='KEY=VALUE',
    help='Variable available to the !var directive. May be repeated.',
)
@option(
    '-f', '--format', 'output_format',
    type=Choice(OUTPUT_FORMATS),
    default='yaml',
    show_default=True,
    help='Output format.',
)
@argument('source', type=File('rb'), default='-')
@pass_obj
def render(options: dict[str, Any], source: IO[bytes],
           variables: tuple[str, ...], output_format: str) -> None:
    """Print a resolved document.

    Args:
        options: Root group options.
        source: Input stream (`-` for standard input).
        variables: Assignments in the `key=value` form.
        output_format: Either `yaml` or `json`.
    """
    try:
        data = _make_loader(options).load(source, variables=variables)

    except DirectiveError as error:
        raise ClickException(str(error)) from error

    if output_format == 'json':
        echo(dumps(data, ensure_ascii=False, indent=4, default=str))
    else:
        echo(safe_dump(data, allow_unicode=True, sort_keys=False), nl=False)


@cli.command(
    name='directives',
    help='List registered directive tags and the node kinds they accept.',
)
@pass_obj
def list_directives(options: dict[str, Any]) -> None:
    """Print registered directives, one per line."""
    registry = _make_loader(options).registry

    for tag in sorted(registry):
        echo(f'{tag} {registry[tag].node_type}')


if __name__ == '__main__':
    cli()
