"""CLI entry point for oas-validate."""

import logging
from pathlib import Path

import click

from oas_validator import settings
from oas_validator.cache import SpecCache
from oas_validator.errors import OasValidatorError
from oas_validator.spec.loader import SpecLoader
from oas_validator.validation.params import Headers, QueryParams
from oas_validator.validation.session import RequestDescriptor, ValidationSession


def _parse_pairs(values: tuple[str, ...], sep: str, what: str) -> dict[str, str]:
    """Parse 'name<sep>value' options into a dict."""
    result = {}
    for item in values:
        name, found, value = item.partition(sep)
        if not found or not name.strip():
            raise click.BadParameter(f"expected name{sep}value, got {item!r}", param_hint=what)
        result[name.strip()] = value.strip()
    return result


def _make_cache(timeout: float | None, resource_dir: Path | None) -> SpecCache:
    return SpecCache(loader=SpecLoader(fetch_timeout=timeout, resource_dir=resource_dir))


@click.group()
@click.option("--timeout", type=float, default=None, help="Timeout in seconds for fetching remote specs.")
@click.option("--resource-dir", type=click.Path(exists=True, file_okay=False, path_type=Path), default=None, help="Directory searched for named specs.")
@click.pass_context
def main(ctx: click.Context, timeout: float | None, resource_dir: Path | None):
    """OAS Validate: check HTTP requests against an OpenAPI/Swagger contract."""
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = _make_cache(timeout, resource_dir)


@main.command()
@click.argument("spec")
@click.option("--path", "url_path", required=True, help="Request path, e.g. /v1/items/42.")
@click.option("--verb", default="GET", show_default=True, help="HTTP method.")
@click.option("--base-path", default=None, help="Base path the request was received on.")
@click.option("--check-base-path", is_flag=True, help="Fail when --base-path differs from the spec's base path.")
@click.option("-H", "--header", "headers", multiple=True, help="Request header as 'Name: value'.")
@click.option("-q", "--query", "query", multiple=True, help="Query parameter as 'name=value'.")
@click.option("--accept", default=None, help="Accept header value.")
@click.option("--content-type", default=None, help="Content-Type header value.")
@click.option("--body", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="File holding the request body.")
@click.pass_obj
def check(
    cache: SpecCache,
    spec: str,
    url_path: str,
    verb: str,
    base_path: str | None,
    check_base_path: bool,
    headers: tuple[str, ...],
    query: tuple[str, ...],
    accept: str | None,
    content_type: str | None,
    body: Path | None,
):
    """Validate one request against SPEC (URL, inline JSON/YAML, or resource name)."""
    header_values = _parse_pairs(headers, ":", "--header")
    if accept is None:
        accept = Headers(header_values).get("accept")
    if content_type is None:
        content_type = Headers(header_values).get("content-type")

    request = RequestDescriptor(
        path=url_path,
        verb=verb,
        base_path=base_path,
        query=QueryParams(_parse_pairs(query, "=", "--query")),
        headers=Headers(header_values),
        accept=accept,
        content_type=content_type,
        body=body.read_bytes() if body else None,
    )

    try:
        session = ValidationSession(spec, cache=cache, validate_base_path=check_base_path)
        result = session.validate(request)
    except OasValidatorError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(2)

    if result.valid:
        click.echo("valid")
        return
    click.echo(f"invalid: {result.code}: {result.detail}")
    raise SystemExit(1)


@main.command()
@click.argument("spec")
@click.pass_obj
def paths(cache: SpecCache, spec: str):
    """List the base path and every operation declared in SPEC."""
    try:
        doc = cache.get(spec)
    except OasValidatorError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(2)

    click.echo(f"basePath: {doc.base_path or '(none)'}")
    for template, item in doc.paths.items():
        for method in item.operations:
            click.echo(f"{method:<7} {template}")
