"""Command-line access to a tenant site's content."""

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import click
import httpx
from pydantic import BaseModel, ValidationError

from sitecms.content.constants import ContentCollection
from sitecms.content.facade import SiteClient
from sitecms.observability.logging import configure_logging, get_logger, site_context
from sitecms.settings import get_settings
from sitecms.transport.errors import CmsClientError


logger = get_logger("cli")

SiteCall = Callable[[SiteClient], Awaitable[Any]]

LISTERS: dict[ContentCollection, str] = {
    ContentCollection.BLOGS: "get_blogs",
    ContentCollection.PRODUCTS: "get_products",
    ContentCollection.PAGES: "get_pages",
    ContentCollection.CATEGORIES: "get_categories",
    ContentCollection.TAGS: "get_tags",
}

GETTERS: dict[ContentCollection, str] = {
    ContentCollection.BLOGS: "get_blog",
    ContentCollection.PRODUCTS: "get_product",
    ContentCollection.PAGES: "get_page",
    ContentCollection.CATEGORIES: "get_category",
}


@dataclass
class CliOptions:
    """Connection options shared by all commands."""

    base_url: str | None
    site_id: str | None
    token: str | None
    no_cache: bool
    http_transport: httpx.AsyncBaseTransport | None = None


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    return value


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False))


def _parse_slug_or_id(value: str) -> int | str:
    """Treat all-digit arguments as numeric ids, anything else as a slug."""
    return int(value) if value.isdigit() else value


async def _call_site(options: CliOptions, call: SiteCall) -> Any:
    overrides: dict[str, object] = {
        "base_url": options.base_url,
        "site_id": options.site_id,
        "token": options.token,
    }
    if options.no_cache:
        overrides["cache_enabled"] = False
    config = get_settings().to_client_config(**overrides)

    http_client = (
        httpx.AsyncClient(transport=options.http_transport)
        if options.http_transport is not None
        else None
    )
    try:
        with site_context(config.site_id):
            async with SiteClient.from_config(
                config, http_client=http_client
            ) as client:
                return await call(client)
    finally:
        if http_client is not None:
            await http_client.aclose()


def _run(ctx: click.Context, call: SiteCall) -> Any:
    """Run one facade call, mapping client errors to exit code 1."""
    options: CliOptions = ctx.obj
    try:
        return asyncio.run(_call_site(options, call))
    except ValidationError as exc:
        click.echo(f"Error: invalid client configuration: {exc}", err=True)
        ctx.exit(1)
    except CmsClientError as exc:
        logger.error(
            "cli_request_failed",
            status=exc.status,
            error_class=exc.error_class.value,
            endpoint=exc.endpoint,
        )
        click.echo(f"Error: {exc.message} (status {exc.status})", err=True)
        ctx.exit(1)


@click.group()
@click.version_option(version="1.0.0")
@click.option("--base-url", help="CMS base URL (default: $CMS_BASE_URL).")
@click.option("--site-id", help="Tenant site id (default: $CMS_SITE_ID).")
@click.option("--token", help="API token (default: $CMS_API_TOKEN).")
@click.option("--no-cache", is_flag=True, help="Disable the response cache.")
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: $CMS_LOG_JSON).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.pass_context
def cli(  # noqa: PLR0913
    ctx: click.Context,
    base_url: str | None,
    site_id: str | None,
    token: str | None,
    no_cache: bool,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Read content of one tenant site from the CMS."""
    settings = get_settings()
    configure_logging(
        level=logging.DEBUG if verbose else settings.log_level_value,
        output=sys.stderr,
        json_format=settings.log_json if json_logs is None else json_logs,
    )

    # Tests pre-seed ctx.obj with an in-memory HTTP transport
    preset = ctx.obj if isinstance(ctx.obj, dict) else {}
    ctx.obj = CliOptions(
        base_url=base_url,
        site_id=site_id,
        token=token,
        no_cache=no_cache,
        http_transport=preset.get("http_transport"),
    )


@cli.command()
@click.pass_context
def site(ctx: click.Context) -> None:
    """Show the current site's configuration."""
    _echo_json(_run(ctx, lambda client: client.get_site_config()))


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show the current site together with its content counts."""
    _echo_json(_run(ctx, lambda client: client.get_site_with_stats()))


@cli.command("list")
@click.argument(
    "collection",
    type=click.Choice([member.value for member in LISTERS]),
)
@click.option("--page", type=int, default=None, help="Page number (1-based).")
@click.option("--page-size", type=int, default=None, help="Entries per page.")
@click.option(
    "--sort",
    "sort",
    multiple=True,
    help="Sort expression such as publishedAt:desc (repeatable).",
)
@click.pass_context
def list_entries(
    ctx: click.Context,
    collection: str,
    page: int | None,
    page_size: int | None,
    sort: tuple[str, ...],
) -> None:
    """List entries of a collection."""
    params: dict[str, Any] = {}
    if page is not None or page_size is not None:
        params["pagination"] = {"page": page, "pageSize": page_size}
    if sort:
        params["sort"] = list(sort)

    method = LISTERS[ContentCollection(collection)]
    _echo_json(_run(ctx, lambda client: getattr(client, method)(params or None)))


@cli.command("get")
@click.argument(
    "collection",
    type=click.Choice([member.value for member in GETTERS]),
)
@click.argument("slug_or_id")
@click.pass_context
def get_entry(ctx: click.Context, collection: str, slug_or_id: str) -> None:
    """Fetch one entry by numeric id or slug."""
    method = GETTERS[ContentCollection(collection)]
    key = _parse_slug_or_id(slug_or_id)
    entry = _run(ctx, lambda client: getattr(client, method)(key))
    if entry is None:
        click.echo(f"Error: {collection} '{slug_or_id}' not found", err=True)
        ctx.exit(1)
    _echo_json(entry)


@cli.command()
@click.argument("collection", type=click.Choice(["blogs", "products"]))
@click.option(
    "--limit",
    type=int,
    default=None,
    help="Maximum number of featured blogs (blogs only).",
)
@click.pass_context
def featured(ctx: click.Context, collection: str, limit: int | None) -> None:
    """List featured blogs or products."""
    if collection == "products":
        _echo_json(_run(ctx, lambda client: client.get_featured_products()))
        return
    if limit is None:
        _echo_json(_run(ctx, lambda client: client.get_featured_blogs()))
    else:
        _echo_json(_run(ctx, lambda client: client.get_featured_blogs(limit)))


@cli.command()
@click.pass_context
def navigation(ctx: click.Context) -> None:
    """List pages shown in site navigation."""
    _echo_json(_run(ctx, lambda client: client.get_navigation_pages()))


@cli.command("category-tree")
@click.pass_context
def category_tree(ctx: click.Context) -> None:
    """Show root categories with nested children."""
    _echo_json(_run(ctx, lambda client: client.get_category_tree()))


if __name__ == "__main__":
    cli()
