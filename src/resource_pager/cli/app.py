"""Typer application for reading paged resources from the command line."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Any, TypeVar

import typer

from resource_pager.clients.client_exceptions import RequestException, ResourcePagerError
from resource_pager.clients.proxy import ProxyClient
from resource_pager.config.loader import load_config
from resource_pager.core import converter
from resource_pager.core.log_events import LogEvents
from resource_pager.core.logger import UnifiedLogger
from resource_pager.core.pagination import (
    CriteriaFilter,
    Filter,
    FilterMapFilter,
    NamedQueryFilter,
    PagingRequestBuilder,
)
from resource_pager.core.pagination.planner import resolve_max_page_size, resolve_page_size

__all__ = ["app", "create_app", "run"]

T = TypeVar("T")

_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to a YAML configuration file (defaults to RESOURCE_PAGER_CONFIG)",
    exists=False,
)
_LOG_LEVEL_OPTION = typer.Option(
    None,
    "--log-level",
    help="Override the configured log level (DEBUG, INFO, WARNING, ERROR)",
)
_VERSION_OPTION = typer.Option(
    None,
    "--version",
    help="Media type version requested for the resource",
)
_CRITERIA_OPTION = typer.Option(None, "--criteria", help="JSON criteria filter")
_NAMED_QUERY_OPTION = typer.Option(
    None,
    "--named-query",
    help='Named query, e.g. \'?keywordSearch={"keywordSearch": "x"}\'',
)
_FILTER_MAP_OPTION = typer.Option(None, "--filter-map", help="Legacy filter map, e.g. '?name=x'")


def _filter_from_options(criteria: str | None, named_query: str | None, filter_map: str | None) -> Filter:
    given = [value for value in (criteria, named_query, filter_map) if value is not None]
    if len(given) > 1:
        raise typer.BadParameter("filter options are mutually exclusive")
    if criteria is not None:
        return CriteriaFilter(criteria)
    if named_query is not None:
        return NamedQueryFilter(named_query)
    if filter_map is not None:
        return FilterMapFilter(filter_map)
    return None


def _open_client(config: Path | None, log_level: str | None) -> ProxyClient:
    try:
        proxy_config = load_config(config)
        log_config = proxy_config.logging.to_log_config()
        if log_level:
            log_config = replace(log_config, level=log_level.upper())
        UnifiedLogger.configure(log_config)
    except FileNotFoundError as exc:
        typer.echo(f"Error: Configuration file not found: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except (TypeError, ValueError) as exc:
        typer.echo(f"Error: Configuration validation failed: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    return ProxyClient(proxy_config)


@contextmanager
def _command_errors(command: str, resource: str) -> Iterator[None]:
    log = UnifiedLogger.get(__name__).bind(component="cli", command=command, resource=resource)
    log.info(LogEvents.CLI_RUN_START)
    try:
        yield
    except typer.Exit:
        raise
    except RequestException as exc:
        log.error(LogEvents.CLI_RUN_ERROR, error=str(exc), exc_info=True)
        typer.echo(f"Error: External API failure: {exc}", err=True)
        raise typer.Exit(code=3) from exc
    except ResourcePagerError as exc:
        log.error(LogEvents.CLI_RUN_ERROR, error=str(exc))
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    log.info(LogEvents.CLI_RUN_FINISH)


def _with_client(
    config: Path | None,
    log_level: str | None,
    command: str,
    resource: str,
    action: Callable[[ProxyClient], T],
) -> T:
    client = _open_client(config, log_level)
    with client, _command_errors(command, resource):
        return action(client)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def create_app() -> typer.Typer:
    """Create the Typer application with the ``fetch``, ``total-count`` and ``page-size`` commands."""

    app = typer.Typer(
        name="resource-pager",
        help="Fetch paginated resources from the resource API.",
        add_completion=False,
    )

    @app.command(name="fetch")
    def fetch(
        resource: str = typer.Argument(..., help="Resource name, e.g. persons"),
        version: str | None = _VERSION_OPTION,
        offset: int = typer.Option(0, "--offset", help="Row offset to start from", min=0),
        page_size: int = typer.Option(
            0,
            "--page-size",
            help="Rows per page; 0 uses the server's default page size",
            min=0,
        ),
        num_pages: int | None = typer.Option(None, "--num-pages", help="Fetch at most N pages", min=1),
        num_rows: int | None = typer.Option(None, "--num-rows", help="Fetch at most N rows", min=1),
        criteria: str | None = _CRITERIA_OPTION,
        named_query: str | None = _NAMED_QUERY_OPTION,
        filter_map: str | None = _FILTER_MAP_OPTION,
        rows: bool = typer.Option(
            True,
            "--rows/--pages",
            help="Print a flat list of rows, or one entry per fetched page",
        ),
        config: Path | None = _CONFIG_OPTION,
        log_level: str | None = _LOG_LEVEL_OPTION,
    ) -> None:
        """Fetch a resource, paging as needed, and print it as JSON."""
        if num_pages is not None and num_rows is not None:
            raise typer.BadParameter("--num-pages and --num-rows are mutually exclusive")
        request_filter = _filter_from_options(criteria, named_query, filter_map)

        builder = (
            PagingRequestBuilder(resource)
            .for_version(version)
            .with_filter(request_filter)
            .with_page_size(page_size)
            .from_offset(offset)
        )
        if num_pages is not None:
            builder.for_num_pages(num_pages)
        if num_rows is not None:
            builder.for_num_rows(num_rows)
        request = builder.build()

        shape = converter.to_row_based_json if rows else converter.to_page_based_json
        _echo_json(_with_client(config, log_level, "fetch", resource, lambda client: shape(client.paginate(request))))

    @app.command(name="total-count")
    def show_total_count(
        resource: str = typer.Argument(..., help="Resource name, e.g. persons"),
        version: str | None = _VERSION_OPTION,
        criteria: str | None = _CRITERIA_OPTION,
        named_query: str | None = _NAMED_QUERY_OPTION,
        filter_map: str | None = _FILTER_MAP_OPTION,
        config: Path | None = _CONFIG_OPTION,
        log_level: str | None = _LOG_LEVEL_OPTION,
    ) -> None:
        """Print the total number of rows the resource holds, optionally filtered."""
        request_filter = _filter_from_options(criteria, named_query, filter_map)
        count = _with_client(
            config,
            log_level,
            "total-count",
            resource,
            lambda client: client.get_total_count(resource, version, request_filter),
        )
        typer.echo(str(count))

    @app.command(name="page-size")
    def show_page_size(
        resource: str = typer.Argument(..., help="Resource name, e.g. persons"),
        version: str | None = _VERSION_OPTION,
        config: Path | None = _CONFIG_OPTION,
        log_level: str | None = _LOG_LEVEL_OPTION,
    ) -> None:
        """Print the default and maximum page size of the resource."""

        def _sizes(client: ProxyClient) -> dict[str, int]:
            response = client.get(resource, version)
            return {
                "page_size": resolve_page_size(0, response),
                "max_page_size": resolve_max_page_size(response),
            }

        _echo_json(_with_client(config, log_level, "page-size", resource, _sizes))

    return app


app = create_app()


def run() -> None:
    """Entry point for the ``resource-pager`` console script."""
    app()


if __name__ == "__main__":
    run()
