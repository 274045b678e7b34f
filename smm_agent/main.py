"""
Main entry point for the program.
"""


from __future__ import annotations

import logging
from typing import Optional

import click

from tabulate import tabulate

from smm_asset import SMMSession, Asset, Search, get_assets, ConnectionState, SMMException

from smm_agent import config, creds


def _session(ctx: click.Context) -> SMMSession:
    """
    Logged in session for this invocation - closed when the command finishes.

    :param ctx:
    :return:
    """
    try:
        session = creds.open_session(ctx.obj["record"])
    except SMMException as e:
        raise click.ClickException(str(e)) from e
    ctx.call_on_close(session.close)
    return session


def _find_asset(session: SMMSession, name: str) -> Asset:
    try:
        assets = get_assets(session)
    except SMMException as e:
        raise click.ClickException(str(e)) from e

    for asset in assets:
        if asset.name == name:
            return asset
    raise click.ClickException(f"No asset called {name!r} - have {[a.name for a in assets]}")


@click.group()
@click.option("--host", default=None, help="SMM server url (default: $SMM_HOST)")
@click.option("--username", default=None, help="default: $SMM_USERNAME")
@click.option("--password", default=None, help="default: $SMM_PASSWORD")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=config.LOG_LEVEL,
    show_default=True,
)
@click.pass_context
def cli(ctx: click.Context, host: Optional[str], username: Optional[str], password: Optional[str], log_level: str):
    "SMM asset agent - report in and work searches"
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        record = creds.load_credentials(host=host, username=username, password=password)
    except SMMException as e:
        raise click.ClickException(str(e)) from e
    ctx.obj = {"record": record}


@cli.command("status")
@click.pass_context
def status(ctx: click.Context) -> None:
    """
    Connect, and print the state the session ends up in.

    :param ctx:
    :return:
    """
    session = creds.start_session(ctx.obj["record"])
    ctx.call_on_close(session.close)

    state = session.get_state()
    click.echo(f"{session.username}@{session.host}: {state.value}")
    if state is not ConnectionState.CONNECTED:
        ctx.exit(1)


@cli.command("assets")
@click.pass_context
def assets_cmd(ctx: click.Context) -> None:
    """
    List the assets this user can act as.

    :param ctx:
    :return:
    """
    session = _session(ctx)
    try:
        assets = get_assets(session)
    except SMMException as e:
        raise click.ClickException(str(e)) from e

    rows = [[a.asset_id, a.name, a.asset_type_id, a.type_name] for a in assets]
    click.echo(tabulate(rows, headers=["id", "name", "type_id", "type"], tablefmt="github"))


@cli.command("report")
@click.argument("name")
@click.option("--lat", type=float, required=True)
@click.option("--lon", type=float, required=True)
@click.option("--alt", type=int, default=0, show_default=True, help="Metres")
@click.option("--bearing", type=int, default=0, show_default=True)
@click.option("--fix", type=int, default=3, show_default=True, help="GPS fix type")
@click.pass_context
def report_cmd(ctx: click.Context, name: str, lat: float, lon: float, alt: int, bearing: int, fix: int) -> None:
    """
    Report the position of an asset and print the command that comes back.

    :param ctx:
    :param name:
    :param lat:
    :param lon:
    :param alt:
    :param bearing:
    :param fix:
    :return:
    """
    asset = _find_asset(_session(ctx), name)
    try:
        command = asset.report_position(lat, lon, altitude=alt, bearing=bearing, fix=fix)
    except SMMException as e:
        raise click.ClickException(str(e)) from e

    goto = asset.last_goto_position
    if goto is not None:
        click.echo(f"{command.value} {goto[0]:f} {goto[1]:f}")
    else:
        click.echo(command.value)


@cli.command("find-search")
@click.argument("name")
@click.option("--lat", type=float, required=True)
@click.option("--lon", type=float, required=True)
@click.option("--waypoints", is_flag=True, default=False, help="Also list the route")
@click.pass_context
def find_search_cmd(ctx: click.Context, name: str, lat: float, lon: float, waypoints: bool) -> None:
    """
    Find the closest search for an asset.

    :param ctx:
    :param name:
    :param lat:
    :param lon:
    :param waypoints:
    :return:
    """
    asset = _find_asset(_session(ctx), name)
    try:
        search = asset.find_search(lat, lon)
        if search is None:
            click.echo("No search available.")
            return

        click.echo(
            tabulate(
                [[search.url, search.distance, search.length, search.sweep_width]],
                headers=["url", "distance", "length", "sweep_width"],
                tablefmt="github",
            )
        )
        if waypoints:
            rows = [[i, wp.latitude, wp.longitude] for i, wp in enumerate(search.get_waypoints())]
            click.echo(tabulate(rows, headers=["#", "latitude", "longitude"], tablefmt="github"))
    except SMMException as e:
        raise click.ClickException(str(e)) from e


def _search_action(ctx: click.Context, name: str, url: str, action: str) -> None:
    asset = _find_asset(_session(ctx), name)
    search = Search(asset, url)
    try:
        if action == "accept":
            search.accept()
        else:
            search.complete()
    except SMMException as e:
        raise click.ClickException(str(e)) from e


@cli.command("accept-search")
@click.argument("name")
@click.argument("url")
@click.pass_context
def accept_search_cmd(ctx: click.Context, name: str, url: str) -> None:
    """
    Start work on a search, e.g. accept-search heli-1 /search/12/json/

    :param ctx:
    :param name:
    :param url:
    :return:
    """
    _search_action(ctx, name, url, "accept")
    click.echo(f"Accepted {url}")


@cli.command("complete-search")
@click.argument("name")
@click.argument("url")
@click.pass_context
def complete_search_cmd(ctx: click.Context, name: str, url: str) -> None:
    """
    Mark a search as finished.

    :param ctx:
    :param name:
    :param url:
    :return:
    """
    _search_action(ctx, name, url, "complete")
    click.echo(f"Completed {url}")


if __name__ == "__main__":
    cli()
