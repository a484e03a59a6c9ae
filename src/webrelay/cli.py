"""CLI interface using typer."""

import asyncio
import json
import logging
import sys

import typer

from .config import settings
from .core import HttpFetcher
from .errors import InvalidInput
from .extract import Extractor
from .inject import MESSAGE_TYPE
from .normalizer import normalize_address
from .packager import ProxyPipeline, ProxyReply
from .relay import NavigationRelay, Tab
from .surface import frame_markup

app = typer.Typer(
    name="webrelay",
    help="Content proxy and navigation relay for sandboxed iframes",
    no_args_is_help=True,
)


@app.callback()
def main(verbose: bool = typer.Option(False, "-v", "--verbose", help="Log pipeline activity")):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _fetch(url: str) -> ProxyReply:
    """Run the proxy pipeline once for ``url``."""
    fetcher = HttpFetcher(
        timeout=settings.timeout,
        user_agent=settings.user_agent,
        max_connections=settings.max_connections,
        max_keepalive_connections=settings.max_keepalive_connections,
    )
    try:
        return await ProxyPipeline(fetcher).run(url)
    finally:
        await fetcher.close()


@app.command()
def serve(
    host: str = typer.Option(settings.host, "--host", help="Interface to bind"),
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the proxy HTTP service."""
    import uvicorn

    uvicorn.run("webrelay.server:create_app", host=host, port=port, reload=reload, factory=True)


@app.command()
def fetch(
    address: str = typer.Argument(..., help="Address or search terms"),
    output: str = typer.Option(None, "-o", "--output", help="Output file"),
    as_json: bool = typer.Option(False, "--json", help="Print the proxy response body as JSON"),
    frame: bool = typer.Option(False, "--frame", help="Wrap the document in a sandboxed iframe"),
):
    """Fetch one page through the proxy pipeline."""
    try:
        url = normalize_address(address)
    except InvalidInput as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    reply = asyncio.run(_fetch(str(url)))

    if as_json:
        content = json.dumps(reply.payload(), ensure_ascii=False)
    elif reply.ok:
        content = reply.html or ""
        if frame:
            content = frame_markup(content, title=reply.title)
    else:
        typer.echo(f"Error ({reply.status_code}): {reply.error}", err=True)
        raise typer.Exit(code=1)

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(content)
        typer.echo(f"Saved to {output}")
    else:
        sys.stdout.write(content)


@app.command()
def normalize(
    address: str = typer.Argument(..., help="Text as typed into the address bar"),
    engine: str = typer.Option(None, "--engine", help="Search engine for non-address input"),
):
    """Show the URL an address-bar entry resolves to."""
    try:
        typer.echo(str(normalize_address(address, engine)))
    except InvalidInput as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)


def _page_links(tab: Tab) -> list[dict]:
    if not tab.content:
        return []
    links = Extractor(tab.content).get_links()
    return [link for link in links if link["href"].startswith(("http://", "https://"))]


def _show(tab: Tab):
    typer.echo(f"[{tab.state.value}] {tab.title}")
    typer.echo(f"  {tab.committed_url or ''}")
    if tab.last_error:
        typer.echo(f"  Error: {tab.last_error}")


async def _browse(address: str | None):
    fetcher = HttpFetcher()
    relay = NavigationRelay(ProxyPipeline(fetcher))
    tab = relay.open_tab()
    links: list[dict] = []

    try:
        if address:
            await relay.submit_address(tab.id, address)
            _show(tab)

        while True:
            line = (await asyncio.to_thread(typer.prompt, "webrelay", default="", show_default=False)).strip()
            command, _, arg = line.partition(" ")

            if command in ("quit", "exit"):
                break
            if not command:
                continue
            if command == "back":
                if not await relay.back(tab.id):
                    typer.echo("Nothing to go back to")
                    continue
            elif command == "forward":
                if not await relay.forward(tab.id):
                    typer.echo("Nothing to go forward to")
                    continue
            elif command == "refresh":
                if not await relay.refresh(tab.id):
                    continue
            elif command == "links":
                links = _page_links(tab)
                for i, link in enumerate(links, 1):
                    typer.echo(f"{i}. {link['text'] or '(no text)'} -> {link['href']}")
                continue
            elif command == "open" and arg.isdigit():
                index = int(arg) - 1
                if not 0 <= index < len(links):
                    typer.echo("No such link; run 'links' first")
                    continue
                message = {"type": MESSAGE_TYPE, "url": links[index]["href"], "method": "GET"}
                await relay.receive_navigation_intent(tab.id, message)
            else:
                if not await relay.submit_address(tab.id, line):
                    typer.echo(f"Error: {tab.last_error}")
                    continue
            _show(tab)
    finally:
        await fetcher.close()


@app.command()
def browse(address: str = typer.Argument(None, help="Initial address")):
    """Browse interactively through a single relay tab."""
    asyncio.run(_browse(address))


@app.command()
def version():
    """Show version."""
    from . import __version__

    typer.echo(f"web-relay {__version__}")


if __name__ == "__main__":
    app()
