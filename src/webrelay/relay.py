"""Host-side navigation relay: owns tabs, history and in-flight loads."""

import html
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from .errors import InvalidInput
from .messages import parse_message
from .models import Method, NavigationIntent, TargetURL
from .normalizer import normalize_address
from .packager import ProxyReply

logger = logging.getLogger(__name__)


class Pipeline(Protocol):
    async def run(
        self,
        url: str | TargetURL,
        method: Method = "GET",
        form_data: dict[str, str] | None = None,
    ) -> ProxyReply: ...


class TabState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class UnknownTab(KeyError):
    """No open tab has the given id."""


@dataclass
class Tab:
    """One browsing context. Only its NavigationRelay mutates it."""

    id: str
    address_bar_text: str = ""
    committed_url: str | None = None
    history: list[str] = field(default_factory=list)
    history_cursor: int = -1
    title: str = "New Tab"
    state: TabState = TabState.IDLE
    last_error: str | None = None
    content: str | None = None
    seq: int = 0

    @property
    def can_go_back(self) -> bool:
        return self.history_cursor > 0

    @property
    def can_go_forward(self) -> bool:
        return 0 <= self.history_cursor < len(self.history) - 1

    @property
    def is_loading(self) -> bool:
        return self.state is TabState.LOADING


def error_page(message: str) -> str:
    """Minimal document shown in the frame when a load fails."""
    return (
        "<!DOCTYPE html><html><head><title>Page failed to load</title></head>"
        f"<body><h1>Page failed to load</h1><p>{html.escape(message)}</p></body></html>"
    )


class NavigationRelay:
    """Coordinates every open Tab.

    Each navigation bumps the tab's sequence number; when a load finishes its
    result is applied only if that number is still the tab's latest, so a
    newer navigation always wins over a slower, older one.
    """

    def __init__(self, pipeline: Pipeline, search_engine: str | None = None):
        self.pipeline = pipeline
        self.search_engine = search_engine
        self._tabs: dict[str, Tab] = {}

    @property
    def tabs(self) -> list[Tab]:
        return list(self._tabs.values())

    def open_tab(self) -> Tab:
        tab = Tab(id=uuid.uuid4().hex)
        self._tabs[tab.id] = tab
        return tab

    def close_tab(self, tab_id: str):
        """Forget a tab. Loads still in flight for it are discarded on arrival."""
        if self._tabs.pop(tab_id, None) is None:
            raise UnknownTab(tab_id)

    def get_tab(self, tab_id: str) -> Tab:
        try:
            return self._tabs[tab_id]
        except KeyError:
            raise UnknownTab(tab_id) from None

    async def submit_address(self, tab_id: str, text: str) -> bool:
        """Navigate to whatever the user typed into the address bar.

        Returns False without touching history or the network when the text
        cannot be normalized; the reason is left in ``tab.last_error``.
        """
        tab = self.get_tab(tab_id)
        tab.address_bar_text = text
        try:
            url = normalize_address(text, self.search_engine)
        except InvalidInput as e:
            tab.last_error = str(e)
            return False
        return await self._navigate(tab, str(url), push=True)

    async def receive_navigation_intent(self, tab_id: str, message: Any) -> bool:
        """Handle a PROXY_NAVIGATE message posted by the framed document.

        Accepts a raw message mapping or an already parsed NavigationIntent.
        Unrecognised messages are ignored and return False.
        """
        tab = self.get_tab(tab_id)
        intent = message if isinstance(message, NavigationIntent) else parse_message(message)
        if intent is None:
            logger.debug("Tab %s ignored message %r", tab_id, message)
            return False
        return await self._navigate(
            tab,
            str(intent.url),
            push=True,
            method=intent.method,
            form_data=intent.form_data,
        )

    async def back(self, tab_id: str) -> bool:
        tab = self.get_tab(tab_id)
        if not tab.can_go_back:
            return False
        tab.history_cursor -= 1
        return await self._navigate(tab, tab.history[tab.history_cursor], push=False)

    async def forward(self, tab_id: str) -> bool:
        tab = self.get_tab(tab_id)
        if not tab.can_go_forward:
            return False
        tab.history_cursor += 1
        return await self._navigate(tab, tab.history[tab.history_cursor], push=False)

    async def refresh(self, tab_id: str) -> bool:
        tab = self.get_tab(tab_id)
        if tab.committed_url is None:
            return False
        return await self._navigate(tab, tab.committed_url, push=False)

    async def _navigate(
        self,
        tab: Tab,
        url: str,
        push: bool,
        method: Method = "GET",
        form_data: dict[str, str] | None = None,
    ) -> bool:
        """Start a load and apply its result unless it was superseded.

        Returns True when the result was applied to the tab.
        """
        if push:
            del tab.history[tab.history_cursor + 1:]
            tab.history.append(url)
            tab.history_cursor = len(tab.history) - 1

        tab.committed_url = tab.history[tab.history_cursor]
        tab.address_bar_text = url
        tab.state = TabState.LOADING
        tab.seq += 1
        seq = tab.seq

        logger.info("Tab %s loading %s %s (#%d)", tab.id, method, url, seq)
        reply = await self.pipeline.run(url, method=method, form_data=form_data)

        if self._tabs.get(tab.id) is not tab:
            logger.debug("Tab %s closed before %s finished loading", tab.id, url)
            return False
        if seq != tab.seq:
            logger.debug("Tab %s discarding superseded load #%d of %s", tab.id, seq, url)
            return False

        self._apply(tab, reply)
        return True

    def _apply(self, tab: Tab, reply: ProxyReply):
        if reply.ok:
            tab.state = TabState.LOADED
            tab.title = reply.title
            tab.last_error = None
            tab.content = reply.html
        else:
            tab.state = TabState.FAILED
            tab.title = reply.title
            tab.last_error = reply.error
            tab.content = error_page(reply.error or "")
