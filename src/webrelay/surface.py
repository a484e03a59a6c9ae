"""Markup for the sandboxed frame that displays proxied documents."""

import html

# Never allow-top-navigation: the interceptor is the only way out of the frame.
SANDBOX = "allow-scripts allow-forms allow-same-origin allow-popups"


def frame_markup(document: str, title: str | None = None) -> str:
    """Embed ``document`` in a sandboxed iframe via ``srcdoc``."""
    title_attr = f' title="{html.escape(title, quote=True)}"' if title else ""
    return (
        f'<iframe sandbox="{SANDBOX}"{title_attr} '
        f'srcdoc="{html.escape(document, quote=True)}"></iframe>'
    )
