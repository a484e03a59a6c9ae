"""Page metadata extraction using selectolax."""

from selectolax.parser import HTMLParser


class Extractor:
    """Extract display data from a proxied HTML document."""

    def __init__(self, html: str):
        self.tree = HTMLParser(html)

    def title(self) -> str | None:
        """Text of the first ``<title>`` element, whitespace-collapsed."""
        node = self.tree.css_first("title")
        if node is None:
            return None
        text = " ".join(node.text(strip=True).split())
        return text or None

    def get_links(self) -> list[dict]:
        """Get all links with text and href."""
        links = []
        for node in self.tree.css("a[href]"):
            href = node.attributes.get("href") or ""
            text = " ".join(node.text(strip=True).split())
            links.append({"href": href, "text": text})
        return links
