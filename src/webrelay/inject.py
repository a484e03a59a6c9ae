"""Inject the click/submit interceptor into rewritten documents."""

import json
import re

from .models import RewrittenDocument

MESSAGE_TYPE = "PROXY_NAVIGATE"
MARKER_ATTRIBUTE = "data-webrelay-interceptor"

HEAD_OPEN = re.compile(r"<head(?=[\s>/])[^>]*>", re.IGNORECASE)
HTML_OPEN = re.compile(r"<html(?=[\s>/])[^>]*>", re.IGNORECASE)

INTERCEPTOR_JS = """
(function () {
  var BASE_URL = __BASE_URL__;
  var MESSAGE_TYPE = __MESSAGE_TYPE__;

  function resolve(raw) {
    try {
      return new URL(raw, BASE_URL).href;
    } catch (err) {
      return null;
    }
  }

  function post(intent) {
    intent.type = MESSAGE_TYPE;
    window.parent.postMessage(intent, "*");
  }

  function formFields(form, submitter) {
    var data = new FormData(form);
    if (submitter && submitter.name) {
      data.append(submitter.name, submitter.value || "");
    }
    var fields = [];
    data.forEach(function (value, key) {
      if (typeof value === "string") {
        fields.push([key, value]);
      }
    });
    return fields;
  }

  document.addEventListener("click", function (event) {
    var start = event.target;
    if (start && start.nodeType !== 1) {
      start = start.parentElement;
    }
    var anchor = start && start.closest ? start.closest("a[href]") : null;
    if (!anchor) {
      return;
    }
    var href = (anchor.getAttribute("href") || "").trim();
    if (!href || href.charAt(0) === "#" || /^javascript:/i.test(href)) {
      return;
    }
    var url = resolve(href);
    if (!url) {
      return;
    }
    event.preventDefault();
    post({url: url, method: "GET"});
  }, true);

  document.addEventListener("submit", function (event) {
    var form = event.target;
    if (!form || form.tagName !== "FORM") {
      return;
    }
    event.preventDefault();
    var action = resolve(form.getAttribute("action") || BASE_URL);
    if (!action) {
      return;
    }
    var method = (form.getAttribute("method") || "GET").toUpperCase();
    var fields = formFields(form, event.submitter);
    if (method === "POST") {
      var formData = {};
      fields.forEach(function (pair) {
        formData[pair[0]] = pair[1];
      });
      post({url: action, method: "POST", formData: formData});
      return;
    }
    var target = new URL(action);
    target.search = new URLSearchParams(fields).toString();
    post({url: target.href, method: "GET"});
  }, true);
})();
"""


def _js_literal(value: str) -> str:
    return json.dumps(value).replace("</", "<\\/")


def interceptor_script(base_url: str) -> str:
    """Render the ``<script>`` block that turns clicks and submits into messages."""
    body = (
        INTERCEPTOR_JS
        .replace("__BASE_URL__", _js_literal(base_url))
        .replace("__MESSAGE_TYPE__", _js_literal(MESSAGE_TYPE))
    )
    return f"<script {MARKER_ATTRIBUTE}>{body}</script>"


def inject_interceptor(document: RewrittenDocument) -> str:
    """Insert the interceptor as early as possible in ``<head>``.

    A ``<head>`` is created when the document has none. The script is
    inserted exactly once per call.
    """
    script = interceptor_script(str(document.base_url))
    html = document.html
    head = HEAD_OPEN.search(html)
    if head:
        return html[:head.end()] + script + html[head.end():]

    root = HTML_OPEN.search(html)
    if root:
        return html[:root.end()] + f"<head>{script}</head>" + html[root.end():]

    return f"<head>{script}</head>" + html
