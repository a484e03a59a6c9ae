"""Validation of messages posted from the sandboxed frame to the host."""

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from .errors import InvalidInput
from .inject import MESSAGE_TYPE
from .models import NavigationIntent, TargetURL

logger = logging.getLogger(__name__)


class ProxyNavigateMessage(BaseModel):
    """``{type: "PROXY_NAVIGATE", url, method?, formData?}``"""

    type: Literal["PROXY_NAVIGATE"]
    url: str
    method: Literal["GET", "POST"] = "GET"
    form_data: dict[str, str] | None = Field(default=None, alias="formData")

    model_config = {"populate_by_name": True}


def parse_message(data: Any) -> NavigationIntent | None:
    """Turn a posted message into a NavigationIntent.

    The ``type`` tag is checked before anything else; messages with another
    tag, a malformed payload or an unusable URL yield ``None``.
    """
    if not isinstance(data, dict) or data.get("type") != MESSAGE_TYPE:
        return None

    try:
        message = ProxyNavigateMessage.model_validate(data)
        url = TargetURL.parse(message.url)
    except (ValidationError, InvalidInput) as e:
        logger.debug("Ignoring malformed %s message: %s", MESSAGE_TYPE, e)
        return None

    form_data = message.form_data if message.method == "POST" else None
    return NavigationIntent(url=url, method=message.method, form_data=form_data)
