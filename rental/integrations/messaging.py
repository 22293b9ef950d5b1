"""Chat messages for the collections team.

The engine only builds text.  Delivery is either a ``wa.me`` link opened by a
person, or ``WebhookMessenger`` posting to a messaging gateway.
"""
from __future__ import annotations

import logging
from urllib.parse import quote as urlquote

import requests

from rental.errors import MessagingError
from rental.integrations.http import ApiClient


def chat_link(destination: str, text: str) -> str:
    return f"https://wa.me/{destination}?text={urlquote(text, safe='')}"


def quote_update_message(quote) -> str:
    return (
        f"Hola, se ha generado/actualizado la cotización #{quote.id} "
        f"para el cliente {quote.client}. Por favor revisar."
    )


class WebhookMessenger:
    def __init__(self, webhook_url: str, token: str = "", timeout: int = 10) -> None:
        self.client = ApiClient(webhook_url, api_key=token, timeout=timeout)

    def send(self, destination: str, text: str) -> None:
        payload = {"chatId": f"{destination}@c.us", "message": text}
        try:
            self.client.post("", json=payload)
        except requests.RequestException as e:
            raise MessagingError(f"Could not deliver message to {destination}: {e}") from e
        logging.info("message sent to %s", destination)


def get_messenger(app) -> WebhookMessenger | None:
    url = app.config.get("MESSAGING_WEBHOOK_URL")
    if not url:
        return None
    return WebhookMessenger(
        url,
        token=app.config.get("MESSAGING_TOKEN", ""),
        timeout=app.config.get("HTTP_TIMEOUT", 10),
    )
