"""
Outbound collaborators: agreement documents and customer notifications.

The booking core only calls these at its trigger points (request received,
request decided, rental completed, rental deleted). Real PDF rendering and
email/WhatsApp delivery plug in by implementing the same methods.
"""

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalDocumentStore:
    """Writes an agreement summary per rental into a local directory."""

    def __init__(self, directory: str | os.PathLike, url_prefix: str = "/backups"):
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    def _path_for(self, ref: str) -> Path:
        return self.directory / os.path.basename(ref)

    def generate_agreement(self, rental, customer) -> str:
        """Write the agreement for a rental and return its reference."""
        self.directory.mkdir(parents=True, exist_ok=True)
        filename = f"agreement-{rental.id}.json"
        payload = {
            "rental": rental.to_dict(),
            "customer": customer.to_dict() if customer is not None else None,
        }
        tmp = self.directory / (filename + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        os.replace(tmp, self.directory / filename)
        logger.info("Agreement written for rental %s", rental.id)
        return f"{self.url_prefix}/{filename}"

    def remove(self, ref: str) -> bool:
        """Delete a previously generated document; False if it was already gone."""
        path = self._path_for(ref)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Agreement %s removed", ref)
        return True


class LogChannel:
    """Notification channel that only records the event in the log."""

    def __init__(self, name: str):
        self.name = name

    def notify(self, customer, event: str, **context) -> bool:
        logger.info("[%s] %s -> customer %s (%s)", self.name, event,
                    getattr(customer, "id", None), ", ".join(sorted(context)))
        return True


class Notifier:
    """
    Fans an event out to the configured channels ("email", "whatsapp", ...).
    Returns {channel: delivered}. A failing channel counts as not delivered.
    """

    def __init__(self, channels: dict | None = None):
        self.channels = dict(channels or {})

    def notify(self, customer, event: str, **context) -> dict:
        results = {}
        for name, channel in self.channels.items():
            try:
                results[name] = bool(channel.notify(customer, event, **context))
            except Exception:
                logger.exception("Notification channel %s failed for %s", name, event)
                results[name] = False
        return results
