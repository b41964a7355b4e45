"""Cache entry models and their plain-dict serialization."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

BOT_DEVICE_TYPE = "bot"


@dataclass(frozen=True)
class BotClient:
    """Crawler identified by the user-agent parser."""

    browser_name: str
    browser_version: str

    @property
    def device_type(self) -> str:
        return BOT_DEVICE_TYPE


@dataclass(frozen=True)
class BrowserClient:
    """Human client with browser and OS versions truncated to major.minor."""

    device_type: str
    browser_name: str
    browser_version: str
    os_name: str
    os_version: str


ClientInfo = Union[BotClient, BrowserClient]


def client_to_dict(client: ClientInfo) -> dict[str, str]:
    if isinstance(client, BotClient):
        return {
            "type": BOT_DEVICE_TYPE,
            "browser_name": client.browser_name,
            "browser_version": client.browser_version,
        }
    return {
        "type": client.device_type,
        "browser_name": client.browser_name,
        "browser_version": client.browser_version,
        "os_name": client.os_name,
        "os_version": client.os_version,
    }


def client_from_dict(data: dict[str, Any]) -> ClientInfo:
    if data.get("type") == BOT_DEVICE_TYPE:
        return BotClient(
            browser_name=str(data.get("browser_name") or ""),
            browser_version=str(data.get("browser_version") or ""),
        )
    return BrowserClient(
        device_type=str(data.get("type") or ""),
        browser_name=str(data.get("browser_name") or ""),
        browser_version=str(data.get("browser_version") or ""),
        os_name=str(data.get("os_name") or ""),
        os_version=str(data.get("os_version") or ""),
    )


@dataclass
class CountryEntry:
    """IP address -> country code, with the last time the IP was seen."""

    country_code: str
    last_seen: str

    def to_dict(self) -> dict[str, str]:
        return {"country_code": self.country_code, "last_seen": self.last_seen}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CountryEntry":
        return cls(country_code=str(data["country_code"]), last_seen=str(data.get("last_seen", "0")))


@dataclass
class ClientEntry:
    """User-agent hash -> parsed client, with the last time it was seen."""

    client: ClientInfo
    last_seen: str

    def to_dict(self) -> dict[str, str]:
        return {**client_to_dict(self.client), "last_seen": self.last_seen}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientEntry":
        return cls(client=client_from_dict(data), last_seen=str(data.get("last_seen", "0")))


@dataclass
class RetentionVisitor:
    """Pages a visitor viewed on one day.

    ``urls`` is an insertion-ordered set (dict keys) so saved files are reproducible.
    """

    pages: int = 0
    urls: dict[str, None] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"pages": self.pages, "urls": list(self.urls)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RetentionVisitor":
        return cls(pages=int(data.get("pages", 0)), urls=dict.fromkeys(data.get("urls", [])))


RetentionTable = dict[str, dict[str, RetentionVisitor]]
