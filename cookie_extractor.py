#!/usr/bin/env python3
"""
Cookie extraction for Pinterest Login
"""

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import TypeAdapter

from config import LOGGER
from models import Cookie, SameSite

_COOKIE_LIST = TypeAdapter(List[Cookie])


def _normalize_domain(domain: str) -> str:
    return domain.strip().lstrip(".").lower()


def domain_matches(cookie_domain: str, domain_filter: str) -> bool:
    """True when a cookie for ``cookie_domain`` belongs to ``domain_filter``.

    Covers an exact match, a parent-domain cookie (``.pinterest.com`` for
    ``www.pinterest.com``) and a subdomain cookie (``www.pinterest.com`` for
    ``pinterest.com``). Matching happens on whole labels only.
    """
    cookie_host = _normalize_domain(cookie_domain)
    wanted = _normalize_domain(domain_filter)
    if not cookie_host or not wanted:
        return False
    return (
        cookie_host == wanted
        or wanted.endswith("." + cookie_host)
        or cookie_host.endswith("." + wanted)
    )


def cookie_from_record(record: Mapping[str, Any]) -> Cookie:
    expires = record.get("expires")
    # Playwright reports session cookies with expires == -1
    if expires is not None and expires < 0:
        expires = None

    same_site: Optional[SameSite] = None
    if record.get("sameSite"):
        try:
            same_site = SameSite(record["sameSite"])
        except ValueError:
            LOGGER.debug(f"Unrecognised sameSite {record['sameSite']!r} on cookie {record['name']!r}")

    return Cookie(
        name=record["name"],
        value=record["value"],
        domain=record["domain"],
        path=record.get("path") or "/",
        expires=expires,
        secure=bool(record.get("secure", False)),
        http_only=bool(record.get("httpOnly", False)),
        same_site=same_site,
    )


async def extract_cookies(session, domain_filter: str) -> List[Cookie]:
    records = await session.read_cookies()
    LOGGER.debug(f"Browser reported {len(records)} cookies")

    cookies = [
        cookie_from_record(record)
        for record in records
        if domain_matches(record.get("domain", ""), domain_filter)
    ]
    LOGGER.info(f"Extracted {len(cookies)} cookies for {domain_filter}")
    return cookies


def cookies_to_dict(cookies: Iterable[Cookie]) -> Dict[str, str]:
    return {cookie.name: cookie.value for cookie in cookies}


def encode_cookies(cookies: Iterable[Cookie]) -> str:
    return json.dumps([cookie.model_dump(mode="json") for cookie in cookies], indent=2)


def decode_cookies(payload: str) -> List[Cookie]:
    return _COOKIE_LIST.validate_json(payload)
