"""Identifies the client of a request: address, browser family and token."""

from typing import NamedTuple, Optional
import re

OTHER = 'Other'

# Order matters: most browsers also claim to be Safari or Mozilla.
BROWSER_FAMILIES = [
    ('Edge', re.compile(r'\bEdg(e|A|iOS)?/')),
    ('Opera', re.compile(r'\b(OPR|Opera)/')),
    ('Chrome', re.compile(r'\b(Chrome|CriOS|Chromium)/')),
    ('Firefox', re.compile(r'\b(Firefox|FxiOS)/')),
    ('Safari', re.compile(r'\bVersion/[\d.]+.*\bSafari/')),
    ('IE', re.compile(r'(\bMSIE |\bTrident/)')),
]


class Client(NamedTuple):
    """The fingerprint of a requesting client."""

    ip: str
    """Remote address of the client."""

    browser: str
    """Browser family, from :func:`browser_family`."""

    session_id: Optional[str] = None
    """Session token presented in the request cookie, if any."""


def browser_family(user_agent: Optional[str]) -> str:
    """
    Reduce a ``User-Agent`` header to a browser family name.

    Version numbers and platform are deliberately discarded, so that a
    browser update does not invalidate the sessions bound to it.
    """
    if not user_agent:
        return OTHER
    for family, pattern in BROWSER_FAMILIES:
        if pattern.search(user_agent):
            return family
    return OTHER
