"""Tests for :mod:`useraccounts.fingerprint`."""

import pytest

from ..fingerprint import browser_family

AGENTS = [
    ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
     '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36', 'Chrome'),
    ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
     '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36 '
     'Edg/91.0.864.59', 'Edge'),
    ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
     '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36 '
     'OPR/77.0.4054.203', 'Opera'),
    ('Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:89.0) Gecko/20100101 '
     'Firefox/89.0', 'Firefox'),
    ('Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 '
     '(KHTML, like Gecko) Version/14.1.1 Safari/605.1.15', 'Safari'),
    ('Mozilla/5.0 (Windows NT 10.0; WOW64; Trident/7.0; rv:11.0) '
     'like Gecko', 'IE'),
    ('curl/7.68.0', 'Other'),
    ('', 'Other'),
    (None, 'Other'),
]


@pytest.mark.parametrize('user_agent,family', AGENTS)
def test_browser_family(user_agent, family):
    """User agents are reduced to a browser family."""
    assert browser_family(user_agent) == family


def test_version_does_not_matter():
    """Upgrading the browser keeps the same family."""
    assert browser_family('Mozilla/5.0 Firefox/88.0') \
        == browser_family('Mozilla/5.0 Firefox/89.0')
