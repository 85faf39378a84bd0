"""
Outbound requests to the proxied site.

The fetcher never follows redirects on its own for /website: the caller
has to see the raw 3xx and its Location so the hop can be rewritten into
a proxied URL before the browser follows it.
"""
from dataclasses import dataclass, field

import requests
from requests.structures import CaseInsensitiveDict

import proxy_config
from proxy_errors import SubmissionError, UpstreamUnavailableError

BROWSER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Accept-Encoding': 'gzip, deflate',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
}

FORM_HEADERS = {
    'Content-Type': 'application/x-www-form-urlencoded',
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36',
}


@dataclass
class UpstreamResponse:
    status_code: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: bytes = b''
    encoding: str = None
    url: str = None

    @property
    def is_redirect(self):
        return 300 <= self.status_code < 400

    @property
    def location(self):
        return self.headers.get('Location')

    @property
    def text(self):
        return self.body.decode(self.encoding or 'utf-8', errors='ignore')

    @classmethod
    def from_requests(cls, resp):
        # requests reports ISO-8859-1 for any text/* without a charset
        declared = 'charset=' in resp.headers.get('Content-Type', '').lower()
        return cls(
            status_code=resp.status_code,
            headers=CaseInsensitiveDict(resp.headers),
            body=resp.content,
            encoding=resp.encoding if declared else None,
            url=resp.url,
        )


def fetch_upstream(url, follow_redirects=False, timeout=None):
    """Issue the outbound request with the browser header profile"""
    timeout = timeout or proxy_config.UPSTREAM_TIMEOUT
    try:
        resp = requests.request(
            method='GET',
            url=url,
            headers=BROWSER_HEADERS,
            allow_redirects=follow_redirects,
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        raise UpstreamUnavailableError(e)

    return UpstreamResponse.from_requests(resp)


def submit_form(url, fields, timeout=None):
    """Resubmit a browser form to the target as urlencoded POST.

    ``fields`` is a list of (name, value) pairs so repeated fields survive.
    """
    timeout = timeout or proxy_config.UPSTREAM_TIMEOUT
    try:
        resp = requests.request(
            method='POST',
            url=url,
            headers=FORM_HEADERS,
            data=fields,
            allow_redirects=True,
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        raise SubmissionError(e)

    return UpstreamResponse.from_requests(resp)
