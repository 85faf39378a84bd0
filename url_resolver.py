"""
URL resolution for the website proxy.

A target arrives as whatever the user typed: a bare host (``example.com``),
a host with a path, or a full ``http(s)://`` URL. ``resolve_target`` turns it
into a ``ResolvedTarget`` with a browser-style origin. The remaining helpers
build the ``/website?url=...`` form every rewritten reference converges to.
"""
import re
from dataclasses import dataclass
from urllib.parse import quote, unquote, urljoin, urlsplit

from proxy_errors import InvalidTargetError

PROXY_ROUTE = '/website'
PROXY_PREFIX = PROXY_ROUTE + '?url='

DEFAULT_SCHEME = 'https'
DEFAULT_PORTS = {'http': 80, 'https': 443}

SCHEME_RE = re.compile(r'^https?://', re.IGNORECASE)
INVALID_HOST_CHARS = re.compile(r'[\s<>"{}|\\^`%]')

# encodeURIComponent leaves these unescaped on top of quote()'s own set
_COMPONENT_SAFE = "!~*'()"


@dataclass(frozen=True)
class ResolvedTarget:
    url: str
    scheme: str
    host: str
    origin: str
    path: str
    query: str


def has_scheme(value):
    return bool(SCHEME_RE.match(value))


def resolve_target(raw_target):
    """Normalize a bare host or absolute URL into a ResolvedTarget.

    Raises InvalidTargetError when nothing usable is left after the
    https default is applied (empty host, illegal host characters, a
    port that is not a number, ...).
    """
    if raw_target is None:
        raise InvalidTargetError(raw_target)

    candidate = raw_target.strip()
    if not candidate:
        raise InvalidTargetError(raw_target)
    if not has_scheme(candidate):
        candidate = f'{DEFAULT_SCHEME}://{candidate}'

    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        raise InvalidTargetError(raw_target)

    if not hostname or INVALID_HOST_CHARS.search(hostname):
        raise InvalidTargetError(raw_target)

    scheme = parts.scheme.lower()
    host = f'[{hostname}]' if ':' in hostname else hostname
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        host = f'{host}:{port}'

    return ResolvedTarget(
        url=candidate,
        scheme=scheme,
        host=host,
        origin=f'{scheme}://{host}',
        path=parts.path or '/',
        query=parts.query,
    )


def encode_component(value):
    """Percent-encode the way a browser's encodeURIComponent does"""
    return quote(value, safe=_COMPONENT_SAFE)


def to_proxied_url(absolute_url):
    return PROXY_PREFIX + encode_component(absolute_url)


def is_proxied(value):
    return value.startswith(PROXY_PREFIX)


def unwrap_proxied_url(value):
    """Return the absolute URL carried by a ProxiedURL"""
    if not is_proxied(value):
        raise ValueError(f'not a proxied URL: {value!r}')
    return unquote(value[len(PROXY_PREFIX):])


def resolve_reference(base_origin, value):
    """Resolve a page reference against the origin of the page it came from.

    Absolute references pass through, protocol-relative ones pick up the
    base scheme, everything else is joined onto ``base_origin + '/'``.
    """
    if has_scheme(value):
        return value
    return urljoin(base_origin + '/', value)
