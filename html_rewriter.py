"""
HTML rewriting for proxied pages.

Text-level substitutions over the serialized markup, applied in a fixed
order. Later rules see the output of earlier ones, so each pattern is
written to leave already-rewritten text alone.
"""
import re
from dataclasses import dataclass

from url_resolver import is_proxied, resolve_reference, to_proxied_url

ROOT_RELATIVE_ATTR_RE = re.compile(r'(href|src)="/(?!/)([^"]*?)"')
RELATIVE_ATTR_RE = re.compile(r'(href|src)="(?!http|//|mailto:|tel:|javascript:|#)([^"]*?)"')
CSS_URL_RE = re.compile(r'url\(["\']?/(?!/)([^"\')]*?)["\']?\)')
WINDOW_LOCATION_RE = re.compile(r'window\.location\s*=\s*["\']([^"\']*?)["\']')
LOCATION_HREF_RE = re.compile(r'location\.href\s*=\s*["\']([^"\']*?)["\']')
FORM_ACTION_RE = re.compile(r'<form([^>]*?)action="([^"]*?)"([^>]*?)>')
HEAD_RE = re.compile(r'<head(?:\s[^>]*)?>', re.IGNORECASE)
META_REFRESH_RE = re.compile(r'<meta[^>]*http-equiv=["\']refresh["\'][^>]*>', re.IGNORECASE)
FETCH_CALL_RE = re.compile(r'fetch\s*\(\s*["\']([^"\']*?)["\']')


@dataclass(frozen=True)
class RewriteContext:
    base_origin: str

    def proxied(self, value):
        return to_proxied_url(resolve_reference(self.base_origin, value))


def absolutize_root_relative(html, base_origin):
    """href="/x" and src="/x" -> direct absolute URLs on the page's origin"""
    return ROOT_RELATIVE_ATTR_RE.sub(
        lambda m: f'{m.group(1)}="{base_origin}/{m.group(2)}"', html
    )


def absolutize_relative(html, base_origin):
    return RELATIVE_ATTR_RE.sub(
        lambda m: f'{m.group(1)}="{base_origin}/{m.group(2)}"', html
    )


def absolutize_css_urls(html, base_origin):
    return CSS_URL_RE.sub(lambda m: f'url("{base_origin}/{m.group(1)}")', html)


def rewrite_navigation(html, ctx):
    """Keep window.location / location.href assignments inside the proxy"""
    def rewrite(target):
        def replace(match):
            value = match.group(1)
            if is_proxied(value):
                return match.group(0)
            return f'{target} = "{ctx.proxied(value)}"'
        return replace

    html = WINDOW_LOCATION_RE.sub(rewrite('window.location'), html)
    return LOCATION_HREF_RE.sub(rewrite('location.href'), html)


def rewrite_form_actions(html, ctx):
    def replace(match):
        before, action, after = match.groups()
        if not is_proxied(action):
            action = ctx.proxied(action)
        return f'<form{before}action="{action}"{after}>'

    return FORM_ACTION_RE.sub(replace, html)


def inject_base_tag(html, base_origin):
    return HEAD_RE.sub(
        lambda m: f'{m.group(0)}<base href="{base_origin}/">', html, count=1
    )


def strip_meta_refresh(html):
    return META_REFRESH_RE.sub('', html)


def rewrite_fetch_calls(html, ctx):
    def replace(match):
        value = match.group(1)
        if is_proxied(value):
            return match.group(0)
        return f'fetch("{ctx.proxied(value)}"'

    return FETCH_CALL_RE.sub(replace, html)


def rewrite_html(html, base_origin):
    """Route every reference in a page back through the proxy.

    Order matters: attributes are made absolute first (direct URLs, not
    proxied), then CSS, script navigation and forms, the <base> fallback,
    refresh stripping and finally inline fetch() calls.
    """
    ctx = RewriteContext(base_origin)

    html = absolutize_root_relative(html, ctx.base_origin)
    html = absolutize_relative(html, ctx.base_origin)
    html = absolutize_css_urls(html, ctx.base_origin)
    html = rewrite_navigation(html, ctx)
    html = rewrite_form_actions(html, ctx)
    html = inject_base_tag(html, ctx.base_origin)
    html = strip_meta_refresh(html)
    html = rewrite_fetch_calls(html, ctx)
    return html
