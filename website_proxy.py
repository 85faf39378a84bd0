#!/usr/bin/env python3
"""
WEBSITE PROXY - fetch a page on the client's behalf and keep it proxied
Rewrites links, assets, forms and script navigation so every follow-up
request flows back through /website?url=...
"""
from flask import Flask, Response, jsonify, redirect, request
from flask_cors import CORS

import proxy_config
from html_rewriter import absolutize_root_relative, rewrite_html
from proxy_config import configure_logging, log_request, logger
from proxy_errors import MissingParameterError, ProxyError
from redirect_resolver import resolve_redirect
from upstream_fetcher import fetch_upstream, submit_form
from url_resolver import resolve_target

app = Flask(__name__)
CORS(app, send_wildcard=True)
configure_logging()

# =============================================================================
# RESPONSE ASSEMBLY
# =============================================================================

def html_response(html, status=200):
    """Rewritten page with permissive CORS and framing headers"""
    return Response(html, status=status, mimetype='text/html', headers={
        'Access-Control-Allow-Origin': '*',
        'X-Frame-Options': 'ALLOWALL',
    })


@app.errorhandler(ProxyError)
def handle_proxy_error(error):
    level = 'warning' if error.status_code < 500 else 'error'
    getattr(logger, level)(f"{request.method} {request.path} failed: {error.message}")
    return jsonify(error.to_dict()), error.status_code


def target_param():
    raw_target = request.args.get('url')
    if not raw_target:
        raise MissingParameterError()
    return raw_target

# =============================================================================
# /website - full rewrite proxy
# =============================================================================

@app.route('/website', methods=['GET'])
def website():
    """Fetch the target, bounce redirects through the proxy, rewrite HTML"""
    target = resolve_target(target_param())
    log_request('website', 'GET', target.url)

    try:
        upstream = fetch_upstream(target.url)
    except ProxyError as e:
        log_request('website', 'GET', target.url, f"✗ {e.message}")
        raise

    next_url = resolve_redirect(upstream, target.origin)
    if next_url:
        log_request('website', 'GET', target.url, f"↪ {upstream.status_code} {next_url}")
        return redirect(next_url)

    html = rewrite_html(upstream.text, target.origin)
    log_request('website', 'GET', target.url, f"✓ {len(html)}b")
    return html_response(html)


@app.route('/website', methods=['POST'])
def website_form():
    """Resubmit a proxied form to the target.

    The reply body is passed back as-is unless REWRITE_FORM_RESPONSES is on.
    """
    target = resolve_target(target_param())
    fields = list(request.form.items(multi=True))
    log_request('form', 'POST', target.url)

    try:
        upstream = submit_form(target.url, fields)
    except ProxyError as e:
        log_request('form', 'POST', target.url, f"✗ {e.message}")
        raise

    html = upstream.text
    if proxy_config.REWRITE_FORM_RESPONSES:
        html = rewrite_html(html, target.origin)

    log_request('form', 'POST', target.url, f"✓ {upstream.status_code} {len(html)}b")
    return html_response(html)

# =============================================================================
# /fetch - simplified variant (root-relative attributes only)
# =============================================================================

@app.route('/fetch')
def fetch_page():
    target = resolve_target(target_param())
    log_request('fetch', 'GET', target.url)

    try:
        upstream = fetch_upstream(target.url, follow_redirects=True)
    except ProxyError as e:
        log_request('fetch', 'GET', target.url, f"✗ {e.message}")
        raise

    html = absolutize_root_relative(upstream.text, target.origin)
    log_request('fetch', 'GET', target.url, f"✓ {len(html)}b")
    return html_response(html)

# =============================================================================
# HOMEPAGE
# =============================================================================

@app.route('/')
def index():
    """Usage page"""
    html = '''
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Website Proxy</title>
    <style>
        body { font-family: system-ui, -apple-system, sans-serif; max-width: 720px; margin: 40px auto; color: #333; }
        code { background: #f4f4f4; padding: 2px 6px; border-radius: 4px; }
        li { margin: 8px 0; }
    </style>
</head>
<body>
    <h1>Website Proxy</h1>
    <form action="/website" method="get">
        <input name="url" placeholder="example.com" size="40">
        <button type="submit">Go</button>
    </form>
    <ul>
        <li><code>GET /website?url=example.com</code> rewritten page, redirects stay proxied</li>
        <li><code>POST /website?url=...</code> forwards a form submission</li>
        <li><code>GET /fetch?url=example.com</code> page with root-relative links fixed</li>
    </ul>
</body>
</html>
'''
    return Response(html, mimetype='text/html')

# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    logger.info(f"Website proxy running on port {proxy_config.PORT}")
    logger.info(f"Usage: http://localhost:{proxy_config.PORT}/website?url=example.com")
    logger.info(f"Or: http://localhost:{proxy_config.PORT}/fetch?url=example.com")

    app.run(host=proxy_config.HOST, port=proxy_config.PORT, debug=False, threaded=True)
