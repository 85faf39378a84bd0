from url_resolver import resolve_reference, to_proxied_url


def resolve_redirect(upstream, base_origin):
    """Map an upstream 3xx onto the proxied URL the client should go to next.

    Returns None when the response is not a redirect or carries no
    Location header; the caller then treats it as ordinary content.
    """
    if not upstream.is_redirect:
        return None

    location = upstream.location
    if not location:
        return None

    return to_proxied_url(resolve_reference(base_origin, location))
