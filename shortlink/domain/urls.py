from urllib.parse import urlsplit


def is_valid_http_url(url: str | None, max_len: int) -> bool:
    """
    Syntactic check for an http(s) URL with a host.

    Surrounding whitespace is ignored; reachability is not checked.
    """
    if url is None:
        return False
    url = url.strip()
    if not url or len(url) > max_len:
        return False
    if any(ch.isspace() for ch in url):
        return False
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return False
    if parts.scheme.lower() not in ("http", "https"):
        return False
    return bool(host and host.strip())
