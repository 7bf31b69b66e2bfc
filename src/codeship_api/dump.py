"""HTTP/1.1-style text dumps of requests and responses for verbose mode."""

import httpx


def _format_headers(headers: httpx.Headers) -> list[str]:
    return [
        f"{name.decode(headers.encoding)}: {value.decode(headers.encoding)}"
        for name, value in headers.raw
    ]


def _decode(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


def dump_request(request: httpx.Request, include_body: bool) -> str:
    """Render an outgoing request as wire-like text.

    Args:
        request: Fully built request. Its body must not be a stream.
        include_body: Whether to append the request body after the headers.

    Returns:
        Start line, ``Host`` and the remaining headers, a blank line, and
        the body when requested.
    """
    lines = [f"{request.method} {request.url.raw_path.decode('ascii')} HTTP/1.1"]
    if "Host" not in request.headers:
        lines.append(f"Host: {request.url.netloc.decode('ascii')}")
    lines.extend(_format_headers(request.headers))
    lines.append("")
    if include_body:
        lines.append(_decode(request.content))
    return "\n".join(lines)


def dump_response(response: httpx.Response) -> str:
    """Render a response, whose body has already been read, as wire-like text."""
    status_line = f"{response.http_version} {response.status_code}"
    if response.reason_phrase:
        status_line = f"{status_line} {response.reason_phrase}"
    lines = [status_line, *_format_headers(response.headers), ""]
    lines.append(_decode(response.content))
    return "\n".join(lines)
