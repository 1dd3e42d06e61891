import logging

from .models import EndpointConfig, PreparedRequest, RequestTemplate, SUPPORTED_METHODS

logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH")


def resolve_method(method: str) -> str:
    upper = (method or "").upper()
    if upper in SUPPORTED_METHODS:
        return upper
    logger.debug(f"Unsupported method {method!r}, falling back to GET")
    return "GET"


def build_request(template: RequestTemplate, config: EndpointConfig) -> PreparedRequest:
    """Turn a template into a fully specified request.

    Pure: the same template and config always give an equal descriptor, so
    retries can call this again instead of reusing the previous one.
    """
    method = resolve_method(template.method)
    headers = {**config.default_headers, **template.headers}
    body = template.body.encode("utf-8") if method in BODY_METHODS else None
    return PreparedRequest(
        method=method,
        url=config.base_url + template.endpoint,
        headers=headers,
        body=body,
        timeout_s=config.timeout_s,
    )
