import secrets

from fastapi import Header, HTTPException, Request


async def verify_api_key(request: Request, x_api_key: str | None = Header(default=None)) -> None:
    """Reject requests whose X-Api-Key header does not carry the configured API_SERVER_API_KEY.

    Raises:
        HTTPException: 401 if the header is missing or the key does not match.
    """
    helper_config = request.app.state.helper_config
    expected_key = helper_config.get_string_val("API_SERVER_API_KEY")
    if x_api_key is None or not secrets.compare_digest(x_api_key.encode("utf-8"), expected_key.encode("utf-8")):
        client_host = request.client.host if request.client else "unknown"
        helper_config.get_logger().warning("Rejected %s %s from %s: invalid or missing API key.", request.method, request.url.path, client_host)
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
