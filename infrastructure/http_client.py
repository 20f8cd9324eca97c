import httpx

from domain.exceptions.pricing import NetworkFailure, UpstreamError, ValidationFailure

DEFAULT_TIMEOUT_SECONDS = 10.0

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


def create_http_client(timeout: float = DEFAULT_TIMEOUT_SECONDS) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers=DEFAULT_HEADERS,
        limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
    )


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    params: dict | None = None,
    origin: str = "upstream",
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> dict:
    """GET a JSON object, mapping every failure onto the pricing error taxonomy."""
    try:
        response = await client.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        data = response.json()

    except httpx.HTTPStatusError as e:
        raise UpstreamError(
            f"{origin} HTTP error {e.response.status_code}: {e.response.text[:200]}",
            status_code=e.response.status_code,
        ) from e
    except httpx.RequestError as e:
        # Timeouts are RequestErrors too
        raise NetworkFailure(f"{origin} request failed: {e.__class__.__name__}") from e
    except ValueError as e:
        raise ValidationFailure(f"{origin} response parsing error: {str(e)}") from e

    if not isinstance(data, dict):
        raise ValidationFailure(f"{origin} returned {type(data).__name__}, expected a JSON object")
    return data
