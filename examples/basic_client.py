"""
Basic client example using reqstream.

This example demonstrates building requests, sending data,
following redirects and handling the error types.
"""

import asyncio
import logging

from reqstream import Request, RequestError, RequestStatus, RequestTimeout

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def simple_get_request():
    """Demonstrate a simple GET request."""
    logger.info("Making simple GET request...")

    message = await (
        Request("http://httpbin.org/get", timeout=10000, accept_encoding=True)
        .set_query("page", 1)
        .set_header("Accept", "application/json")
        .send()
    )

    logger.info(f"Response status: {message.status_code} {message.reason}")
    logger.info(f"Content type: {message.content_type}")
    logger.info(f"Response body length: {len(message.content)} bytes")
    logger.info(f"Arguments echoed back: {message.json()['args']}")


async def post_json_request():
    """Demonstrate a POST request with a JSON body."""
    logger.info("Making POST request with JSON body...")

    request = Request("http://httpbin.org/post", timeout=10000)
    request.set_data({"name": "reqstream", "streaming": True})
    logger.info(f"Request: {request}")

    message = await request.send()
    logger.info(f"Server received: {message.json()['json']}")


async def redirect_request():
    """Demonstrate following redirects."""
    logger.info("Following redirects...")

    request = Request("http://httpbin.org/redirect/3", follow_redirects=True, max_redirects=5)
    message = await request.send()
    logger.info(f"Final URL: {request.url} ({message.status_code})")


async def error_handling():
    """Demonstrate the error types raised by send."""
    logger.info("Handling errors...")

    try:
        await Request("http://httpbin.org/status/418").send()
    except RequestStatus as e:
        logger.info(f"Status error: {e.code} {e.reason}")

    try:
        await Request("http://httpbin.org/delay/5", timeout=500).send()
    except RequestTimeout as e:
        logger.info(f"Timeout error: {e}")

    try:
        await Request("http://localhost:1/").send()
    except RequestError as e:
        logger.info(f"Generic error: {e} (cause: {type(e.cause).__name__})")


async def main():
    """Run all examples."""
    logger.info("Starting reqstream client examples...")

    try:
        await simple_get_request()
        print()

        await post_json_request()
        print()

        await redirect_request()
        print()

        await error_handling()

    except Exception as e:
        logger.error(f"Example failed: {e}")
        raise

    logger.info("All examples completed successfully!")


if __name__ == "__main__":
    asyncio.run(main())
