"""
Example usage of reqstream response streaming.

This example demonstrates receiving a response body chunk by chunk
through a callback, pausing the transfer for a slow consumer, and
decoding compressed chunks with ContentDecoder.
"""

import asyncio

from reqstream import ContentDecoder, Request, RequestAborted


async def progress_example():
    """Example: Streaming a download with progress tracking."""
    print("=== Download Progress Example ===")

    total_bytes = 0

    def on_chunk(message, chunk):
        nonlocal total_bytes
        total_bytes += len(chunk)
        print(f"Downloaded: {total_bytes} bytes (status {message.status_code})")

    request = Request("http://httpbin.org/bytes/102400", chunk_size=16384)
    message = await request.send(on_chunk)

    print(f"Total downloaded: {total_bytes} bytes")
    print(f"Accumulated content: {len(message.content)} bytes")


async def backpressure_example():
    """Example: Pausing reads until a slow consumer catches up."""
    print("\n=== Backpressure Example ===")

    async def slow_consumer(message, chunk):
        # Reading resumes once this coroutine finishes
        await asyncio.sleep(0.1)
        print(f"Processed {len(chunk)} bytes")

    await Request("http://httpbin.org/stream-bytes/20000?chunk_size=4096", chunk_size=4096).send(
        slow_consumer
    )


async def decode_example():
    """Example: Decoding compressed chunks in a callback."""
    print("\n=== Streaming Decode Example ===")

    decoded = []
    decoders = {}

    def on_chunk(message, chunk):
        decoder = decoders.setdefault(id(message), ContentDecoder.for_encodings(message.encodings))
        decoded.append(decoder.decode(chunk))

    message = await Request("http://httpbin.org/gzip", accept_encoding=True).send(on_chunk)
    decoded.append(decoders[id(message)].flush())

    print(f"Content-Encoding: {message.header('content-encoding')}")
    print(f"Decoded body: {len(b''.join(decoded))} bytes")


async def abort_example():
    """Example: Inspecting a partial message after an aborted transfer."""
    print("\n=== Aborted Transfer Example ===")

    try:
        await Request("http://httpbin.org/drip?duration=1&numbytes=10", timeout=5000).send()
    except RequestAborted as e:
        print(f"Aborted: {e}")
        print(f"Partial content: {e.partial.content!r} (invalid={e.partial.invalid})")
    else:
        print("Transfer completed without interruption")


async def main():
    """Run all streaming examples."""
    print("reqstream Streaming Examples")
    print("=" * 50)

    await progress_example()
    await backpressure_example()
    await decode_example()
    await abort_example()

    print("\n" + "=" * 50)
    print("All examples completed!")


if __name__ == "__main__":
    asyncio.run(main())
