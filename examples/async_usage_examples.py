#!/usr/bin/env python
"""
Async WebDAV Usage Examples

This module demonstrates the async API for the davclient library.
For blocking usage, see basic_usage_examples.py.

    from davclient.async_davclient import get_davclient

    async with get_davclient(url=..., username=..., password=...) as client:
        listing = await client.list("/", relative_paths=True)

To run this example:

    env WEBDAV_URL=https://dav.example.com/remote.php/webdav/ \
        WEBDAV_USERNAME=xxx \
        WEBDAV_PASSWORD=xxx \
    python ./examples/async_usage_examples.py
"""

import asyncio
import io
import sys

# Use local davclient library, not system-installed
sys.path.insert(0, "..")
sys.path.insert(0, ".")

from davclient.async_davclient import get_davclient


async def run_examples():
    """
    Run through all the async examples, one by one
    """
    async with get_davclient() as client:
        outcome = await client.upload(b"Hello, WebDAV!\n", "async-test.txt")
        print(f"Upload: {outcome.success} ({outcome.status})")

        sink = io.BytesIO()
        outcome = await client.download("async-test.txt", sink)
        print(f"Download: {outcome.success}, got {sink.getvalue()!r}")

        await parallel_operations_demo(client)

        outcome = await client.delete("async-test.txt")
        print(f"Delete: {outcome.success}")


async def parallel_operations_demo(client):
    """
    Demonstrate running multiple operations concurrently.
    """
    names = ["async-test.txt", "does-not-exist.txt"]
    outcomes = await asyncio.gather(*(client.exists(name) for name in names))
    for name, outcome in zip(names, outcomes):
        print(f"Exists {name}: {outcome.success} ({outcome.status})")


if __name__ == "__main__":
    asyncio.run(run_examples())
