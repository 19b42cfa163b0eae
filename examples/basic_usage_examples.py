"""
Blocking WebDAV Usage Examples

To run this example:

    env WEBDAV_URL=https://dav.example.com/remote.php/webdav/ \
        WEBDAV_USERNAME=xxx \
        WEBDAV_PASSWORD=xxx \
    python ./examples/basic_usage_examples.py
"""
import sys
import tempfile
import threading
from pathlib import Path

## We'll try to use the local davclient library, not the system-installed
sys.path.insert(0, "..")
sys.path.insert(0, ".")

import davclient


def run_examples():
    """
    Run through all the examples, one by one
    """
    ## get_davclient reads the connection parameters from environment
    ## variables or the configuration file
    with davclient.get_davclient() as client:
        print_listing_demo(client)

        with tempfile.TemporaryDirectory() as tmpdir:
            local = Path(tmpdir) / "test.txt"
            local.write_bytes(b"Hello, WebDAV!\n")

            ## Upload a local file, and fetch it back
            print(f"Upload: {client.upload_file(str(local), '/test.txt').success}")
            copy = Path(tmpdir) / "copy.txt"
            outcome = client.download_file("test.txt", str(copy))
            print(f"Download: {outcome.success and copy.exists()}")

        directory_demo(client)
        callback_demo(client)

        print(f"Exists: {client.exists('test.txt').success}")
        print(f"Delete: {client.delete('test.txt').success}")
        print_listing_demo(client)


def print_listing_demo(client):
    """
    Print the members of the base collection
    """
    for name in client.list("/", relative_paths=True):
        print(f"    {name}")
    print()


def directory_demo(client):
    outcome = client.create_directory("NewFolder")
    print(f"CreateDirectory: {outcome.success} ({outcome.status})")
    print(f"Upload: {client.upload(b'some bytes', 'NewFolder/123.txt').success}")
    print_listing_demo(client)
    ## The trailing slash addresses the collection
    print(f"Delete: {client.delete('NewFolder/').success}")


def callback_demo(client):
    """
    The _async variants take a callback, which is called on the event
    loop thread of the client.  Blocking methods can't be used from
    there, but further _async calls can.
    """
    done = threading.Event()

    def after_listing(outcome):
        print(f"List - Status Code: {outcome.status}")
        for name in outcome:
            print(f"    {name}")
        done.set()

    client.list_async("/", relative_paths=True, callback=after_listing)
    done.wait()


if __name__ == "__main__":
    run_examples()
