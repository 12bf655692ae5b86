# sitebuilder/cli.py
"""
Terminal client for the relay.

    sitebuilder-chat [--relay-url URL] [--out-dir DIR] [prompt]

Type a message to create a chat (first message) or continue it. Commands:
    /new            start a new conversation
    /files          list generated files
    /show NAME      print a file
    /save NAME      write a file under --out-dir
    /zip            write all files as project-YYYY-MM-DD.zip under --out-dir
    /demo           print the preview URL
    /quit           exit
"""
import argparse
import logging
import sys

from .core.errors import RelayError, RequestValidationFailed
from .core.relay_client import SiteBuilderClient
from .utils import config
from .utils.file_helpers import write_file, write_project_zip

logger = logging.getLogger(__name__)


def _print_files(client: SiteBuilderClient) -> None:
    files = client.session.files
    if not files:
        print("No files available")
        return
    print(f"Generated Files ({len(files)})")
    for f in files:
        print(f"  {f.name:<40} {f.type.upper():<12} {f.size / 1024:.1f} KB")


def _find(client: SiteBuilderClient, name: str):
    for f in client.session.files:
        if f.name == name:
            return f
    print(f"error: no file named {name}")
    return None


def _send(client: SiteBuilderClient, prompt: str) -> None:
    try:
        client.send(prompt)
    except RequestValidationFailed as e:
        print(f"error: {e.message}")
        return
    except RelayError as e:
        print(f"Error: {e.message}")
        return
    print(f"assistant> {client.session.transcript[-1]['content']}")
    if client.session.demo_url:
        print(f"demo: {client.session.demo_url}")
    _print_files(client)


def _handle_command(client: SiteBuilderClient, line: str, out_dir: str) -> bool:
    cmd, _, arg = line.partition(" ")
    arg = arg.strip()
    if cmd in ("/quit", "/exit"):
        return False
    if cmd == "/new":
        client.new_conversation()
        print("Started a new conversation")
    elif cmd == "/files":
        _print_files(client)
    elif cmd == "/show":
        f = _find(client, arg)
        if f:
            print(f.content)
    elif cmd == "/save":
        f = _find(client, arg)
        if f:
            path = write_file(f, out_dir)
            print(f"wrote {path}" if path else f"error: unsafe file name {f.name}")
    elif cmd == "/zip":
        if not client.session.files:
            print("No files to download")
        else:
            print(f"wrote {write_project_zip(client.session.files, out_dir)}")
    elif cmd == "/demo":
        print(client.session.demo_url or "No demo available")
    else:
        print(f"error: unknown command: {cmd}")
    return True


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sitebuilder-chat", description="Chat with the SiteBuilder relay.")
    parser.add_argument("--relay-url", default=config.RELAY_URL)
    parser.add_argument("--out-dir", default=".")
    parser.add_argument("prompt", nargs="*", help="optional first message")
    return parser


def main(argv=None) -> None:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL)
    client = SiteBuilderClient(base_url=args.relay_url)

    if args.prompt:
        _send(client, " ".join(args.prompt))

    while True:
        try:
            line = input("you> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not line:
            continue
        if line.startswith("/"):
            if not _handle_command(client, line, args.out_dir):
                break
            continue
        _send(client, line)


if __name__ == "__main__":
    sys.exit(main())
