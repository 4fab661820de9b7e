from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from uploader import MetadataResolver, UploaderError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print the content type and size of a remote URL")
    parser.add_argument("url", help="HTTP(S) or FTP URL to probe")
    parser.add_argument("--block-local-ips", action="store_true", help="Refuse loopback/private/link-local targets")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return int(exc.code or 0)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    url = args.url
    if url.startswith('@'):
        url = url[1:]
    try:
        meta = asyncio.run(MetadataResolver().resolve(url, args.block_local_ips))
    except UploaderError as exc:
        print(f"Probe failed: {exc}", file=sys.stderr)
        return 1

    print("Content-Type:", meta.content_type or "unknown")
    print("Size:", meta.size if meta.size is not None else "unknown")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
