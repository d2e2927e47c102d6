#!/usr/bin/env python3
"""Script to push documents into the RAG backend and rebuild the index.

Runs the upload → refresh → rebuild sequence for a batch of files and URLs.

Usage:
  python scripts/ingest.py docs/*.pdf --url https://example.com/guide [--no-rebuild]
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to sys.path so we can import ragpilot without installing it
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ragpilot.main import bootstrap


async def ingest(files: list[Path], urls: list[str], rebuild: bool) -> int:
    """Submit every document, then trigger one rebuild. Returns a process exit code."""
    workspace = bootstrap()
    await workspace.start()
    failures = 0

    try:
        for path in files:
            print(f"📄 Uploading {path.name}...")
            try:
                content = path.read_bytes()
            except OSError as e:
                print(f"  ❌ Cannot read {path}: {e}")
                failures += 1
                continue
            outcome = await workspace.ingestion.upload_file(content, path.name)
            if outcome.ok:
                print(f"  ✅ {outcome.display_message}")
            else:
                print(f"  ❌ {workspace.ingestion.state.last_error}")
                failures += 1

        for url in urls:
            print(f"🌐 Adding {url}...")
            outcome = await workspace.ingestion.add_url(url, "")
            if outcome.ok:
                print(f"  ✅ {outcome.display_message}")
            else:
                print(f"  ❌ {workspace.ingestion.state.last_error}")
                failures += 1

        snapshot = workspace.registry.snapshot
        print(f"📚 {len(snapshot.uploaded_files)} file(s) in {snapshot.storage_location or 'upload directory'}")

        if rebuild:
            print("🔁 Requesting index rebuild...")
            result = await workspace.indexer.rebuild_index()
            if result.ok:
                print(f"  ✅ {result.message} (the rebuild runs in the background)")
            else:
                print(f"  ❌ {workspace.indexer.state.last_error}")
                failures += 1
    finally:
        await workspace.aclose()

    return 1 if failures else 0


def main():
    parser = argparse.ArgumentParser(description="Upload documents to the RAG backend and rebuild its index.")
    parser.add_argument("files", nargs="*", type=Path, help="Local files to upload")
    parser.add_argument("--url", action="append", default=[], help="URL source to add (repeatable)")
    parser.add_argument("--no-rebuild", action="store_true", help="Skip the index rebuild")
    args = parser.parse_args()

    if not args.files and not args.url and args.no_rebuild:
        parser.error("nothing to do")

    sys.exit(asyncio.run(ingest(args.files, args.url, rebuild=not args.no_rebuild)))


if __name__ == "__main__":
    main()
