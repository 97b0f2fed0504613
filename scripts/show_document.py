#!/usr/bin/env python
"""Print one document from the configured store (Firestore or its emulator)."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from agent_router.core.settings import ConfigurationError, get_settings
from agent_router.infrastructure import FirestoreDocumentStore, resolve_gcp_auth


async def _fetch(collection: str, doc_id: str) -> dict | None:
    settings = get_settings()
    auth, project_id = resolve_gcp_auth(settings.gcp_access_token, settings.google_cloud_project)
    if not project_id:
        raise ConfigurationError("GOOGLE_CLOUD_PROJECT is not set")
    store = FirestoreDocumentStore(
        project_id,
        database=settings.firestore_database,
        auth=auth,
        emulator_host=settings.firestore_emulator_host,
    )
    try:
        return await store.get(collection, doc_id)
    finally:
        await store.aclose()


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Show an execution record or the commander state")
    parser.add_argument("doc_id", nargs="?", default="current", help="Document id (default: current)")
    parser.add_argument("--collection", default=None, help="Collection name")
    args = parser.parse_args()

    if settings.mock_gcp_services:
        print("MOCK_GCP_SERVICES is enabled; the in-memory store is not reachable from here.", file=sys.stderr)
        return 1

    collection = args.collection
    if collection is None:
        collection = settings.commander_collection if args.doc_id == "current" else settings.firestore_collection

    try:
        document = asyncio.run(_fetch(collection, args.doc_id))
    except ConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    if document is None:
        print(f"{collection}/{args.doc_id} not found", file=sys.stderr)
        return 1
    print(json.dumps(document, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
