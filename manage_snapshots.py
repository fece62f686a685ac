#!/usr/bin/env python3
"""
Snapshot Management Utility

This script provides utilities to manage stored snapshots:
- List all snapshots
- Show the snapshot of a specific website
- Show snapshot statistics
- Reset a website so the next run treats it as a first run
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from monitor.exceptions import MonitorError
from monitor.models import Found
from monitor.snapshot_store import SnapshotStore
from utilities.config import get_settings
from utilities.logger import setup_logging


def list_all_snapshots(store: SnapshotStore) -> None:
    """List all stored snapshots."""
    print("\n" + "="*80)
    print("📋 ALL SNAPSHOTS")
    print("="*80)

    snapshots = store.list_snapshots()

    if not snapshots:
        print(f"❌ No snapshots found in {store.directory}")
        return

    print(f"✅ Found {len(snapshots)} snapshots:")
    print()

    for i, snapshot in enumerate(snapshots, 1):
        print(f"{i:3d}. {snapshot.name}")
        print(f"     URL: {snapshot.url}")
        print(f"     Last check: {snapshot.last_check}")
        print(f"     Changes: {snapshot.change_count}  Errors: {snapshot.error_count}")
        print(f"     Content Hash: {snapshot.current.hash[:16]}...")
        print()


def find_snapshot_by_url(store: SnapshotStore, url: str) -> None:
    """Show the snapshot of a specific website."""
    print(f"\n🔍 SEARCHING FOR SNAPSHOT")
    print(f"URL: {url}")
    print("="*80)

    print(f"Snapshot file: {store.path_for(url)}")

    loaded = store.load(url)
    if not isinstance(loaded, Found):
        print("❌ No snapshot found for this URL")
        return

    snapshot = loaded.snapshot
    print("✅ SNAPSHOT FOUND:")
    print(f"   Name: {snapshot.name}")
    print(f"   Selector: {snapshot.selector or '(full page)'}")
    print(f"   Enabled: {snapshot.enabled}")
    print(f"   Last check: {snapshot.last_check}")
    print(f"   Change count: {snapshot.change_count}")
    print(f"   Error count: {snapshot.error_count}")
    print(f"   Current: {snapshot.current.timestamp} (HTTP {snapshot.current.status})")
    print(f"   Current Hash: {snapshot.current.hash}")
    if snapshot.previous:
        print(f"   Previous: {snapshot.previous.timestamp} (HTTP {snapshot.previous.status})")
        print(f"   Previous Hash: {snapshot.previous.hash}")


def show_statistics(store: SnapshotStore) -> None:
    """Show snapshot statistics."""
    print("\n📊 SNAPSHOT STATISTICS")
    print("="*80)

    stats = store.get_stats()

    print(f"📁 Directory: {store.directory}")
    print(f"📋 Total snapshots: {stats['total_snapshots']}")
    print(f"🔄 Total changes recorded: {stats['total_changes']}")
    print(f"❌ Total errors recorded: {stats['total_errors']}")
    print(f"⚠️  Websites with errors: {stats['with_errors']}")
    print(f"⏸️  Disabled websites: {stats['disabled']}")


def reset_snapshot(store: SnapshotStore, url: str) -> None:
    """Delete the snapshot of a website."""
    print(f"\n🧹 RESETTING SNAPSHOT")
    print(f"URL: {url}")
    print("="*80)

    if store.delete(url):
        print("✅ Snapshot deleted; the next run will record a new initial snapshot")
    else:
        print("❌ No snapshot found for this URL")


def main() -> int:
    """Main function."""
    if len(sys.argv) < 2:
        print("Usage: python manage_snapshots.py [list|find|stats|reset] [url]")
        print()
        print("Commands:")
        print("  list     - List all snapshots")
        print("  find     - Show the snapshot of a specific URL")
        print("  stats    - Show snapshot statistics")
        print("  reset    - Delete the snapshot of a specific URL")
        print()
        print("Examples:")
        print("  python manage_snapshots.py list")
        print("  python manage_snapshots.py find 'https://example.com/news'")
        print("  python manage_snapshots.py stats")
        print("  python manage_snapshots.py reset 'https://example.com/news'")
        return 1

    command = sys.argv[1].lower()

    try:
        settings = get_settings()
    except MonitorError as e:
        print(f"❌ {e}")
        return 1

    # Setup logging
    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.get_log_file_path(),
        debug=settings.debug
    )

    store = SnapshotStore(settings.get_snapshots_path())

    try:
        if command == "list":
            list_all_snapshots(store)
        elif command in ("find", "reset"):
            if len(sys.argv) < 3:
                print(f"❌ Error: URL required for {command} command")
                print(f"Usage: python manage_snapshots.py {command} <url>")
                return 1
            if command == "find":
                find_snapshot_by_url(store, sys.argv[2])
            else:
                reset_snapshot(store, sys.argv[2])
        elif command == "stats":
            show_statistics(store)
        else:
            print(f"❌ Unknown command: {command}")
            print("Available commands: list, find, stats, reset")
            return 1
    except MonitorError as e:
        print(f"❌ Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
