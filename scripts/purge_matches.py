from __future__ import annotations

import argparse

from api.core.matches import list_active_matches
from api.db.store import init_store


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Drop expired matches from the state file."
    )
    parser.add_argument(
        "--state-file",
        help="Path to the state file, defaults to STATE_FILE env or data/appData.json.",
    )
    args = parser.parse_args()
    store = init_store(args.state_file)
    active = list_active_matches(store)
    print(f"[matches] {len(active)} active matches remain in {store.path}")


if __name__ == "__main__":
    main()
