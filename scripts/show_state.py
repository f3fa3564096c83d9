from __future__ import annotations

import argparse
from datetime import datetime, timezone

from api.core.matches import is_expired, now_ms
from api.db.store import init_store


def _fmt_ms(value: int) -> str:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Print users, preference profiles and matches."
    )
    parser.add_argument(
        "--state-file",
        help="Path to the state file, defaults to STATE_FILE env or data/appData.json.",
    )
    args = parser.parse_args()
    state = init_store(args.state_file).snapshot()
    now = now_ms()

    for user_id, user in state.users.items():
        prefs = user.preferences
        top = sorted(prefs.genre_weights.items(), key=lambda kv: kv[1], reverse=True)[:5]
        print(
            f"{user_id} ({user.display_name}): liked={len(user.liked)} "
            f"passed={len(user.passed)} watched={len(user.watched)} "
            f"avg_rating={prefs.avg_rating_affinity:.2f}"
        )
        for genre, weight in top:
            print(f"    {genre}: {weight:g}")

    print(f"matches: {len(state.matches)}")
    for match in state.matches:
        title = match.movie.title if match.movie else "?"
        status = "expired" if is_expired(match, now) else "live"
        print(f"    {match.movie_id} {title!r} {_fmt_ms(match.created_at)} [{status}]")


if __name__ == "__main__":
    main()
