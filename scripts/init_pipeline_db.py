#!/usr/bin/env python3
import argparse
import json
import os
import sqlite3
import sys
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from db.schema import bootstrap_schema  # noqa: E402
from tools.assign_candidates import assign_candidates  # noqa: E402

DEMO_CANDIDATES = [
    {"name": "Ana Torres", "email": "ana.torres@example.com", "phone": "+34 600 000 001"},
    {"name": "Ben Okafor", "email": "ben.okafor@example.com"},
    {"name": "Chen Wei", "email": "chen.wei@example.com"},
    {"name": "Dana Levi", "email": "dana.levi@example.com", "phone": "+34 600 000 004"},
]


def parse_args():
    parser = argparse.ArgumentParser(description="Create the pipeline SQLite schema.")
    parser.add_argument(
        "--db",
        default="data/pipeline.db",
        help="SQLite DB path (default: data/pipeline.db).",
    )
    parser.add_argument(
        "--seed-demo",
        action="store_true",
        help="Assign a few demo candidates to --job-id after creating the schema.",
    )
    parser.add_argument(
        "--job-id",
        type=int,
        default=1,
        help="Job id used by --seed-demo (default: 1).",
    )
    parser.add_argument(
        "--recruiter-id",
        type=int,
        default=None,
        help="Recruiter assigned to seeded applications.",
    )
    parser.add_argument(
        "--specialist-id",
        type=int,
        default=None,
        help="Specialist assigned to seeded applications.",
    )
    return parser.parse_args()


def resolve_repo_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    repo_root = Path(__file__).resolve().parents[1]
    return repo_root / path


def main() -> int:
    args = parse_args()

    db_path = Path(os.getenv("PIPELINE_DB", args.db))
    db_path = resolve_repo_path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        bootstrap_schema(conn)
        count = conn.execute("SELECT COUNT(*) FROM applications").fetchone()[0]
    finally:
        conn.close()

    print(f"db: {db_path}")
    print(f"applications: {count}")

    if not args.seed_demo:
        return 0

    seed_args = {
        "job_id": args.job_id,
        "actor_role": "admin",
        "candidates": DEMO_CANDIDATES,
        "initial_status": "pending",
        "db_path": str(db_path),
    }
    if args.recruiter_id is not None:
        seed_args["recruiter_id"] = args.recruiter_id
    if args.specialist_id is not None:
        seed_args["specialist_id"] = args.specialist_id

    result = assign_candidates(seed_args)
    if "error" in result:
        print(json.dumps(result, indent=2), file=sys.stderr)
        return 1

    print(f"seeded: {result['created_count']} skipped: {result['skipped_count']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
