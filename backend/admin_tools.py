#!/usr/bin/env python3
"""
Offline admin helpers for the configured store.

    python admin_tools.py hash <secret>      # digest for ADMIN_PASSWORD_HASH
    python admin_tools.py users              # list accounts
    python admin_tools.py export [file]      # snapshot to file or stdout
    python admin_tools.py import <file>      # replace ALL data
    python admin_tools.py clear --yes        # delete ALL data
"""
import argparse
import json
import sys

from auth import digest_secret
from errors import CheckmateError
from services.admin_service import AdminService
from stores import get_store


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Checkmate admin tools")
    parser.add_argument("--backend", choices=["sql", "json"], help="override STORE_BACKEND")
    sub = parser.add_subparsers(dest="command", required=True)

    hash_cmd = sub.add_parser("hash", help="print the SHA-256 digest of a secret")
    hash_cmd.add_argument("secret")

    sub.add_parser("users", help="list accounts with their check-in counts")

    export_cmd = sub.add_parser("export", help="write the full snapshot as JSON")
    export_cmd.add_argument("file", nargs="?")

    import_cmd = sub.add_parser("import", help="replace all data with a snapshot file")
    import_cmd.add_argument("file")

    clear_cmd = sub.add_parser("clear", help="delete every account and check-in")
    clear_cmd.add_argument("--yes", action="store_true", help="confirm the deletion")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "hash":
        print(digest_secret(args.secret))
        return 0

    store = get_store(args.backend)
    try:
        if args.command == "users":
            users = AdminService.list_users(store)
            print(f"Total users: {len(users)}")
            for u in users:
                print(f"{u['username']}: {u['checkin_count']} check-ins, last {u['last_checkin'] or 'Never'}")

        elif args.command == "export":
            text = json.dumps(AdminService.export(store), ensure_ascii=False, indent=2)
            if args.file:
                with open(args.file, "w", encoding="utf-8") as f:
                    f.write(text + "\n")
                print(f"Exported to {args.file}")
            else:
                print(text)

        elif args.command == "import":
            with open(args.file, encoding="utf-8") as f:
                data = json.load(f)
            summary = AdminService.import_data(store, data)
            print(f"Imported {summary['users']} user(s) and {summary['checkins']} check-in(s)")

        elif args.command == "clear":
            if not args.yes:
                print("Refusing to delete all data without --yes", file=sys.stderr)
                return 2
            AdminService.clear_all(store)
            print("All data has been cleared.")
    except CheckmateError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
