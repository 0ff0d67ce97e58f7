#!/usr/bin/env python3
"""CLI for checking whether a user is behind the latest published policies."""
from __future__ import annotations

import argparse
import json
import sys

import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session

from termsgate.app.config import load_config
from termsgate.app.errors import TermsGateError
from termsgate.app.services.identity import IdentityStore
from termsgate.app.services.required_action import ExternalTermsProvider, RequiredActionContext


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate the external terms gate for one user")
    parser.add_argument("username")
    parser.add_argument("--database-url", default="sqlite:///./termsgate.db")
    parser.add_argument("--timeout", type=float, default=10.0, help="HTTP timeout in seconds")
    parser.add_argument("--json", action="store_true")
    return parser.parse_args()


class _TimeoutSession(requests.Session):
    def __init__(self, timeout: float) -> None:
        super().__init__()
        self.timeout = timeout

    def request(self, *args, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return super().request(*args, **kwargs)


def main() -> int:
    args = parse_args()
    try:
        config = load_config()
    except TermsGateError as exc:
        print(exc, file=sys.stderr)
        return 2

    engine = create_engine(args.database_url, future=True)
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False)
    with _TimeoutSession(args.timeout) as http, SessionLocal() as db:
        provider = ExternalTermsProvider(http)
        provider.init(config)
        identity = IdentityStore(db)
        user = identity.find_by_username(args.username)
        if not user:
            print(f"User not found: {args.username}", file=sys.stderr)
            return 1
        context = RequiredActionContext(user=user, identity=identity)
        status = provider.evaluate_triggers(context)
        db.commit()
        summary = {
            "user_id": user.id,
            "username": user.username,
            "status": status.value,
            "accepted": identity.attributes(user.id),
            "latest": (
                {"tos": context.descriptor.tos_version, "privacy": context.descriptor.privacy_version}
                if context.descriptor
                else None
            ),
            "required_actions": identity.required_actions(user.id),
        }
        provider.close()

    if args.json:
        print(json.dumps(summary, indent=2, ensure_ascii=False))
    else:
        print(f"User: {summary['username']} ({summary['user_id']})")
        print(f"Status: {summary['status']}")
        for name, version in summary["accepted"].items():
            print(f"  {name}: {version}")
        print(f"Required actions: {', '.join(summary['required_actions']) or '-'}")
    return 1 if context.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
