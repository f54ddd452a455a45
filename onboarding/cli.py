from __future__ import annotations

import argparse
import getpass
import json
import os
import sys
from typing import List, Optional

from onboarding.core.config import DEFAULT_CONFIG_PATH, load_config
from onboarding.core.errors import OnboardingError
from onboarding.core.events.audit import AuditLog
from onboarding.core.keys import derive_key_pair_from_mnemonic
from onboarding.core.logger import setup_logging
from onboarding.core.mnemonic import codec
from onboarding.core.onboarding_app import OnboardingApp
from onboarding.core.registration.linking import CancellationToken
from onboarding.core.trace import trace_context


def _read_phrase(args: argparse.Namespace) -> str:
    if args.phrase:
        return args.phrase
    try:
        return getpass.getpass("Recovery password: ")
    except (EOFError, KeyboardInterrupt):
        raise SystemExit("Recovery password required.")


def _print(obj: dict) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False, sort_keys=True))


def cmd_generate(app: OnboardingApp, args: argparse.Namespace) -> int:
    print(app.orchestrator.generate_mnemonic(args.language))
    return 0


def cmd_derive(app: OnboardingApp, args: argparse.Namespace) -> int:
    kp = derive_key_pair_from_mnemonic(_read_phrase(args), args.language or app.cfg.mnemonic.default_language)
    _print({"account_id": kp.account_id, "ed25519_public_key": kp.ed25519_public_key.hex()})
    return 0


def cmd_register(app: OnboardingApp, args: argparse.Namespace) -> int:
    phrase = args.phrase or app.orchestrator.generate_mnemonic(args.language)
    account_id = app.orchestrator.register_fresh_account(phrase, args.language or app.cfg.mnemonic.default_language, args.name)
    out = {"account_id": account_id, "state": app.orchestrator.registration_state().value}
    if not args.phrase:
        out["recovery_password"] = phrase
    _print(out)
    return 0


def cmd_link(app: OnboardingApp, args: argparse.Namespace) -> int:
    token = CancellationToken()
    try:
        res = app.orchestrator.link_existing_account(_read_phrase(args), args.language or app.cfg.mnemonic.default_language, token)
    except KeyboardInterrupt:
        token.cancel()
        return 130
    if res.display_name is None and args.name:
        app.orchestrator.complete_linking(res.account_id, args.name)
    elif res.display_name and app.listener.is_running():
        app.channel.join()
    _print({"account_id": res.account_id, "display_name": res.display_name, "state": app.orchestrator.registration_state().value})
    return 0


def cmd_status(app: OnboardingApp, _args: argparse.Namespace) -> int:
    _print({"state": app.orchestrator.registration_state().value, "languages": codec.supported_languages()})
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="onboarding", description="Account identity and registration.")
    p.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to onboarding.json")
    p.add_argument("--language", default=None, help="Recovery password language (default from config)")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("generate", help="Print a new recovery password").set_defaults(func=cmd_generate)

    d = sub.add_parser("derive", help="Print the account id for a recovery password")
    d.add_argument("--phrase", default=None)
    d.set_defaults(func=cmd_derive)

    r = sub.add_parser("register", help="Register a new account")
    r.add_argument("--name", required=True, help="Display name")
    r.add_argument("--phrase", default=None, help="Use this recovery password instead of a generated one")
    r.set_defaults(func=cmd_register)

    lk = sub.add_parser("link", help="Restore an account from its recovery password")
    lk.add_argument("--phrase", default=None)
    lk.add_argument("--name", default=None, help="Display name to use if none is found")
    lk.set_defaults(func=cmd_link)

    sub.add_parser("status", help="Show registration state").set_defaults(func=cmd_status)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config)
    logger = setup_logging(cfg.logging.log_dir, cfg.logging.level, console=False)
    audit = AuditLog(os.path.join(cfg.logging.log_dir, "audit.jsonl"))
    app = OnboardingApp(cfg, logger=logger)
    app.start()
    with trace_context() as tid:
        try:
            code = int(args.func(app, args))
            audit.record(tid, f"cli.{args.command}", exit_code=code)
            return code
        except OnboardingError as e:
            logger.warning(f"[cli] {e.code}: {e.user_message}")
            audit.record(tid, f"cli.{args.command}", exit_code=2, error=e.to_dict())
            print(f"error: {e.user_message}", file=sys.stderr)
            return 2
        finally:
            app.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
