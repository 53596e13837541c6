from __future__ import annotations
import argparse
import json
from pathlib import Path
import uvicorn
from .settings import Settings
from .logging_setup import setup_logging, get_logger
from .fs_layout import build_layout, ensure_dirs
from .config_loader import load_realm
from .builder import RealmBuilder
from .supervisor import RunSupervisor
from .errors import NeptuneError
from .api import create_app

log = get_logger("neptune.cli")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="neptune")
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen_p = sub.add_parser("generate", aliases=["gen"], help="Build a realm's server files once and exit")
    gen_p.add_argument("realm")

    run_p = sub.add_parser("run", help="Build, sync into a run directory, start and supervise the server")
    run_p.add_argument("realm")
    run_p.add_argument("run_dir", type=Path)

    plan_p = sub.add_parser("plan", help="Print a dry-run build plan as JSON and exit")
    plan_p.add_argument("realm")

    api_p = sub.add_parser("api", help="Run REST API (FastAPI)")
    api_p.add_argument("--host", default="0.0.0.0")
    api_p.add_argument("--port", type=int, default=8000)
    return parser

def main(argv=None, settings: Settings | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or Settings()
    setup_logging(settings)
    layout = build_layout(settings)

    try:
        if args.cmd in ("generate", "gen"):
            ensure_dirs(layout)
            realm = load_realm(layout, args.realm)
            out = RealmBuilder(layout).build(realm)
            log.info("Realm %s generated in %s", realm.id, out)
            return 0

        if args.cmd == "plan":
            plan = RealmBuilder(layout).plan(load_realm(layout, args.realm))
            print(json.dumps(plan.to_dict(), indent=2, ensure_ascii=False))
            return 0 if plan.ok else 1

        if args.cmd == "run":
            ensure_dirs(layout)
            sup = RunSupervisor(settings, args.realm, args.run_dir)
            try:
                sup.run_forever()
            except KeyboardInterrupt:
                log.info("Interrupted, shutting down.")
                return 130
            return 0

        if args.cmd == "api":
            uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level=settings.log_level.lower())
            return 0
    except (NeptuneError, OSError) as e:
        log.error("%s", e)
        log.debug("Failure details", exc_info=True)
        return 1

    return 2

def entrypoint() -> None:
    raise SystemExit(main())
