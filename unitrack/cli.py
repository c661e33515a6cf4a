"""Command line front end: `unitrack serve` runs the API, other commands talk to it.

Invariants:
    - Every client command is one HTTP call (two for `start --limit` and
      `cancel --yes|--no`) against the local API and prints one line per result
    - A failed `start --limit` never leaves limit setup open on the server
    - Exit code 0 on success, 1 on an error envelope or an unreachable server
"""

import argparse
import sys
from datetime import timedelta
from typing import Any

import httpx
import uvicorn

from unitrack.api.routes.health import package_version
from unitrack.config import get_settings
from unitrack.core.rounding import format_clock


class CommandError(Exception):
    pass


def render_status(view: dict[str, Any]) -> str:
    pending = view.get("pending")
    if pending:
        return render_pending(pending)
    if view["state"] == "idle":
        return "idle"
    line = f"{view['state']} {view['issue_key']} {view['elapsed']} (ceil {view['rounded_preview']})"
    if view.get("limit_seconds"):
        line += f" limit {int(view['limit_seconds'] // 60)}m {int((view.get('progress') or 0) * 100)}%"
    return line


def render_pending(pending: dict[str, Any]) -> str:
    key = pending["issue_key"]
    match pending["kind"]:
        case "recovery":
            saved = format_clock(timedelta(seconds=pending.get("elapsed_at_save") or 0))
            return f"saved timer for {key} at {saved}; run `unitrack recover resume` or `unitrack recover discard`"
        case "limit":
            return f"limit setup open for {key}; run `unitrack start {key} --limit MINUTES` or `unitrack abort`"
        case _:
            return f"cancel pending for {key}; run `unitrack cancel --yes` to discard or `unitrack cancel --no` to keep timing"


def positive_minutes(raw: str) -> int:
    try:
        minutes = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid minutes: {raw!r}")
    if minutes <= 0:
        raise argparse.ArgumentTypeError("limit must be at least 1 minute")
    return minutes


class ApiClient:
    """Thin synchronous wrapper over the local API."""

    def __init__(self, base_url: str, transport: httpx.BaseTransport | None = None):
        self._client = httpx.Client(base_url=base_url, timeout=5.0, transport=transport)

    def call(self, method: str, path: str, body: dict | None = None) -> dict[str, Any]:
        try:
            response = self._client.request(method, f"/api/v1{path}", json=body)
        except httpx.HTTPError as e:
            raise CommandError(f"cannot reach unitrack server at {self._client.base_url}: {e}")
        try:
            payload = response.json()
        except ValueError:
            raise CommandError(f"unexpected response from server (HTTP {response.status_code})")
        if response.status_code >= 400:
            error = payload.get("error", {})
            raise CommandError(f"{error.get('code', response.status_code)}: {error.get('message', '')}")
        return payload

    def close(self) -> None:
        self._client.close()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="unitrack", description="Time Linear issues in 15-minute quanta.")
    p.add_argument("--version", action="version", version=f"%(prog)s {package_version()}")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the local timer server")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)

    sub.add_parser("status", help="show the timer")
    start = sub.add_parser("start", help="start timing an issue")
    start.add_argument("issue_key")
    start.add_argument("--limit", type=positive_minutes, metavar="MIN", help="auto-submit after MIN minutes")
    sub.add_parser("pause")
    sub.add_parser("resume")
    sub.add_parser("submit", help="stop and log rounded time")
    cancel = sub.add_parser("cancel", help="discard the running timer")
    answer = cancel.add_mutually_exclusive_group()
    answer.add_argument("--yes", dest="confirm", action="store_const", const=True, help="discard without asking again")
    answer.add_argument("--no", dest="confirm", action="store_const", const=False, help="keep the timer running")
    sub.add_parser("abort", help="abandon an open limit setup")
    recover = sub.add_parser("recover", help="answer the saved-timer question")
    recover.add_argument("decision", choices=["resume", "discard"])
    sub.add_parser("history", help="list issues timed before")
    return p


def run_command(ns: argparse.Namespace, api: ApiClient) -> str:
    match ns.command:
        case "status":
            return render_status(api.call("GET", "/timer"))
        case "start" if ns.limit is not None:
            api.call("POST", "/timer/limit-setup", {"issue_key": ns.issue_key})
            try:
                return render_status(api.call("POST", "/timer/limit", {"minutes": ns.limit}))
            except CommandError:
                api.call("DELETE", "/timer/limit-setup")
                raise
        case "abort":
            return render_status(api.call("DELETE", "/timer/limit-setup"))
        case "start":
            return render_status(api.call("POST", "/timer/start", {"issue_key": ns.issue_key}))
        case "pause" | "resume":
            return render_status(api.call("POST", f"/timer/{ns.command}"))
        case "submit":
            result = api.call("POST", "/timer/submit")
            entry = result.get("entry")
            if entry is None:
                return render_status(result["timer"])
            return f"submitted {entry['issue_key']} {entry['elapsed']} -> {entry['rounded']}"
        case "cancel":
            view = api.call("POST", "/timer/cancel")
            if ns.confirm is None:
                return render_status(view)
            return render_status(api.call("POST", "/timer/cancel/confirm", {"confirm": ns.confirm}))
        case "recover":
            body = {"resume": ns.decision == "resume"}
            return render_status(api.call("POST", "/timer/recovery", body))
        case "history":
            return "\n".join(api.call("GET", "/history")["issues"]) or "no issues yet"
    raise CommandError(f"unknown command {ns.command}")


def main(argv: list[str] | None = None, transport: httpx.BaseTransport | None = None) -> int:
    ns = build_parser().parse_args(sys.argv[1:] if argv is None else argv)
    settings = get_settings()

    if ns.command == "serve":
        uvicorn.run(
            "unitrack.main:app",
            host=ns.host or settings.host,
            port=ns.port or settings.port,
            log_level=settings.log_level.lower(),
        )
        return 0

    api = ApiClient(settings.base_url, transport=transport)
    try:
        print(run_command(ns, api))
    except CommandError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        api.close()
    return 0
