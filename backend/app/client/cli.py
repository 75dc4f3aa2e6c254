"""Terminal front-end for a mediation session.

    couple-resolve start            open a session and wait for your partner
    couple-resolve join AB12CD      join your partner's session
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

import httpx

from .api import ApiClient, ClientSettings
from .controller import MediationController
from .state import Partner1FormView, Partner2FormView, SolutionView, WaitingView


def _ask_perspective(controller: MediationController, name: Optional[str]) -> None:
    if name is None:
        name = input("Your name (optional): ").strip()
    print("Share your perspective (up to 1000 characters):")
    controller.edit(name=name, perspective=input("> "))


async def run_session(
    args: argparse.Namespace,
    settings: ClientSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    """Run one session in the terminal. Returns the process exit code."""
    controller = MediationController(
        ApiClient.from_settings(settings, transport=transport),
        poll_interval=settings.poll_interval_seconds,
        code_attempts=settings.session_code_attempts,
    )
    try:
        if args.command == "start":
            controller.start_as_partner1()
            print(f"Your session code is {controller.view.session_code}. Share it with your partner.")
        else:
            await controller.join(args.code)
            if controller.view.error:
                print(controller.view.error, file=sys.stderr)
                return 1

        _ask_perspective(controller, args.name)
        await controller.submit()
        while isinstance(controller.view, (Partner1FormView, Partner2FormView)) and controller.view.error:
            print(controller.view.error, file=sys.stderr)
            if isinstance(controller.view, Partner2FormView) and controller.view.perspective.strip():
                # The join or the solution request failed; resubmitting cannot help.
                return 1
            _ask_perspective(controller, args.name)
            await controller.submit()

        if isinstance(controller.view, WaitingView):
            print(f"Waiting for your partner to join with code {controller.view.session_code}...")
            await controller.wait_for_solution()

        view = controller.view
        if isinstance(view, SolutionView):
            print()
            print(view.solution)
            return 0
        print(view.error or "Session ended without a solution.", file=sys.stderr)
        return 1
    finally:
        await controller.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="couple-resolve", description=__doc__,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--api-url", help="Backend base URL (default: COUPLE_RESOLVE_API_BASE_URL)")
    parser.add_argument("--name", help="Your display name")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests and polling")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("start", help="Open a new session as partner 1")
    join = sub.add_parser("join", help="Join an existing session as partner 2")
    join.add_argument("code", help="6-character session code")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s [%(name)s] %(message)s",
    )
    settings = ClientSettings()
    if args.api_url:
        settings = settings.model_copy(update={"api_base_url": args.api_url})
    try:
        return asyncio.run(run_session(args, settings))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
