"""Command-line watcher: open a host page and drive one embed load session.

    python -m embed_kit https://intranet.example.com/dashboard \\
        --target "https://app.powerbi.com/reportEmbed?reportId=..." --wait 90

Exits 0 when the report loaded, 1 otherwise.
"""
import argparse
import logging
import sys
import uuid

from .config import EmbedConfig

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return n


def _positive_float(value: str) -> float:
    f = float(value)
    if not f > 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return f


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="embed_kit",
        description="Load an embedded report inside a host page with timeout/retry handling.",
    )
    parser.add_argument("host_url", help="URL of the page hosting the report iframe")
    parser.add_argument("--target", default="",
                        help="Report URL to load (default: the frame's current src)")
    parser.add_argument("--timeout", type=_positive_float, default=10.0, help="Per-attempt load timeout (s)")
    parser.add_argument("--retries", type=_positive_int, default=3, help="Maximum automatic attempts")
    parser.add_argument("--retry-delay", type=float, default=2.0, help="Delay before a retry (s)")
    parser.add_argument("--frame-selector", default=".embed-frame")
    parser.add_argument("--container-selector", default="#embed")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--log-dir", default="", help="Write JSONL session events here")
    parser.add_argument("--failure-dir", default="", help="Save failure snapshots here")
    parser.add_argument("--wait", type=float, default=120.0,
                        help="Give up watching after this many seconds")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def config_from_args(args: argparse.Namespace, target: str) -> EmbedConfig:
    return EmbedConfig.from_dict({
        "embed_target": target,
        "load_timeout": args.timeout,
        "max_retry_attempts": args.retries,
        "retry_delay": args.retry_delay,
        "failure_snapshot_dir": args.failure_dir,
    })


def run(args: argparse.Namespace) -> int:
    from playwright.sync_api import sync_playwright

    from .browser import PlaywrightEmbedHost, open_host_page, wait_until_settled
    from .engine import LoadOrchestrator, TimerQueue
    from .telemetry import LoadEventLogger

    with sync_playwright() as p, open_host_page(p, args.host_url, headed=args.headed) as page:
        host = PlaywrightEmbedHost(
            page,
            frame_selector=args.frame_selector,
            container_selector=args.container_selector,
        )
        if not host.install():
            log.error(f"Frame {args.frame_selector!r} not found on {args.host_url}")
            return 1

        surface = host.get_surface()
        target = args.target or (surface.src if surface is not None else "")
        if not target:
            log.error("No --target given and the frame has no src")
            return 1
        if surface is not None and args.target and surface.src != args.target:
            surface.set_src(args.target)

        config = config_from_args(args, target)
        event_logger = None
        if args.log_dir:
            event_logger = LoadEventLogger(uuid.uuid4().hex[:12], target, log_dir=args.log_dir,
                                           host=args.host_url)
        try:
            orchestrator = LoadOrchestrator(config, host, TimerQueue(), event_logger=event_logger)

            def refresh():
                orchestrator.on_user_refresh_request()
                orchestrator.activate()

            host.bind_actions(orchestrator.on_user_retry_request, refresh)
            orchestrator.activate()
            result = wait_until_settled(page, orchestrator, timeout=args.wait)
        finally:
            if event_logger is not None:
                event_logger.close()

    if result.loaded:
        log.info(f"Report loaded after {result.elapsed:.1f}s")
        return 0
    log.error(f"Report not loaded: phase={result.phase} error={result.error_kind} "
              f"attempts={result.attempts} ({result.elapsed:.1f}s)")
    return 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
