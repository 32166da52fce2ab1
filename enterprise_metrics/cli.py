"""CLI commands for driving and inspecting the metrics service."""

import argparse
import random
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import NoReturn

import httpx
from dotenv import load_dotenv

DEFAULT_URL = "http://localhost:3000"

LOAD_ENDPOINTS = (
    ("POST", "/api/orders"),
    ("POST", "/api/users/register"),
    ("GET", "/api/users/active"),
    ("GET", "/api/cache/test"),
    ("GET", "/api/database/query"),
    ("GET", "/health"),
)
ERROR_ENDPOINT = ("GET", "/api/error")

# One extra hit on the error endpoint per this many iterations, on average
ERROR_ONE_IN = 20
PROGRESS_EVERY = 10


@dataclass
class LoadSummary:
    requests: int
    errors: int
    elapsed: float

    @property
    def average_rate(self) -> float:
        return self.requests / self.elapsed if self.elapsed > 0 else 0.0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="enterprise-metrics CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    load_parser = subparsers.add_parser(
        "generate-load",
        help="Send demo traffic to a running service",
    )
    load_parser.add_argument("--url", default=DEFAULT_URL, help="Service base URL")
    load_parser.add_argument(
        "--duration", type=float, default=60, help="Seconds to generate load for"
    )
    load_parser.add_argument(
        "--rate", type=float, default=2, help="Requests per second"
    )

    subparsers.add_parser(
        "show-metrics",
        help="Print the metric catalog as a fresh service would expose it",
    )

    return parser


def check_health(client: httpx.Client) -> bool:
    try:
        response = client.get("/health")
    except httpx.HTTPError:
        return False
    return response.is_success


def send_request(client: httpx.Client, method: str, path: str) -> bool:
    """Send one request; return False when it failed at the transport level."""
    try:
        if method == "POST":
            client.post(path, headers={"Content-Type": "application/json"})
        else:
            client.get(path)
    except httpx.HTTPError:
        return False
    return True


def run_load(
    client: httpx.Client,
    duration: float,
    rate: float,
    rng: random.Random | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> LoadSummary:
    """Send demo traffic until ``duration`` seconds have passed.

    Each iteration hits one random demo endpoint, and about one iteration in
    ``ERROR_ONE_IN`` additionally hits the error endpoint. Progress is printed
    every ``PROGRESS_EVERY`` requests.
    """
    rng = rng or random.Random()
    interval = 1.0 / rate
    start = clock()
    requests = 0
    errors = 0
    elapsed = 0.0

    while True:
        elapsed = clock() - start
        if elapsed >= duration:
            break

        method, path = rng.choice(LOAD_ENDPOINTS)
        if not send_request(client, method, path):
            errors += 1
        requests += 1

        if requests % PROGRESS_EVERY == 0:
            current_rate = requests / elapsed if elapsed > 0 else 0.0
            print(f"{elapsed:.0f}s | {requests} requests | {current_rate:.2f} req/s")

        if rng.randrange(ERROR_ONE_IN) == 0:
            send_request(client, *ERROR_ENDPOINT)

        sleep(interval)

    return LoadSummary(requests=requests, errors=errors, elapsed=elapsed)


def handle_generate_load(url: str, duration: float, rate: float) -> None:
    if rate <= 0 or duration <= 0:
        print("--rate and --duration must be positive", file=sys.stderr)
        sys.exit(1)

    print(f"Duration: {duration:g} seconds")
    print(f"Rate: {rate:g} requests/second")
    print(f"Target: {url}")

    with httpx.Client(base_url=url, timeout=10.0) as client:
        if not check_health(client):
            print(f"Application not reachable at {url}", file=sys.stderr)
            sys.exit(1)

        print("Application is running, starting load generation")
        summary = run_load(client, duration, rate)

    print("Load generation complete")
    print(f"Total requests: {summary.requests}")
    if summary.errors:
        print(f"Failed requests: {summary.errors}")
    print(f"Duration: {summary.elapsed:.0f} seconds")
    print(f"Average rate: {summary.average_rate:.2f} req/s")
    print(f"Raw metrics: {url}/metrics")


def handle_show_metrics() -> None:
    from enterprise_metrics import create_app

    app = create_app(skip_background_services=True)
    sys.stdout.write(app.container.metrics_registry().render())


def main() -> NoReturn:
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "generate-load":
        handle_generate_load(url=args.url, duration=args.duration, rate=args.rate)
    elif args.command == "show-metrics":
        handle_show_metrics()
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
