"""Tests for CLI command handlers."""

import random

import httpx
import pytest

import enterprise_metrics.cli as cli


class FakeClock:
    """Monotonic clock that only advances when slept on."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


def _client(requests: list[tuple[str, str]], status: int = 200) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append((request.method, request.url.path))
        return httpx.Response(status, json={})

    return httpx.Client(transport=httpx.MockTransport(handler), base_url="http://testserver")


class TestRunLoad:
    def test_sends_rate_times_duration_requests(self, capsys):
        requests: list[tuple[str, str]] = []
        clock = FakeClock()

        summary = cli.run_load(
            _client(requests), duration=10, rate=2, rng=random.Random(1),
            clock=clock, sleep=clock.sleep,
        )

        assert summary.requests == 20
        assert summary.errors == 0
        assert summary.average_rate == pytest.approx(2.0)
        demo_requests = [r for r in requests if r != cli.ERROR_ENDPOINT]
        assert len(demo_requests) == 20
        assert set(demo_requests) <= set(cli.LOAD_ENDPOINTS)

    def test_prints_progress_every_ten_requests(self, capsys):
        clock = FakeClock()

        cli.run_load(
            _client([]), duration=10, rate=2, rng=random.Random(1),
            clock=clock, sleep=clock.sleep,
        )

        progress = [line for line in capsys.readouterr().out.splitlines() if "requests |" in line]
        assert len(progress) == 2
        assert "10 requests" in progress[0]
        assert "20 requests" in progress[1]

    def test_occasionally_hits_error_endpoint(self):
        requests: list[tuple[str, str]] = []
        clock = FakeClock()

        cli.run_load(
            _client(requests), duration=500, rate=2, rng=random.Random(5),
            clock=clock, sleep=clock.sleep,
        )

        error_hits = requests.count(cli.ERROR_ENDPOINT)
        # About one in twenty of 1000 iterations
        assert 20 <= error_hits <= 90

    def test_transport_errors_are_counted(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://testserver")
        clock = FakeClock()

        summary = cli.run_load(
            client, duration=2, rate=2, rng=random.Random(1), clock=clock, sleep=clock.sleep
        )

        assert summary.requests == 4
        assert summary.errors == 4


class TestCheckHealth:
    def test_healthy(self):
        requests: list[tuple[str, str]] = []

        assert cli.check_health(_client(requests)) is True
        assert requests == [("GET", "/health")]

    def test_unhealthy_status(self):
        assert cli.check_health(_client([], status=503)) is False

    def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://testserver")

        assert cli.check_health(client) is False


class TestHandleGenerateLoad:
    def test_exits_when_service_unreachable(self, monkeypatch, capsys):
        monkeypatch.setattr(cli, "check_health", lambda client: False)

        with pytest.raises(SystemExit) as exc_info:
            cli.handle_generate_load("http://localhost:1", duration=1, rate=1)

        assert exc_info.value.code == 1
        assert "not reachable" in capsys.readouterr().err

    def test_rejects_non_positive_rate(self, capsys):
        with pytest.raises(SystemExit):
            cli.handle_generate_load("http://localhost:1", duration=1, rate=0)

    def test_prints_summary(self, monkeypatch, capsys):
        monkeypatch.setattr(cli, "check_health", lambda client: True)
        monkeypatch.setattr(
            cli, "run_load", lambda client, duration, rate: cli.LoadSummary(6, 0, 3.0)
        )

        cli.handle_generate_load("http://svc:3000", duration=3, rate=2)

        output = capsys.readouterr().out
        assert "Total requests: 6" in output
        assert "Average rate: 2.00 req/s" in output
        assert "http://svc:3000/metrics" in output


class TestShowMetrics:
    def test_prints_catalog(self, monkeypatch, capsys, test_settings):
        from enterprise_metrics.config import Settings

        monkeypatch.setattr(Settings, "load", classmethod(lambda cls, env=None: test_settings))

        cli.handle_show_metrics()

        output = capsys.readouterr().out
        assert "# TYPE orders_total counter" in output
        assert "# TYPE http_request_duration_seconds histogram" in output


class TestParser:
    def test_generate_load_defaults(self):
        args = cli.create_parser().parse_args(["generate-load"])

        assert args.url == cli.DEFAULT_URL
        assert args.duration == 60
        assert args.rate == 2
