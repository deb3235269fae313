"""HTTP surface: form parsing, status codes and response bodies."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app, limiter
from src.chain.errors import ErrorKind
from src.launcher.persistence import TokenRecord
from src.launcher.service import LaunchResult, TokenLauncher

MINT = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
SIGNATURE = "5VERv8NMvzbJMEkV8xnrLkEaWRtSz9CosKDYjCJjBRnbJLgp8uirBgmQpjKhoR4tjF3ZpRzrFmBV6UjKdiSZkQUW"


def _launched(status: str = "bonding") -> LaunchResult:
    record = TokenRecord(
        token_mint=MINT,
        token_name="Moon",
        token_symbol="MOON",
        creator_address="Creator111",
        metadata_uri="https://gw.test/ipfs/Qm",
        status=status,
        signature=SIGNATURE,
    )
    return LaunchResult(ok=True, record=record, slot=4242)


@pytest.fixture(autouse=True)
def _no_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def launcher() -> MagicMock:
    mock = MagicMock(spec=TokenLauncher)
    mock.create_pumpfun_token = AsyncMock(return_value=_launched())
    mock.create_launchlab_token = AsyncMock(return_value=_launched("active"))
    return mock


@pytest.fixture
def client(launcher: MagicMock) -> TestClient:
    return TestClient(create_app(launcher=launcher))


# ── pump.fun ────────────────────────────────────────────────────────────


class TestPumpfunEndpoint:
    def test_success_body(self, client: TestClient, launcher: MagicMock) -> None:
        resp = client.post(
            "/api/pumpfun/create-token",
            data={
                "name": "Moon",
                "symbol": "MOON",
                "creatorKeypair": "secret",
                "buyAmount": "0.5",
                "mayhemMode": "true",
                "twitter": "https://x.com/moon",
            },
            files={"image": ("moon.png", b"\x89PNG", "image/png")},
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "signature": SIGNATURE, "mintAddress": MINT}

        req = launcher.create_pumpfun_token.await_args.args[0]
        assert req.image == b"\x89PNG"
        assert req.image_filename == "moon.png"
        assert req.buy_amount == 0.5
        assert req.mayhem_mode is True
        assert req.socials == {"twitter": "https://x.com/moon"}
        assert req.uri is None

    def test_validation_failure_is_400(self, client: TestClient, launcher: MagicMock) -> None:
        launcher.create_pumpfun_token.return_value = LaunchResult.failure(
            ErrorKind.VALIDATION, "Name must be 32 characters or less"
        )

        resp = client.post(
            "/api/pumpfun/create-token",
            data={"name": "x" * 40, "symbol": "MOON", "creatorKeypair": "secret", "uri": "https://gw/ipfs/Qm"},
        )

        assert resp.status_code == 400
        assert resp.json() == {"error": "Name must be 32 characters or less"}

    def test_chain_failure_is_500(self, client: TestClient, launcher: MagicMock) -> None:
        launcher.create_pumpfun_token.return_value = LaunchResult.failure(
            ErrorKind.SIMULATION_FAILED, "Transaction simulation failed: InsufficientFundsForRent"
        )

        resp = client.post(
            "/api/pumpfun/create-token",
            data={"name": "Moon", "symbol": "MOON", "creatorKeypair": "secret", "uri": "https://gw/ipfs/Qm"},
        )

        assert resp.status_code == 500
        assert "simulation failed" in resp.json()["error"]

    def test_unparseable_buy_amount(self, client: TestClient, launcher: MagicMock) -> None:
        resp = client.post(
            "/api/pumpfun/create-token",
            data={"name": "Moon", "symbol": "MOON", "creatorKeypair": "secret", "buyAmount": "lots"},
        )

        assert resp.status_code == 400
        assert resp.json() == {"error": "buyAmount must be a positive number"}
        launcher.create_pumpfun_token.assert_not_awaited()

    def test_security_headers(self, client: TestClient) -> None:
        resp = client.post(
            "/api/pumpfun/create-token",
            data={"name": "Moon", "symbol": "MOON", "creatorKeypair": "secret", "uri": "https://gw/ipfs/Qm"},
        )

        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert resp.headers["Cache-Control"] == "no-store"


# ── LaunchLab ───────────────────────────────────────────────────────────


class TestLaunchlabEndpoint:
    def test_form_fields_mapped(self, client: TestClient, launcher: MagicMock) -> None:
        resp = client.post(
            "/api/launchlab/create-token",
            data={
                "name": "Bonk Jr",
                "symbol": "BJR",
                "creatorKeypair": "secret",
                "decimals": "9",
                "slippage": "250",
                "createdOn": "https://bonk.fun",
            },
            files={"image": ("bjr.jpg", b"jpg", "image/jpeg")},
        )

        assert resp.status_code == 200
        assert resp.json()["mintAddress"] == MINT
        req = launcher.create_launchlab_token.await_args.args[0]
        assert req.decimals == 9
        assert req.slippage_bps == 250
        assert req.migrate_type == "amm"
        assert req.created_on == "https://bonk.fun"

    def test_non_numeric_decimals(self, client: TestClient, launcher: MagicMock) -> None:
        resp = client.post(
            "/api/launchlab/create-token",
            data={"name": "Bonk Jr", "symbol": "BJR", "creatorKeypair": "secret", "decimals": "six"},
        )

        assert resp.status_code == 400
        assert resp.json() == {"error": "Decimals must be a number between 0 and 9"}
        launcher.create_launchlab_token.assert_not_awaited()

    def test_persistence_failure_is_500(self, client: TestClient, launcher: MagicMock) -> None:
        launcher.create_launchlab_token.return_value = LaunchResult.failure(
            ErrorKind.PERSISTENCE_FAILED, "Failed to store token data: connection refused"
        )

        resp = client.post(
            "/api/launchlab/create-token",
            data={"name": "Bonk Jr", "symbol": "BJR", "creatorKeypair": "secret"},
            files={"image": ("bjr.png", b"png", "image/png")},
        )

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to store token data: connection refused"}


# ── Health ──────────────────────────────────────────────────────────────


def test_health_without_database(client: TestClient) -> None:
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "degraded"
    assert body["db_ok"] is False


def test_missing_launcher_is_503() -> None:
    resp = TestClient(create_app()).post(
        "/api/pumpfun/create-token",
        data={"name": "Moon", "symbol": "MOON", "creatorKeypair": "secret"},
    )

    assert resp.status_code == 503


def test_request_id_echoed(client: TestClient) -> None:
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-42"})

    assert resp.headers["X-Request-ID"] == "req-42"
    assert resp.headers["Content-Security-Policy"] == "default-src 'none'; frame-ancestors 'none'"
