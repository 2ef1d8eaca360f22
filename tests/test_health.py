import httpx
import pytest

from aer.config import Settings
from aer.health import check_api, check_token, format_health_report, run_health_check


def test_check_token():
    assert check_token(Settings(auth_token="aer_abc"))[0] == "✓"
    assert check_token(Settings(auth_token=None))[0] == "✗"
    status, message = check_token(Settings(auth_token="abc"))
    assert status == "✗"
    assert "aer_{userId}" in message


@pytest.mark.asyncio
async def test_check_api_reachable(settings, make_client, recorded):
    status, _ = await check_api(settings, client=make_client(lambda r: httpx.Response(204)))
    assert status == "✓"
    assert recorded[0].method == "OPTIONS"
    assert recorded[0].url.path == "/api/context/upload"


@pytest.mark.asyncio
async def test_check_api_unreachable(settings, make_client):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    status, message = await check_api(settings, client=make_client(handler))
    assert status == "✗"
    assert "Unreachable" in message


@pytest.mark.asyncio
async def test_health_report(settings, make_client, tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    checks = await run_health_check(settings, client=make_client(lambda r: httpx.Response(502)))

    assert checks["Config"][0] == "-"
    assert checks["Token"][0] == "✓"
    assert checks["API"][0] == "!"

    report = format_health_report(checks)
    assert report.splitlines()[0] == "Aer Health Check"
    assert "! API:" in report
