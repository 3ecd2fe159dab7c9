"""Tests for the storage and classifier self-checks."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import pytest_mock

from chicpick.config.settings import ClosetSettings
from chicpick.integrations.checks import check_classifier, check_storage, run_all_checks


def _settings(tmp_path: Path, **overrides) -> ClosetSettings:
    values = {"aitunnel_api_key": "test-aitunnel", "storage_root": str(tmp_path / "closet")}
    values.update(overrides)
    return ClosetSettings(**values)


def _patch_client(mocker: pytest_mock.MockerFixture, *, ping: bool, content: str):
    client_mock = mocker.patch("chicpick.integrations.checks.AITunnelClient", autospec=True)
    instance = client_mock.return_value
    instance.configured = True
    instance.ping = mocker.AsyncMock(return_value=ping)
    instance.close = mocker.AsyncMock(return_value=None)
    instance.chat_completion = mocker.AsyncMock(
        return_value={"choices": [{"message": {"content": content}}]},
    )
    return instance


@pytest.mark.asyncio
async def test_storage_check_reports_garment_count(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    root = Path(settings.storage_root)
    root.mkdir()
    (root / "chicpick_dresses.json").write_text(
        json.dumps([{"id": "a", "imageData": "x", "category": "Top", "color": "Red",
                     "occasion": "Casual", "lastWorn": None, "createdAt": "2024-05-01T10:00:00"}]),
        encoding="utf-8",
    )

    outcome = await check_storage(settings)

    assert outcome.ok
    assert "1 garments" in outcome.detail
    assert not (root / "chicpick_dresses.selfcheck.json").exists()


@pytest.mark.asyncio
async def test_storage_check_fails_when_root_is_a_file(tmp_path: Path) -> None:
    blocker = tmp_path / "closet"
    blocker.write_text("not a directory", encoding="utf-8")

    outcome = await check_storage(_settings(tmp_path))

    assert not outcome.ok
    assert "not writable" in outcome.detail


@pytest.mark.asyncio
async def test_classifier_check_success(mocker: pytest_mock.MockerFixture, tmp_path: Path) -> None:
    instance = _patch_client(
        mocker,
        ping=True,
        content=json.dumps({"category": "Top", "color": "Blue", "occasion": "Casual"}),
    )

    outcome = await check_classifier(_settings(tmp_path))

    assert outcome.ok
    assert "Blue Top" in outcome.detail
    instance.chat_completion.assert_awaited_once()
    instance.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_classifier_check_fails_on_fallback(mocker: pytest_mock.MockerFixture, tmp_path: Path) -> None:
    _patch_client(mocker, ping=True, content="sorry, I cannot help")

    outcome = await check_classifier(_settings(tmp_path))

    assert not outcome.ok
    assert "fallback" in outcome.detail


@pytest.mark.asyncio
async def test_classifier_check_unreachable(mocker: pytest_mock.MockerFixture, tmp_path: Path) -> None:
    instance = _patch_client(mocker, ping=False, content="{}")

    outcome = await check_classifier(_settings(tmp_path))

    assert not outcome.ok
    instance.chat_completion.assert_not_awaited()
    instance.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_classifier_check_without_key(mocker: pytest_mock.MockerFixture, tmp_path: Path) -> None:
    client_mock = mocker.patch("chicpick.integrations.checks.AITunnelClient", autospec=True)

    outcome = await check_classifier(_settings(tmp_path, aitunnel_api_key=""))

    assert not outcome.ok
    assert "AITUNNEL_API_KEY" in outcome.detail
    client_mock.assert_not_called()


@pytest.mark.asyncio
async def test_run_all_checks_returns_both(mocker: pytest_mock.MockerFixture, tmp_path: Path) -> None:
    _patch_client(
        mocker,
        ping=True,
        content=json.dumps({"category": "Dress", "color": "Red", "occasion": "Party"}),
    )

    outcomes = await run_all_checks(_settings(tmp_path))

    assert [outcome.name for outcome in outcomes] == ["storage", "classifier"]
    assert all(outcome.ok for outcome in outcomes)
