"""Verify that the wardrobe can be saved and that garments get classified."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from openai import APIError
from PIL import Image

from chicpick.api import AITunnelClient
from chicpick.classification import ClassificationAdapter
from chicpick.config.settings import ClosetSettings, get_settings
from chicpick.imaging import compress_image
from chicpick.storage import FileDocumentBackend, GarmentStore

logger = logging.getLogger(__name__)

SELF_CHECK_SUFFIX = ".selfcheck"


@dataclass(slots=True, frozen=True)
class CheckOutcome:
    """Result of one self-check."""

    name: str
    ok: bool
    detail: str


def _sample_garment() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (64, 96), (20, 40, 120)).save(buffer, format="PNG")
    return buffer.getvalue()


async def check_storage(settings: ClosetSettings) -> CheckOutcome:
    """Write and read back a scratch document next to the wardrobe, then load the wardrobe."""

    root = Path(settings.storage_root)
    backend = FileDocumentBackend(root)
    key = settings.storage_key + SELF_CHECK_SUFFIX
    try:
        await backend.write(key, "[]")
        readable = await backend.read(key) == "[]"
        (root / f"{key}.json").unlink(missing_ok=True)
    except OSError as exc:
        return CheckOutcome("storage", False, f"{root} is not writable: {exc}")
    if not readable:
        return CheckOutcome("storage", False, f"{root} returned different content than written.")

    garments = await GarmentStore(backend, settings.storage_key).load()
    return CheckOutcome("storage", True, f"{root} is writable; {len(garments)} garments stored.")


async def check_classifier(settings: ClosetSettings) -> CheckOutcome:
    """Ping the proxy and classify a generated swatch; fallback results count as failure."""

    if not settings.aitunnel_api_key:
        return CheckOutcome(
            "classifier",
            False,
            "AITUNNEL_API_KEY is not set; new garments will be tagged Uncategorized/Unknown/Casual.",
        )

    client = AITunnelClient(settings)
    try:
        try:
            reachable = await client.ping()
        except APIError as exc:
            logger.warning("AITunnel ping failed: %s", exc)
            reachable = False
        if not reachable:
            return CheckOutcome("classifier", False, f"{settings.aitunnel_base_url} is not reachable.")

        image = await asyncio.to_thread(compress_image, _sample_garment())
        result = await ClassificationAdapter(client).classify(image)
    finally:
        await client.close()

    if result.fallback_used:
        return CheckOutcome(
            "classifier",
            False,
            f"{settings.vision_model} answered but the reply was unusable; fallback tags applied.",
        )
    return CheckOutcome(
        "classifier",
        True,
        f"{settings.vision_model} tagged the sample as {result.color} {result.category} ({result.occasion}).",
    )


async def run_all_checks(settings: ClosetSettings | None = None) -> list[CheckOutcome]:
    """Run the storage and classifier checks."""

    settings = settings or get_settings()
    storage, classifier = await asyncio.gather(check_storage(settings), check_classifier(settings))
    return [storage, classifier]
