"""
Chapter illustrations - Generated cover images per chapter.

Images come from the Pollinations prompt endpoint. The first attempt uses
a seed derived from the chapter id so every reader sees the same image;
if it fails, one retry uses a random seed and the flux model. A working
URL is cached in the progress store under ``img_{chapter_id}``.

Illustrations never affect completion or navigation.
"""

import logging
import random
from http.client import HTTPException
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from guidedbook.classroom import ProgressStore
from guidedbook.schemas import ILLUSTRATION_KEY_PREFIX, Chapter


logger = logging.getLogger(__name__)

POLLINATIONS_URL = "https://image.pollinations.ai/prompt/"
PROMPT_SUFFIX = ", cinematic lighting, high quality, masterpiece"
IMAGE_WIDTH = 1024
IMAGE_HEIGHT = 576
FALLBACK_MODEL = "flux"
USER_AGENT = "GuidedBook/1.0 (Interactive course reader)"


def illustration_key(chapter_id: str) -> str:
    return f"{ILLUSTRATION_KEY_PREFIX}{chapter_id}"


def chapter_seed(chapter_id: str) -> int:
    """Deterministic seed: sum of the id's code points."""
    return sum(ord(char) for char in chapter_id)


def build_image_url(prompt: str, seed: int, model: Optional[str] = None) -> str:
    encoded = quote(prompt + PROMPT_SUFFIX, safe="")
    url = f"{POLLINATIONS_URL}{encoded}?width={IMAGE_WIDTH}&height={IMAGE_HEIGHT}&seed={seed}&nologo=true"
    if model:
        url += f"&model={model}"
    return url


def probe_image(url: str, timeout: float = 30) -> bool:
    """Check that an image URL answers with an image."""
    req = Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urlopen(req, timeout=timeout) as response:
            content_type = response.headers.get("Content-Type", "")
            return response.status == 200 and content_type.startswith("image/")
    except (URLError, HTTPError, OSError, HTTPException) as e:
        logger.warning(f"Illustration request failed: {e}")
        return False


def resolve_illustration(
    chapter: Chapter,
    progress: ProgressStore,
    probe: Callable[[str], bool] = probe_image,
    rng: Optional[random.Random] = None,
    force_retry: bool = False,
) -> Optional[str]:
    """
    Get the illustration URL for a chapter.

    Args:
        chapter: Chapter with an image_prompt
        progress: Store used to cache working URLs
        probe: Callable checking whether a URL serves an image
        rng: Random source for the fallback seed
        force_retry: Skip the cache and the deterministic seed (manual refresh)

    Returns:
        Image URL, or None if the chapter has no prompt or both attempts fail
    """
    if not chapter.image_prompt:
        return None

    key = illustration_key(chapter.id)
    cached = progress.get(key)
    if isinstance(cached, str) and cached and not force_retry:
        return cached

    if not force_retry:
        url = build_image_url(chapter.image_prompt, chapter_seed(chapter.id))
        if probe(url):
            progress.set(key, url)
            return url
        logger.info(f"Retrying illustration for '{chapter.id}' with random seed and {FALLBACK_MODEL} model")

    seed = (rng or random).randint(0, 9999)
    url = build_image_url(chapter.image_prompt, seed, model=FALLBACK_MODEL)
    if probe(url):
        progress.set(key, url)
        return url

    logger.error(f"Could not load illustration for chapter '{chapter.id}'")
    return None
