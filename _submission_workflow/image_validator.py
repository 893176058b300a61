"""
Image Validator — Submission Workflow

PURPOSE:
    Check that every image a manuscript embeds is reachable and really is an
    image. Runs on the changed markdown files of a submission PR, before a
    reviewer ever opens it, so broken or hostile image links are caught early.

    Per URL:
      - Blacklisted host              -> invalid ("Domain is blacklisted")
      - HEAD fails or times out       -> invalid (timeout / request error)
      - Status >= 500                 -> invalid
      - Content-Type not image/*      -> invalid
      - otherwise                     -> valid

DESIGN DECISIONS:
    - HEAD only. We never download image bodies.
    - 4xx responses are not errors by themselves: the content type decides,
      and an HTML 404 page fails that check anyway.
    - All URLs are checked in parallel with a thread pool. Checks share
      nothing, and one slow host only costs its own timeout.
    - Only absolute http(s) URLs in ![alt](url) syntax are checked. Relative
      paths point into the repository and are validated by the site build.
"""

import re
from concurrent.futures import ThreadPoolExecutor
from typing import Optional
from urllib.parse import urlparse

import requests

from _submission_workflow.config import IMAGE_CHECK_TIMEOUT_SECONDS

BLACKLISTED_DOMAINS = [
    "spam.io",
    "malicious-host.com",
    "unsafe-cdn.net",
]

IMAGE_URL_PATTERN = re.compile(r"!\[.*?\]\((https?://[^)\s]+)[^)]*\)")

MAX_WORKERS = 8


def extract_image_urls(markdown: str) -> list:
    """Return every absolute image URL in the document, in order of appearance."""
    return IMAGE_URL_PATTERN.findall(markdown)


def is_blacklisted(url: str) -> bool:
    try:
        hostname = urlparse(url).hostname or ""
    except ValueError:
        return False
    return any(domain in hostname for domain in BLACKLISTED_DOMAINS)


def validate_image_url(url: str, timeout: float = IMAGE_CHECK_TIMEOUT_SECONDS) -> dict:
    """
    Check one image URL.

    Returns:
        dict with 'url' and 'valid', plus 'content_type' when valid or
        'error' when not.
    """
    if is_blacklisted(url):
        return {"url": url, "valid": False, "error": "Domain is blacklisted"}

    try:
        resp = requests.head(url, timeout=timeout, allow_redirects=True)
    except requests.Timeout:
        return {
            "url": url,
            "valid": False,
            "error": f"Timeout after {int(timeout * 1000)}ms",
        }
    except requests.RequestException as e:
        return {"url": url, "valid": False, "error": str(e)}

    if resp.status_code >= 500:
        return {
            "url": url,
            "valid": False,
            "error": f"Request failed with status code {resp.status_code}",
        }

    content_type = resp.headers.get("content-type", "")
    if not content_type.startswith("image/"):
        return {
            "url": url,
            "valid": False,
            "error": f"Invalid content type: {content_type} (expected image/*)",
        }

    return {"url": url, "valid": True, "content_type": content_type}


def validate_markdown_images(
    markdown: str,
    timeout: float = IMAGE_CHECK_TIMEOUT_SECONDS,
    max_workers: Optional[int] = None,
) -> dict:
    """
    Validate all images of a markdown document concurrently.

    Returns:
        dict with keys:
            - 'image_count' (int)
            - 'results' (list[dict]): one validate_image_url() result per URL,
              in document order
            - 'invalid' (list[dict]): the results that failed
    """
    urls = extract_image_urls(markdown)
    if not urls:
        return {"image_count": 0, "results": [], "invalid": []}

    workers = max_workers or min(MAX_WORKERS, len(urls))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda u: validate_image_url(u, timeout), urls))

    return {
        "image_count": len(urls),
        "results": results,
        "invalid": [r for r in results if not r["valid"]],
    }
