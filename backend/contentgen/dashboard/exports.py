import csv
import io
import json
import re
from collections.abc import Sequence
from typing import Any

from contentgen.dashboard.domains import platform_label

LISTING_COLUMNS = ("platform", "product_name", "title", "description", "meta_description", "selling_points", "tags")


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "untitled"


def blog_to_markdown(blog: dict[str, Any]) -> str:
    """Title heading, the cover image when one was attached, then the body."""
    parts = [f"# {blog['title']}", ""]
    if blog.get("image_url"):
        alt = blog.get("image_prompt") or blog["title"]
        parts += [f"![{alt}]({blog['image_url']})", ""]
    parts.append(blog["content"].rstrip())
    return "\n".join(parts) + "\n"


def blog_filename(blog: dict[str, Any]) -> str:
    return f"{slugify(blog['title'])}.md"


def listings_to_csv(listings: Sequence[dict[str, Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(LISTING_COLUMNS)
    for listing in listings:
        writer.writerow(
            [
                platform_label(listing.get("category") or ""),
                listing.get("product_name") or "",
                listing.get("title") or "",
                listing.get("description") or "",
                listing.get("meta_description") or "",
                "; ".join(listing.get("selling_points") or []),
                ", ".join(listing.get("tags") or []),
            ]
        )
    return buffer.getvalue()


def artifact_to_json(artifact: dict[str, Any] | Sequence[dict[str, Any]]) -> str:
    # UUIDs and datetimes become strings
    return json.dumps(artifact, indent=2, default=str, ensure_ascii=False)
