import csv
import io
import json
import uuid

from contentgen.dashboard.exports import artifact_to_json, blog_filename, blog_to_markdown, listings_to_csv


def test_blog_markdown_includes_cover_image_when_present():
    blog = {
        "title": "AI in Healthcare",
        "content": "Body text.\n",
        "image_url": "https://img.test/cover.png",
        "image_prompt": "hospital robot",
    }

    assert blog_to_markdown(blog) == (
        "# AI in Healthcare\n\n![hospital robot](https://img.test/cover.png)\n\nBody text.\n"
    )
    assert blog_to_markdown({"title": "Plain", "content": "Just text"}) == "# Plain\n\nJust text\n"
    assert blog_filename(blog) == "ai-in-healthcare.md"


def test_listings_csv_has_one_row_per_platform():
    listings = [
        {"category": "instagram", "product_name": "Leather Bag", "title": "Bag, leather", "tags": ["a", "b"]},
        {"category": "facebook", "product_name": "Leather Bag", "title": "Bag", "selling_points": ["Durable"]},
    ]

    rows = list(csv.reader(io.StringIO(listings_to_csv(listings))))

    assert rows[0][0] == "platform"
    assert [row[0] for row in rows[1:]] == ["Instagram", "Facebook"]
    assert rows[1][2] == "Bag, leather"
    assert rows[1][6] == "a, b"
    assert rows[2][5] == "Durable"


def test_artifact_json_serializes_ids():
    record_id = uuid.uuid4()

    assert json.loads(artifact_to_json({"id": record_id, "url": "https://example.com"})) == {
        "id": str(record_id),
        "url": "https://example.com",
    }
