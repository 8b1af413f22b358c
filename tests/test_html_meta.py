from datetime import date

import pytest

from research_metadata.core.html_meta import extract_html_metadata

ARTICLE_URL = "https://www.example.com/news/story"


def test_og_title_is_entity_decoded(today: date) -> None:
    document = '<meta property="og:title" content="Foo &amp; Bar"><title>Ignored</title>'

    metadata = extract_html_metadata(document, ARTICLE_URL, today=today)

    assert metadata.title == "Foo & Bar"


def test_title_falls_back_through_twitter_title_then_title_element(today: date) -> None:
    twitter = '<meta name="twitter:title" content="Tweet title"><title>Page title</title>'
    plain = "<head><title>\n  Page &#8211; title\n</title></head>"

    assert extract_html_metadata(twitter, ARTICLE_URL, today=today).title == "Tweet title"
    assert extract_html_metadata(plain, ARTICLE_URL, today=today).title == "Page – title"


def test_defaults_when_nothing_matches(today: date) -> None:
    metadata = extract_html_metadata("<html><body>plain</body></html>", ARTICLE_URL, today=today)

    assert metadata.url == ARTICLE_URL
    assert metadata.title == "www.example.com"
    assert metadata.type == "article"
    assert metadata.author is None
    assert metadata.published_at is None
    assert metadata.description is None
    assert metadata.thumbnail is None


@pytest.mark.parametrize(
    ("author_json", "expected"),
    [
        ('{"author": {"@type": "Person", "name": "Jane Doe"}}', "Jane Doe"),
        ('{"author": [{"@type": "Person", "name": "First Author"}, {"name": "Second"}]}', "First Author"),
        ('{"author": "Sam Writer"}', "Sam Writer"),
        ('[{"@type": "WebSite"}, {"author": {"name": "In Array"}}]', "In Array"),
    ],
)
def test_author_from_json_ld(today: date, author_json: str, expected: str) -> None:
    document = (
        f'<script type="application/ld+json">{author_json}</script>'
        '<meta name="author" content="Meta Author">'
    )

    assert extract_html_metadata(document, ARTICLE_URL, today=today).author == expected


def test_author_falls_back_to_meta_tags_when_json_ld_is_invalid(today: date) -> None:
    document = (
        '<script type="application/ld+json">{not json</script>'
        '<meta property="article:author" content="Pat Reporter">'
        '<meta name="twitter:creator" content="@pat">'
    )

    assert extract_html_metadata(document, ARTICLE_URL, today=today).author == "Pat Reporter"


def test_twitter_creator_is_last_author_fallback(today: date) -> None:
    document = '<meta name="twitter:creator" content="@pat">'

    assert extract_html_metadata(document, ARTICLE_URL, today=today).author == "@pat"


def test_description_priority(today: date) -> None:
    document = (
        '<meta name="twitter:description" content="twitter">'
        '<meta name="description" content="plain">'
        '<meta property="og:description" content="open graph">'
    )
    without_og = '<meta name="twitter:description" content="twitter"><meta name="description" content="plain">'

    assert extract_html_metadata(document, ARTICLE_URL, today=today).description == "open graph"
    assert extract_html_metadata(without_og, ARTICLE_URL, today=today).description == "plain"


def test_thumbnail_prefers_og_image_and_resolves_relative_urls(today: date) -> None:
    document = '<meta name="twitter:image" content="https://cdn.example.com/t.png"><meta property="og:image" content="/img/og.png">'
    twitter_only = '<meta name="twitter:image" content="https://cdn.example.com/t.png">'

    assert extract_html_metadata(document, ARTICLE_URL, today=today).thumbnail == "https://www.example.com/img/og.png"
    assert extract_html_metadata(twitter_only, ARTICLE_URL, today=today).thumbnail == "https://cdn.example.com/t.png"


@pytest.mark.parametrize(
    ("og_type", "expected"),
    [
        ("video.other", "video"),
        ("VIDEO.MOVIE", "video"),
        ("article", "article"),
        ("blog", "article"),
        ("website", "article"),
    ],
)
def test_type_from_og_type(today: date, og_type: str, expected: str) -> None:
    document = f'<meta property="og:type" content="{og_type}">'

    assert extract_html_metadata(document, ARTICLE_URL, today=today).type == expected


@pytest.mark.parametrize(
    "source_url",
    [
        "https://twitter.com/someone/status/1",
        "https://x.com/someone/status/1",
        "https://www.instagram.com/p/abc/",
        "https://m.facebook.com/story.php?id=1",
        "https://www.linkedin.com/posts/someone",
    ],
)
def test_social_hosts_override_og_type(today: date, source_url: str) -> None:
    document = '<meta property="og:type" content="video.other">'

    assert extract_html_metadata(document, source_url, today=today).type == "social"


def test_published_at_comes_from_date_resolution(today: date) -> None:
    document = (
        '<script type="application/ld+json">{"datePublished": "2023-01-15"}</script>'
        '<meta property="article:published_time" content="2023-02-20">'
    )

    assert extract_html_metadata(document, ARTICLE_URL, today=today).published_at == "2023-01-15"


def test_extraction_is_idempotent(today: date) -> None:
    document = (
        '<meta property="og:title" content="Stable">'
        '<meta property="og:description" content="Same every time">'
        '<meta property="article:published_time" content="2022-02-02">'
    )

    first = extract_html_metadata(document, ARTICLE_URL, today=today)
    second = extract_html_metadata(document, ARTICLE_URL, today=today)

    assert first == second
