# File: tests/test_sitemap_parser.py
from site_harvest.parser.sitemap_parser import parse_sitemap

DOMAIN = "https://example.com"

URLSET = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/a</loc></url>
  <url><loc> https://example.com/b </loc></url>
  <url><loc>https://other.org/c</loc></url>
  <url><loc></loc></url>
</urlset>
"""

INDEX = """<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <sitemap><loc>https://example.com/posts.xml</loc></sitemap>
  <sitemap><loc>https://cdn.other.org/pages.xml</loc></sitemap>
</sitemapindex>
"""


def test_urlset_same_host_only():
    entries = parse_sitemap(URLSET, DOMAIN)
    assert entries.urls == ["https://example.com/a", "https://example.com/b"]
    assert entries.nested_sitemaps == []


def test_sitemap_index():
    entries = parse_sitemap(INDEX, DOMAIN)
    assert entries.urls == []
    assert entries.nested_sitemaps == ["https://example.com/posts.xml"]


def test_without_namespace():
    xml = "<urlset><url><loc>https://example.com/plain</loc></url></urlset>"
    assert parse_sitemap(xml, DOMAIN).urls == ["https://example.com/plain"]


def test_garbage_yields_nothing():
    for content in ("", "not xml at all", "<html><body>404</body></html>"):
        entries = parse_sitemap(content, DOMAIN)
        assert entries.urls == []
        assert entries.nested_sitemaps == []
