"""Crawler core: fetching, URL discovery and the crawl orchestrator."""
