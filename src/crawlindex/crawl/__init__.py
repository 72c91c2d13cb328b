"""Concurrent directory crawl."""

from crawlindex.crawl.classifier import PathClassifier
from crawlindex.crawl.crawler import Crawler, CrawlStats
from crawlindex.crawl.tracker import DrainResult, TaskTracker

__all__ = ["Crawler", "CrawlStats", "DrainResult", "PathClassifier", "TaskTracker"]
