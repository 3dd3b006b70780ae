"""
External enrichment for recommendations.

- reviews.py : simulated third-party ratings attached to each recommendation
- website.py : restaurant website lookup with a bounded, expiring cache
- cache.py   : the LRU + TTL cache behind the website lookup
"""
