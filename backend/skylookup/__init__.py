"""
skylookup: aircraft and flightroute lookups, Valkey edition

Resolves Mode-S transponder codes and flight callsigns to descriptive records
through a cache-aside pipeline:
1. Valkey hash entries (hits and known-unknowns, 7 day lifetime)
2. The relational store (SQLAlchemy, source of truth)
3. A best-effort scrape of external sources for photos and routes

Requests are gated per client by a Valkey backed rate limiter.
"""

__version__ = "0.1.0"
