"""
Thurin - privacy-preserving, sybil-resistant identity credentials

Issues a soulbound "verified unique human" credential from a zero-knowledge
proof over a mobile driver's licence, and lets applications verify age and
state claims without learning document data.
"""

__version__ = "0.1.0"
