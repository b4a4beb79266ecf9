"""Game domain services: quiz rules and high score retention.

This package contains pure logic that should be imported by HTTP routes,
keeping transport and storage concerns separated from core game mechanics.
"""
