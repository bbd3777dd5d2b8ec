"""Riftrades: trading-card trade calculator with shareable trade links."""
