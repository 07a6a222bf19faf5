"""Canonical models and the extractor helpers that fill them."""
