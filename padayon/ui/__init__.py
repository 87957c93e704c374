"""Presentation assets: locale bundles and colour themes."""
