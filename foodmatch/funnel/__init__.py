"""Funnel matching package (price-per-unit, price cluster, attribute filter)."""
