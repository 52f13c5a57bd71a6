"""Comparison layer: matcher, property and pixel comparators, cascade filter, scorer.

`saccadic.comparison.engine.compare` runs them all in order.
"""
