"""saccadic.core — Foundation layer.

Contains the shared types, thresholds, colour science, errors, and the
collaborator helpers (snapshot/bitmap loading, .env loading, report output).
This module has NO dependencies on saccadic.design, saccadic.comparison,
saccadic.commands or saccadic.registry. Only stdlib, numpy, and PIL are
allowed here.
"""
