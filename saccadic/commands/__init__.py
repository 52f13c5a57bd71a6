"""CLI subcommands, one module each.

Every module here that defines a `command` object is registered by
saccadic.registry.discover(). Modules starting with an underscore are
helpers and are skipped.
"""
