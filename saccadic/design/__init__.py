"""saccadic.design — Design-source documents and the layout engine.

document.py parses .pen-style JSON into frozen PenNode values, layout.py
resolves variables / components / sizing into absolute DesignNode trees,
tree.py flattens and describes them. Depends on saccadic.core only.
"""
