"""
Map marker clustering.

Turns a list of gyms plus the current viewport into a bounded set of
render-ready markers. Everything here is pure computation: no I/O and no
state between calls.
"""
