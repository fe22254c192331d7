"""Routing: a route tree compiled into an ordered, first-match router.

Routes are declared with the builders and compiled once, when
``router()`` is called.
"""
