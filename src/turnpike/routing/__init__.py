"""Routing — ordered route table with first-match dispatch.

Routes are registered during setup (directly or through groups) and the
table becomes read-only when the router freezes.
"""
