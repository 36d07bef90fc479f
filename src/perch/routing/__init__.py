"""Routing: ordered route table with exact method+path matching.

Routes are registered on Routers during setup, aggregated by the Server,
and frozen when it starts serving.
"""
