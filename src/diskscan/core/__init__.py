"""Traversal engine, control coordinator and event output."""
