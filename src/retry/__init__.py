# src/retry/__init__.py — v1
