# src/api/__init__.py — v1
