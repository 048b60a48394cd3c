# src/lookup/__init__.py — v1
