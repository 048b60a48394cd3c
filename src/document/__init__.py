# src/document/__init__.py — v1
