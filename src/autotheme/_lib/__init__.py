"""Shared helpers for network-backed collaborators."""
