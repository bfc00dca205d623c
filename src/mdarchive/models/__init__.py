"""Pydantic data models for mdarchive."""
