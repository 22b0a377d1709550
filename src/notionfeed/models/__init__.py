"""Pydantic data models for notionfeed."""
