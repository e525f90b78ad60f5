"""Conversational tool-calling orchestrator for expense tracking."""
