"""Gradio presentation layer for the Ludo rule engine."""
