"""Tests for the research-suite tool servers and workflow."""
