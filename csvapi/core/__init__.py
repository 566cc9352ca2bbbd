"""Shared runtime pieces: errors, settings, logging, activity log, session."""
