"""Parsing, field mapping, and submission services."""
