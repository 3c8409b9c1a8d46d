"""Network surfaces for Thurin credentials."""
