"""Utilities - structured logging and IST date handling."""
