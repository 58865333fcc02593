"""Utility modules for Bindery."""
