"""Kernel – errors and the authorization decision core."""
