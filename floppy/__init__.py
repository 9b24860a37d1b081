"""Floppy Bird: a one-screen flap-through-the-gaps arcade game."""

__version__ = "1.0.0"
