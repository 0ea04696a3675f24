"""Abstractions layer - plain data types shared by every component."""
