"""Test suite for sysdash."""
