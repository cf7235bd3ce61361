"""Test suite for the catalogue admin server."""
