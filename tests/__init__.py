"""Test suite for beagle."""
