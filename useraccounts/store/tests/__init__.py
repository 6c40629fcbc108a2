"""Tests for :mod:`useraccounts.store`."""
