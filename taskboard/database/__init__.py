"""Relational store access for taskboard."""
