"""Conformance test units for the hData REST API."""
