"""Conformance test harness for HRF/hData REST servers."""
