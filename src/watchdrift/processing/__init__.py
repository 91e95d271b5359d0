"""This is the processing submodule.

This module contains the accuracy engine: baseline resolution, drift rate
estimation, trend and confidence classification, chart series and the
formatting helpers used to present them.
"""
