"""
Sprint metrics and burndown engine.

Turns task event logs and a sprint window into burndown, velocity, cycle
time, contributor, completion trend and summary metrics.
"""

__version__ = "0.1.0"
