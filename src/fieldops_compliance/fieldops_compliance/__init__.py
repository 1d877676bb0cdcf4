"""Field Operations Compliance engine.

This package is organized by feature modules (timewindow, geo, grace,
attendance, trips, ...) with pure rule/state-machine code at the centre and
thin service/repository layers at the edge. Hosts persist values and events.
"""
