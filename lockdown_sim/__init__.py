"""Lockdown-Sim: outbreak spread over households and shared venues.

A stochastic, tick-based SIRD model on a bipartite agent–venue graph:
  - Agents grouped into households, each visiting a handful of venues
  - Transmission between agents sharing an unlocked venue
  - Per-tick resolution of sick agents into recovered or dead
  - Interactive per-venue lockdown (quarantine)

The engine is functional (snapshot in, snapshot out); ``Simulation``
owns the current snapshot for a host application.
"""

__version__ = "0.1.0"
