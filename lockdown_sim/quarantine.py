"""Venue lockdown (quarantine) control.

The only mutation path for interactive input. Flipping ``locked`` never
touches agent state; its effect shows up through transmission on the next
step.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence

from lockdown_sim.errors import NotFound
from lockdown_sim.types import Node, VenueNode


def find_venue(nodes: Sequence[Node], venue_id: str) -> int:
    """Index of the venue node with ``venue_id``.

    Raises:
        NotFound: If the id is unknown or names a non-venue node.
    """
    for i, node in enumerate(nodes):
        if node.id == venue_id:
            if not isinstance(node, VenueNode):
                raise NotFound(f"Node '{venue_id}' is a {node.type}, not a venue")
            return i
    raise NotFound(f"No venue with id '{venue_id}'")


def toggle_lock(nodes: Sequence[Node], venue_id: str) -> List[Node]:
    """Return a copy of ``nodes`` with the venue's ``locked`` flag flipped.

    All other nodes are passed through as the same objects; ``nodes`` itself
    is not modified.

    Raises:
        NotFound: If ``venue_id`` does not resolve to a venue.
    """
    idx = find_venue(nodes, venue_id)
    venue = nodes[idx]
    result = list(nodes)
    result[idx] = replace(venue, locked=not venue.locked)
    return result


def set_lock(nodes: Sequence[Node], venue_id: str, locked: bool) -> List[Node]:
    """Like toggle_lock but forces the flag to ``locked``."""
    idx = find_venue(nodes, venue_id)
    if nodes[idx].locked == locked:
        return list(nodes)
    return toggle_lock(nodes, venue_id)
