"""
Place clustering: where finalized stationary episodes go.

The windowed clusterer only depends on the PlaceClusterer protocol.
SignificantPlaceClusterer is a small in-memory implementation that matches
each episode to the nearest known place, or founds a new one.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from .models import PlaceRegistry, PlaceState, StationaryEpisode


@runtime_checkable
class PlaceClusterer(Protocol):
    """
    Collaborator receiving stationary episodes.

    The windowed clusterer only calls add_observation() on the episodes
    new_episode() returns; anything else about them is up to the
    implementation.
    """

    def new_episode(self, timestamp: float) -> Any:
        ...

    def submit(self, episode: Any) -> int:
        ...


def find_nearest_place(
    observation: Any,
    registry: PlaceRegistry,
) -> tuple[Optional[PlaceState], float]:
    """Find the place whose representative is nearest to an observation."""
    best_place = None
    best_distance = float('inf')

    for place in registry.all_places():
        distance = observation.distance_from(place.representative)
        if distance < best_distance:
            best_distance = distance
            best_place = place

    return best_place, best_distance


def record_visit(place: PlaceState, episode: StationaryEpisode) -> None:
    """Fold an episode into a place's counters."""
    place.visit_count += 1
    place.observation_count += episode.size()
    place.last_seen = max(place.last_seen, episode.timestamp)


class SignificantPlaceClusterer:
    """
    In-memory place clusterer.

    An episode joins the nearest place when its medoid lies within
    `place_epsilon` of that place's representative (default: the medoid's
    own epsilon()); otherwise it founds a new place.
    """

    def __init__(self, place_epsilon: Optional[float] = None):
        self.place_epsilon = place_epsilon
        self.registry = PlaceRegistry()

    def new_episode(self, timestamp: float) -> StationaryEpisode:
        return StationaryEpisode(timestamp)

    def submit(self, episode: StationaryEpisode) -> int:
        """
        Assign an episode to a place.

        Returns:
            Place id
        """
        if episode.size() == 0:
            raise ValueError("Cannot submit an empty episode")

        medoid = episode.medoid()
        threshold = self.place_epsilon if self.place_epsilon is not None else medoid.epsilon()

        place, distance = find_nearest_place(medoid, self.registry)
        if place is None or distance >= threshold:
            place = self.registry.spawn_place(episode)

        record_visit(place, episode)
        return place.id

    def place_count(self) -> int:
        return len(self.registry.places)

    def summary(self) -> list[dict]:
        return [place.to_meta_dict() for place in self.registry.all_places()]

    def __str__(self) -> str:
        places = self.registry.all_places()
        if not places:
            return "No significant places."

        lines = [f"{len(places)} significant place(s):"]
        for place in places:
            lines.append(
                f"  place {place.id}: {place.visit_count} visit(s), "
                f"{place.observation_count} observation(s), "
                f"seen {place.first_seen:g}-{place.last_seen:g}"
            )
        return "\n".join(lines)
