"""
Test the reference place clusterer
"""

import pytest

from motionstate.core.observation import VectorObservation
from motionstate.clustering.models import StationaryEpisode, PlaceRegistry
from motionstate.clustering.places import (
    PlaceClusterer,
    SignificantPlaceClusterer,
    find_nearest_place,
)


def episode_at(places, timestamp, xs, eps=1.0):
    episode = places.new_episode(timestamp)
    for x in xs:
        episode.add_observation(VectorObservation([x], eps))
    return episode


def test_medoid():
    episode = StationaryEpisode(0.0)
    for x in [0.0, 1.0, 10.0]:
        episode.add_observation(VectorObservation([x], 1.0))

    assert episode.medoid().values[0] == 1.0
    assert episode.size() == 3


def test_empty_episode_has_no_medoid():
    with pytest.raises(ValueError):
        StationaryEpisode(0.0).medoid()


def test_episodes_matched_to_places():
    places = SignificantPlaceClusterer()

    home = places.submit(episode_at(places, 0.0, [0.0, 0.1, 0.2]))
    work = places.submit(episode_at(places, 100.0, [500.0, 500.1]))
    home_again = places.submit(episode_at(places, 200.0, [0.3, 0.4]))

    assert (home, work, home_again) == (0, 1, 0)
    assert places.place_count() == 2

    place = places.registry.get(0)
    assert place.visit_count == 2
    assert place.observation_count == 5
    assert place.first_seen == 0.0
    assert place.last_seen == 200.0
    print("  ✓ Return visit matched to existing place")


def test_place_epsilon_override():
    places = SignificantPlaceClusterer(place_epsilon=0.05)

    first = places.submit(episode_at(places, 0.0, [0.0, 0.1]))
    second = places.submit(episode_at(places, 10.0, [0.3, 0.4]))

    assert first != second
    print("  ✓ Tighter place_epsilon splits nearby dwells")


def test_empty_episode_rejected():
    places = SignificantPlaceClusterer()
    with pytest.raises(ValueError):
        places.submit(places.new_episode(0.0))


def test_find_nearest_place_empty_registry():
    place, distance = find_nearest_place(VectorObservation([0.0], 1.0), PlaceRegistry())
    assert place is None
    assert distance == float('inf')


def test_status_string():
    places = SignificantPlaceClusterer()
    assert str(places) == "No significant places."

    places.submit(episode_at(places, 5.0, [0.0, 0.1]))
    status = str(places)
    assert status.startswith("1 significant place(s):")
    assert "place 0: 1 visit(s), 2 observation(s)" in status
    assert places.summary()[0]["visit_count"] == 1


def test_reference_clusterer_satisfies_protocol():
    assert isinstance(SignificantPlaceClusterer(), PlaceClusterer)
