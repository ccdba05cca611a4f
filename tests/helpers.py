"""Builders for candidates and pip observations shared by the tests."""

from internal_data_classes import Candidate, DotObservation

# Two tight groups of three pips, far apart
TWO_TILE_POSITIONS = [(10, 10), (20, 10), (15, 18), (200, 200), (210, 200), (205, 208)]


def make_candidate(x=50.0, y=50.0, r=5.0, area=80.0, width=10.0, height=10.0):
    return Candidate(area=area, width=width, height=height, center=(x, y), enclosing_radius=r)


def dots(*positions, r=5.0):
    return [DotObservation(x=float(x), y=float(y), r=r) for x, y in positions]
