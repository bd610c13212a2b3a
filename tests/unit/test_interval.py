import pytest
from svshard.interval import Interval


class TestInterval:
    def test_point(self):
        interval = Interval(5)
        assert interval.start == 5
        assert interval.end == 5

    def test_bad_order(self):
        with pytest.raises(AttributeError):
            Interval(5, 4)

    def test_getitem(self):
        interval = Interval(1, 10)
        assert interval[0] == 1
        assert interval[1] == 10
        with pytest.raises(IndexError):
            interval[2]

    def test_overlaps(self):
        assert Interval.overlaps((1, 10), (10, 11))
        assert not Interval.overlaps(Interval(1, 4), Interval(5, 7))
        assert Interval.overlaps(Interval(5, 7), (1, 5))

    def test_dist(self):
        assert Interval.dist((1, 4), (5, 7)) == -1
        assert Interval.dist((5, 7), (1, 4)) == 1
        assert Interval.dist((5, 8), (7, 9)) == 0

    def test_union(self):
        assert Interval.union((1, 2), (4, 6), (20, 21)) == Interval(1, 21)
        with pytest.raises(AttributeError):
            Interval.union()

    def test_eq(self):
        assert Interval(1, 2) == (1, 2)
        assert Interval(1, 2) != Interval(1, 3)
        assert Interval(1, 2) != '12'
