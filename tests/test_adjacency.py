"""Tests for district neighbor candidates."""

from py_citygen.core.adjacency import adjacent_coords
from py_citygen.core.alea_prng import AleaPRNG
from py_citygen.core.districts import Coord, District


def _district(*cells):
    return District(id=1, name="test", locations=[Coord(r, c) for r, c in cells])


class TestAdjacentCoords:
    """Test neighbor discovery around a district."""

    def test_orthogonal_neighbors_in_order(self):
        """A middle cell has four orthogonal neighbors, scanned top to bottom."""
        district = _district((1, 1))
        result = adjacent_coords(district, 2, 2)

        assert result == [Coord(0, 1), Coord(1, 0), Coord(1, 2), Coord(2, 1)]

    def test_diagonal_neighbors(self):
        district = _district((1, 1))
        result = adjacent_coords(district, 2, 2, allow_diagonal=True)

        assert len(result) == 8
        assert result[0] == Coord(0, 0)
        assert result[-1] == Coord(2, 2)

    def test_corner_stays_in_bounds(self):
        district = _district((0, 0))

        assert adjacent_coords(district, 4, 4) == [Coord(0, 1), Coord(1, 0)]
        assert adjacent_coords(district, 4, 4, allow_diagonal=True) == [
            Coord(0, 1),
            Coord(1, 0),
            Coord(1, 1),
        ]

    def test_excludes_owned_and_duplicates(self):
        """Shared neighbors are listed once and owned cells never."""
        district = _district((0, 0), (0, 1))
        result = adjacent_coords(district, 1, 1)

        assert result == [Coord(1, 0), Coord(1, 1)]

    def test_single_cell_grid(self):
        assert adjacent_coords(_district((0, 0)), 0, 0, allow_diagonal=True) == []

    def test_empty_district(self):
        assert adjacent_coords(_district(), 5, 5) == []

    def test_random_districts_properties(self):
        """No duplicates, nothing owned, nothing out of bounds."""
        prng = AleaPRNG("adjacency")
        max_row, max_col = 7, 9

        for _ in range(50):
            cells = {
                (prng.randrange(0, max_row + 1), prng.randrange(0, max_col + 1))
                for _ in range(prng.randrange(1, 20))
            }
            district = _district(*sorted(cells))
            for diagonal in (False, True):
                result = adjacent_coords(district, max_row, max_col, diagonal)

                assert len(result) == len(set(result))
                assert not set(result) & set(district.locations)
                for coord in result:
                    assert 0 <= coord.row <= max_row
                    assert 0 <= coord.col <= max_col
