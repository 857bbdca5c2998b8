import unittest

from fallingblocks.game.geometry import (
    Piece,
    Point,
    Shape,
    color_index,
    piece_cells,
    preview_cells,
    rotate,
    shape_cells,
)


EXPECTED_TABLE = {
    Shape.I: {(-2, 0), (-1, 0), (0, 0), (1, 0)},
    Shape.O: {(0, 0), (1, 0), (0, 1), (1, 1)},
    Shape.T: {(-1, 0), (0, 0), (1, 0), (0, 1)},
    Shape.S: {(0, 0), (1, 0), (-1, 1), (0, 1)},
    Shape.Z: {(-1, 0), (0, 0), (0, 1), (1, 1)},
    Shape.J: {(-1, 0), (-1, 1), (0, 0), (1, 0)},
    Shape.L: {(1, 1), (-1, 0), (0, 0), (1, 0)},
}


class ShapeTableTests(unittest.TestCase):
    def test_every_shape_has_four_distinct_cells(self):
        self.assertEqual(len(Shape), 7)
        for shape in Shape:
            cells = shape_cells(shape)
            self.assertEqual(len(cells), 4)
            self.assertEqual(len(set(cells)), 4)

    def test_table_matches_reference_offsets(self):
        for shape, expected in EXPECTED_TABLE.items():
            self.assertEqual(set(shape_cells(shape)), expected, shape.name)

    def test_shape_ordinals(self):
        self.assertEqual([s.name for s in Shape], ["I", "O", "T", "S", "Z", "J", "L"])
        self.assertEqual(int(Shape.I), 0)
        self.assertEqual(int(Shape.L), 6)


class RotateTests(unittest.TestCase):
    def test_single_quarter_turn(self):
        self.assertEqual(rotate(Point(2, 1), 1), Point(-1, 2))
        self.assertEqual(rotate(Point(-2, 0), 1), Point(0, -2))

    def test_zero_turns_is_identity(self):
        self.assertEqual(rotate(Point(3, -4), 0), Point(3, -4))

    def test_four_applications_return_original(self):
        points = [Point(0, 0), Point(1, 0), Point(-2, 0), Point(1, 1), Point(-1, 3)]
        for p in points:
            for r in range(-6, 10):
                q = p
                for _ in range(4):
                    q = rotate(q, r)
                self.assertEqual(q, p, (p, r))

    def test_negative_turns_fold_into_range(self):
        p = Point(1, 2)
        self.assertEqual(rotate(p, -1), rotate(p, 3))
        self.assertEqual(rotate(p, -2), rotate(p, 2))
        self.assertEqual(rotate(p, 5), rotate(p, 1))


class PieceCellsTests(unittest.TestCase):
    def test_i_piece_at_spawn(self):
        piece = Piece(Shape.I, Point(5, 0), 0)
        self.assertEqual(
            set(piece_cells(piece)),
            {Point(3, 0), Point(4, 0), Point(5, 0), Point(6, 0)},
        )

    def test_rotated_i_piece_is_vertical(self):
        piece = Piece(Shape.I, Point(4, 5), 1)
        self.assertEqual(
            set(piece_cells(piece)),
            {Point(4, 3), Point(4, 4), Point(4, 5), Point(4, 6)},
        )

    def test_piece_operations_return_new_values(self):
        piece = Piece(Shape.T, Point(5, 0), 3)
        self.assertEqual(piece.shifted(-1, 2), Piece(Shape.T, Point(4, 2), 3))
        self.assertEqual(piece.rotated(), Piece(Shape.T, Point(5, 0), 0))
        self.assertEqual(piece.at(Point(1, 1)), Piece(Shape.T, Point(1, 1), 0))
        self.assertEqual(piece, Piece(Shape.T, Point(5, 0), 3))


class PreviewTests(unittest.TestCase):
    def test_preview_is_normalized(self):
        for shape in Shape:
            cells = preview_cells(shape)
            self.assertEqual(min(p.x for p in cells), 0)
            self.assertEqual(min(p.y for p in cells), 0)
            self.assertEqual(len(set(cells)), 4)

    def test_l_preview(self):
        self.assertEqual(
            preview_cells(Shape.L),
            [Point(2, 1), Point(0, 0), Point(1, 0), Point(2, 0)],
        )

    def test_color_index(self):
        self.assertEqual([color_index(v) for v in range(1, 8)], [0, 1, 2, 3, 4, 5, 6])


if __name__ == "__main__":
    unittest.main()
