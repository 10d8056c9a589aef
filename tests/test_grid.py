import unittest

from minicross.core.constants import Direction
from minicross.core.exceptions import (
    GridStateError,
    InvalidMaskError,
    LengthMismatchError,
    SlotPlacementError,
)
from minicross.core.models import Slot
from minicross.data.masks import MaskCatalog
from minicross.engine.grid import GridModel

SQUARE = ["...##", "...##", "...##", "#####", "#####"]
CORNER = ["...##", ".####", ".####", "#####", "#####"]
OPEN = ["....."] * 5


class SlotDetectionTests(unittest.TestCase):
    def test_corner_mask_shares_number_one(self) -> None:
        grid = GridModel.build(CORNER)
        self.assertEqual([slot.id for slot in grid.slots], ["1A", "1D"])
        across, down = grid.slots
        self.assertEqual(across.direction, Direction.ACROSS)
        self.assertEqual(across.cells, ((0, 0), (0, 1), (0, 2)))
        self.assertEqual(down.cells, ((0, 0), (1, 0), (2, 0)))
        self.assertEqual(across.clue_number, 1)
        self.assertEqual(down.clue_number, 1)
        self.assertEqual(grid.cell(0, 0).clue_number, 1)
        self.assertIsNone(grid.cell(0, 1).clue_number)

    def test_square_mask_numbering(self) -> None:
        grid = GridModel.build(SQUARE)
        self.assertEqual([slot.id for slot in grid.slots], ["1A", "1D", "2D", "3D", "4A", "5A"])
        numbers = {
            (r, c): grid.cell(r, c).clue_number
            for r in range(5)
            for c in range(5)
            if grid.cell(r, c).clue_number
        }
        self.assertEqual(numbers, {(0, 0): 1, (0, 1): 2, (0, 2): 3, (1, 0): 4, (2, 0): 5})
        self.assertEqual(len(grid.across_slots), 3)
        self.assertEqual(len(grid.down_slots), 3)

    def test_open_grid_has_ten_slots(self) -> None:
        grid = GridModel.build(OPEN)
        self.assertEqual(len(grid.slots), 10)
        self.assertEqual(sorted({slot.clue_number for slot in grid.slots}), list(range(1, 10)))
        self.assertTrue(all(slot.length == 5 for slot in grid.slots))
        self.assertTrue(all(slot.pattern == "?????" for slot in grid.slots))

    def test_short_runs_are_not_slots(self) -> None:
        grid = GridModel.build([".....", ".#.#.", ".....", "#####", "#####"])
        self.assertEqual([slot.id for slot in grid.slots], ["1A", "1D", "2D", "3D", "4A"])
        self.assertTrue(all(3 <= slot.length <= 5 for slot in grid.slots))

    def test_catalog_masks_cover_every_white_cell(self) -> None:
        for mask in MaskCatalog():
            grid = GridModel.build(mask)
            self.assertEqual(grid.mask_id, mask.id)
            covered = {cell for slot in grid.slots for cell in slot.cells}
            whites = {
                (r, c) for r in range(5) for c in range(5) if not grid.cell(r, c).is_black
            }
            self.assertEqual(covered, whites, mask.id)
            for slot in grid.slots:
                self.assertEqual(len(slot.cells), slot.length)
                self.assertIn(slot.length, (3, 4, 5))

    def test_invalid_mask_shape_raises(self) -> None:
        with self.assertRaises(InvalidMaskError):
            GridModel.build(["...", "..."])
        with self.assertRaises(InvalidMaskError):
            GridModel.build(["..x..", ".....", ".....", ".....", "....."])

    def test_slot_rejects_unsupported_length(self) -> None:
        with self.assertRaises(ValueError):
            Slot(
                id="1A",
                direction=Direction.ACROSS,
                start_row=0,
                start_col=0,
                length=2,
                cells=((0, 0), (0, 1)),
                clue_number=1,
            )


class IntersectionTests(unittest.TestCase):
    def test_corner_crossing(self) -> None:
        grid = GridModel.build(CORNER)
        across = grid.slot("1A")
        (crossing,) = grid.intersections_of(across)
        self.assertIs(crossing.other, grid.slot("1D"))
        self.assertEqual((crossing.index_in_this, crossing.index_in_other), (0, 0))

    def test_square_crossings(self) -> None:
        grid = GridModel.build(SQUARE)
        middle = grid.slot("4A")
        triples = [(c.other.id, c.index_in_this, c.index_in_other) for c in grid.intersections_of(middle)]
        self.assertEqual(triples, [("1D", 0, 1), ("2D", 1, 1), ("3D", 2, 1)])
        self.assertEqual(grid.intersections.count(middle), 3)
        self.assertEqual(grid.intersections.crossing_ids(grid.slot("2D")), ["1A", "4A", "5A"])


class PlacementTests(unittest.TestCase):
    def test_place_word_updates_crossing_patterns(self) -> None:
        grid = GridModel.build(SQUARE)
        grid.place_word("CAP", grid.slot("1A"))
        self.assertEqual(grid.slot("1A").pattern, "cap")
        self.assertEqual(grid.slot("1D").pattern, "c??")
        self.assertEqual(grid.slot("3D").pattern, "p??")
        self.assertEqual(grid.slot("4A").pattern, "???")
        self.assertEqual(grid.placed_slot_ids, frozenset({"1A"}))

    def test_place_word_rejects_bad_input(self) -> None:
        grid = GridModel.build(SQUARE)
        with self.assertRaises(LengthMismatchError):
            grid.place_word("cart", grid.slot("1A"))
        grid.place_word("cap", grid.slot("1A"))
        with self.assertRaises(SlotPlacementError):
            grid.place_word("dot", grid.slot("1D"))
        self.assertEqual(grid.slot("1D").pattern, "c??")

    def test_is_valid_placement_checks_crossings(self) -> None:
        grid = GridModel.build(CORNER)
        grid.place_word("cat", grid.slot("1A"))
        down = grid.slot("1D")
        self.assertTrue(grid.is_valid_placement("cow", down))
        self.assertFalse(grid.is_valid_placement("dog", down))
        self.assertFalse(grid.is_valid_placement("cows", down))

    def test_remove_word_keeps_shared_letters(self) -> None:
        grid = GridModel.build(CORNER)
        grid.place_word("cat", grid.slot("1A"))
        grid.place_word("car", grid.slot("1D"))
        grid.remove_word(grid.slot("1A"))
        self.assertEqual(grid.cell(0, 0).letter, "c")
        self.assertIsNone(grid.cell(0, 1).letter)
        self.assertEqual(grid.slot("1A").pattern, "c??")
        self.assertEqual(grid.slot("1D").pattern, "car")
        grid.verify_patterns()

    def test_remove_unplaced_slot_is_noop(self) -> None:
        grid = GridModel.build(CORNER)
        grid.place_word("cat", grid.slot("1A"))
        grid.remove_word(grid.slot("1D"))
        self.assertEqual(grid.slot("1A").pattern, "cat")

    def test_snapshot_restore_round_trip(self) -> None:
        grid = GridModel.build(SQUARE)
        grid.place_word("cap", grid.slot("1A"))
        before = grid.snapshot()
        rows_before = grid.to_rows()

        grid.place_word("cot", grid.slot("1D"))
        grid.place_word("ore", grid.slot("4A"))
        grid.restore(before)

        self.assertEqual({slot.id: slot.pattern for slot in grid.slots}, before.patterns)
        self.assertEqual(grid.to_rows(), rows_before)
        self.assertEqual(grid.placed_slot_ids, frozenset({"1A"}))
        self.assertEqual(grid.cell(0, 0).placed_by, {"1A"})
        self.assertEqual(grid.cell(1, 0).placed_by, set())

        grid.remove_word(grid.slot("1A"))
        self.assertTrue(all(slot.pattern == "???" for slot in grid.slots))

    def test_verify_patterns_detects_drift(self) -> None:
        grid = GridModel.build(CORNER)
        grid.slot("1A").pattern = "zzz"
        with self.assertRaises(GridStateError):
            grid.verify_patterns()

    def test_to_rows_and_completion(self) -> None:
        grid = GridModel.build(CORNER)
        self.assertFalse(grid.is_complete())
        grid.place_word("cat", grid.slot("1A"))
        grid.place_word("cow", grid.slot("1D"))
        self.assertTrue(grid.is_complete())
        self.assertEqual(grid.to_rows(), ["cat##", "o####", "w####", "#####", "#####"])
        self.assertEqual(list(grid.unfilled_slots()), [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
