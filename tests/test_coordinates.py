import unittest

from screendiff.exceptions import MalformedJSONError
from screendiff.schemas.comparison import BoundingBox, ImageDimensions
from screendiff.services.coordinates import rescale_box


class TestRescaleBox(unittest.TestCase):
    box = BoundingBox(x1=100, y1=100, x2=200, y2=150)

    def assertBoxAlmostEqual(self, actual: BoundingBox, expected: BoundingBox):
        for corner in ("x1", "y1", "x2", "y2"):
            self.assertAlmostEqual(getattr(actual, corner), getattr(expected, corner), places=9)

    def test_identity(self):
        scaled = rescale_box(self.box, (1024, 768), (1024, 768))
        self.assertBoxAlmostEqual(scaled, self.box)

    def test_downscale_to_target(self):
        processed = ImageDimensions(width=1568, height=1176)
        target = ImageDimensions(width=800, height=600)
        scaled = rescale_box(self.box, processed, target).rounded()
        self.assertEqual(scaled, BoundingBox(x1=51, y1=51, x2=102, y2=77))

    def test_linear_in_processed_dimensions(self):
        target = (800, 600)
        base = rescale_box(self.box, (1000, 500), target)
        for k in (2.0, 0.5, 3.7):
            scaled = rescale_box(self.box, (1000 * k, 500 * k), target)
            self.assertBoxAlmostEqual(
                scaled,
                BoundingBox(x1=base.x1 / k, y1=base.y1 / k, x2=base.x2 / k, y2=base.y2 / k),
            )

    def test_axes_scale_independently(self):
        scaled = rescale_box(self.box, (1000, 1000), (2000, 500))
        self.assertBoxAlmostEqual(scaled, BoundingBox(x1=200, y1=50, x2=400, y2=75))

    def test_no_clipping(self):
        box = BoundingBox(x1=-50, y1=900, x2=1200, y2=1300)
        scaled = rescale_box(box, (1000, 1000), (500, 500))
        self.assertBoxAlmostEqual(scaled, BoundingBox(x1=-25, y1=450, x2=600, y2=650))

    def test_inverted_box_passes_through(self):
        box = BoundingBox(x1=200, y1=150, x2=100, y2=100)
        scaled = rescale_box(box, (100, 100), (200, 200))
        self.assertBoxAlmostEqual(scaled, BoundingBox(x1=400, y1=300, x2=200, y2=200))

    def test_zero_processed_dimension(self):
        with self.assertRaises(MalformedJSONError):
            rescale_box(self.box, (0, 600), (800, 600))

    def test_nan_processed_dimension(self):
        with self.assertRaises(MalformedJSONError):
            rescale_box(self.box, (float("nan"), 600), (800, 600))

    def test_overflowing_box(self):
        huge = BoundingBox(x1=0, y1=0, x2=1e308, y2=10)
        with self.assertRaises(MalformedJSONError):
            rescale_box(huge, (1, 1), (800, 600))


if __name__ == '__main__':
    unittest.main()
