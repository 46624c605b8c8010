import unittest

from screendiff.exceptions import (
    MalformedJSONError,
    MissingKeyError,
    NoJSONFoundError,
    ParseError,
    ParseErrorKind,
)
from screendiff.services.parser import parse_model_response
from tests.helpers import fenced, model_reply

DIFF = {
    "type": "text_change",
    "location": "header",
    "description": "Question mark changed to exclamation mark",
    "coordinates": {"x1": 123, "y1": 456, "x2": 789, "y2": 501},
    "highlight_area": {"x1": 113, "y1": 446, "x2": 799, "y2": 511},
    "before": "Hello?",
    "after": "Hello!",
}


class TestParseModelResponse(unittest.TestCase):
    def test_two_fenced_blocks(self):
        parsed = parse_model_response(model_reply([DIFF], image2=(1568, 1176)))
        self.assertEqual(parsed.processed_dimensions.image2.width, 1568)
        self.assertEqual(parsed.processed_dimensions.image2.height, 1176)
        self.assertEqual(len(parsed.differences), 1)
        diff = parsed.differences[0]
        self.assertEqual(diff.type, "text_change")
        self.assertEqual(diff.before, "Hello?")
        self.assertEqual(diff.after, "Hello!")
        self.assertEqual(diff.highlight_area.x2, 799)
        self.assertEqual(diff.render_box, diff.highlight_area)

    def test_empty_differences_is_a_list(self):
        parsed = parse_model_response('{"differences": []}')
        self.assertEqual(parsed.differences, [])
        self.assertIsNone(parsed.processed_dimensions)

    def test_null_differences_is_empty_list(self):
        parsed = parse_model_response(fenced({"differences": None}))
        self.assertEqual(parsed.differences, [])

    def test_no_json_at_all(self):
        with self.assertRaises(NoJSONFoundError) as ctx:
            parse_model_response("The two screenshots look identical to me.")
        self.assertEqual(ctx.exception.kind, ParseErrorKind.NO_JSON)

    def test_empty_text(self):
        with self.assertRaises(NoJSONFoundError):
            parse_model_response("")

    def test_trailing_comma_is_malformed(self):
        text = '```json\n{"differences": [{"type": "text_change"},]}\n```'
        with self.assertRaises(MalformedJSONError) as ctx:
            parse_model_response(text)
        self.assertEqual(ctx.exception.kind, ParseErrorKind.MALFORMED)
        self.assertNotEqual(ctx.exception.kind, ParseErrorKind.NO_JSON)

    def test_malformed_fallback_object(self):
        with self.assertRaises(MalformedJSONError):
            parse_model_response('Result: {"differences": [1, 2,]}')

    def test_braces_in_prose_are_not_json(self):
        with self.assertRaises(NoJSONFoundError):
            parse_model_response("The header uses {curly} quotes now.")

    def test_fallback_skips_prose_braces(self):
        text = 'Note the {curly} quotes. Result: {"differences": [{"type": "text_change"}]}'
        parsed = parse_model_response(text)
        self.assertEqual([d.type for d in parsed.differences], ["text_change"])

    def test_infinite_coordinate_is_malformed(self):
        text = '```json\n{"differences": [{"highlight_area": {"x1": 0, "y1": 0, "x2": Infinity, "y2": 5}}]}\n```'
        with self.assertRaises(MalformedJSONError) as ctx:
            parse_model_response(text)
        self.assertEqual(ctx.exception.kind, ParseErrorKind.MALFORMED)

    def test_nan_dimension_is_malformed(self):
        text = (
            '```json\n{"processed_dimensions": {"image1": {"width": 10, "height": 10}, '
            '"image2": {"width": NaN, "height": 10}}}\n```\n'
            + fenced({"differences": []})
        )
        with self.assertRaises(MalformedJSONError):
            parse_model_response(text)

    def test_dimensions_without_differences_is_missing_key(self):
        text = fenced({"processed_dimensions": {
            "image1": {"width": 10, "height": 10},
            "image2": {"width": 10, "height": 10},
        }})
        with self.assertRaises(MissingKeyError) as ctx:
            parse_model_response(text)
        self.assertEqual(ctx.exception.kind, ParseErrorKind.MISSING_KEY)
        self.assertEqual(ctx.exception.key, "differences")

    def test_fallback_object_without_differences_key(self):
        with self.assertRaises(ParseError) as ctx:
            parse_model_response('I found this: {"changes": []}')
        self.assertEqual(ctx.exception.kind, ParseErrorKind.MISSING_KEY)

    def test_first_matching_block_wins(self):
        first = fenced({"differences": [{"type": "first"}]})
        second = fenced({"differences": [{"type": "second"}, {"type": "third"}]})
        parsed = parse_model_response(first + "\n\n" + second)
        self.assertEqual([d.type for d in parsed.differences], ["first"])

    def test_unrelated_fenced_blocks_are_skipped(self):
        text = "```python\nprint('hi')\n```\n\n" + model_reply([DIFF])
        parsed = parse_model_response(text)
        self.assertEqual(len(parsed.differences), 1)

    def test_untagged_fence(self):
        text = '```\n{"differences": [{"type": "layout_change"}]}\n```'
        parsed = parse_model_response(text)
        self.assertEqual(parsed.differences[0].type, "layout_change")

    def test_fallback_reads_both_keys_from_one_object(self):
        text = (
            'Analysis: {"processed_dimensions": {"image1": {"width": 800, "height": 600}, '
            '"image2": {"width": 800, "height": 600}}, "differences": [{"type": "color_change"}]} done.'
        )
        parsed = parse_model_response(text)
        self.assertEqual(parsed.processed_dimensions.image1.width, 800)
        self.assertEqual(parsed.differences[0].type, "color_change")

    def test_differences_must_be_a_list(self):
        with self.assertRaises(MalformedJSONError):
            parse_model_response(fenced({"differences": {"type": "text_change"}}))

    def test_incomplete_box_is_malformed(self):
        bad = {"type": "text_change", "highlight_area": {"x1": 1, "y1": 2}}
        with self.assertRaises(MalformedJSONError):
            parse_model_response(fenced({"differences": [bad]}))

    def test_inverted_box_is_tolerated(self):
        inverted = {"type": "layout_change", "coordinates": {"x1": 200, "y1": 150, "x2": 100, "y2": 100}}
        parsed = parse_model_response(fenced({"differences": [inverted]}))
        self.assertEqual(parsed.differences[0].coordinates.x1, 200)

    def test_extra_fields_are_kept(self):
        parsed = parse_model_response(fenced({"differences": [{"type": "text_change", "severity": "high"}]}))
        self.assertEqual(parsed.differences[0].model_dump()["severity"], "high")

    def test_idempotent(self):
        text = model_reply([DIFF, {"type": "layout_change", "location": "footer"}])
        self.assertEqual(parse_model_response(text), parse_model_response(text))


if __name__ == '__main__':
    unittest.main()
