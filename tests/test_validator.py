import json
import unittest

from mcq_check.report import IssueType
from mcq_check.validation import (
    InputQuestion,
    validate_output,
    validate_question,
)

QUESTION_ID = "3f2504e0-4f89-41d3-9a0c-0305e82c3301"


def make_option(opt_id, content, correct=False, order=0, **extra):
    return {"id": opt_id, "content": content, "correct": correct, "order": order, **extra}


def make_question(options, specification="What is $1+1$?", question_id=QUESTION_ID):
    return {
        "question_id": question_id,
        "specification": specification,
        "options": options,
    }


VALID_OPTIONS = [
    make_option(1, "$2$", correct=True, order=0),
    make_option(2, "$3$", order=1),
    make_option(3, "$4$", order=2),
]


class TestValidQuestions(unittest.TestCase):
    def test_valid_record_is_transformed_to_output_shape(self):
        result = validate_question(make_question(VALID_OPTIONS))

        self.assertTrue(result.ok)
        self.assertEqual(result.violations, ())
        dumped = result.value.model_dump()
        self.assertEqual(dumped["id"], QUESTION_ID)
        self.assertEqual(dumped["question"], "What is $1+1$?")
        self.assertEqual([o["id"] for o in dumped["options"]], [1, 2, 3])

    def test_options_given_as_json_string(self):
        result = validate_question(make_question(json.dumps(VALID_OPTIONS)))
        self.assertTrue(result.ok)
        self.assertEqual(len(result.value.options), 3)

    def test_markscheme_is_dropped_from_output(self):
        options = [
            make_option(1, "A", correct=True, order=0, markscheme="because"),
            make_option(2, "B", order=1),
        ]
        result = validate_question(make_question(options))
        self.assertTrue(result.ok)
        self.assertNotIn("markscheme", result.value.model_dump()["options"][0])

    def test_orders_need_not_be_listed_in_sequence(self):
        options = [
            make_option(1, "A", correct=True, order=1),
            make_option(2, "B", order=0),
        ]
        self.assertTrue(validate_question(make_question(options)).ok)

    def test_output_shaped_record_validates_again(self):
        first = validate_question(make_question(VALID_OPTIONS))
        second = validate_question(first.value.model_dump())
        self.assertTrue(second.ok)
        self.assertEqual(second.value, first.value)

    def test_null_question_text_is_accepted(self):
        record = {"id": QUESTION_ID, "question": None, "options": VALID_OPTIONS}
        self.assertTrue(validate_question(record).ok)

    def test_input_model_accepts_both_field_names(self):
        parsed = InputQuestion.model_validate(
            {"id": QUESTION_ID, "question": "Q", "options": VALID_OPTIONS},
        )
        self.assertEqual(parsed.question_id, QUESTION_ID)
        self.assertEqual(parsed.specification, "Q")


class TestShapeViolations(unittest.TestCase):
    def test_unparseable_options_string_is_one_violation(self):
        result = validate_question(make_question("not json"))

        self.assertFalse(result.ok)
        self.assertIsNone(result.value)
        self.assertEqual(len(result.violations), 1)
        violation = result.violations[0]
        self.assertEqual(violation.type, IssueType.ERROR)
        self.assertEqual(violation.field, "options")
        self.assertIn("not valid JSON", violation.message)
        self.assertEqual(violation.original_value, "not json")

    def test_empty_content_reports_dotted_path(self):
        options = [
            make_option(1, "A", correct=True, order=0),
            make_option(2, "", order=1),
        ]
        result = validate_question(make_question(options))

        self.assertFalse(result.ok)
        fields = [v.field for v in result.violations]
        self.assertEqual(fields, ["options.1.content"])
        self.assertIn("cannot be empty", result.violations[0].message)

    def test_all_field_errors_are_collected(self):
        record = {
            "question_id": "not-a-uuid",
            "specification": "Q",
            "options": [
                {"id": "1", "content": "A", "correct": True, "order": 0},
                {"id": 2, "content": "B", "correct": "no", "order": -1},
            ],
        }
        result = validate_question(record)

        fields = {v.field for v in result.violations}
        self.assertEqual(
            fields,
            {"question_id", "options.0.id", "options.1.correct", "options.1.order"},
        )

    def test_missing_field_has_no_original_value(self):
        record = {"question_id": QUESTION_ID, "options": VALID_OPTIONS}
        result = validate_question(record)

        self.assertEqual(len(result.violations), 1)
        violation = result.violations[0]
        self.assertEqual(violation.field, "specification")
        self.assertNotIn("originalValue", violation.to_dict())

    def test_non_object_record(self):
        result = validate_question(["not", "a", "record"])
        self.assertFalse(result.ok)
        self.assertEqual(len(result.violations), 1)


class TestBusinessRules(unittest.TestCase):
    def test_every_failing_rule_is_reported_in_one_pass(self):
        options = [
            make_option(1, "A", correct=True, order=0),
            make_option(1, "B", correct=True, order=5),
        ]
        result = validate_question(make_question(options, specification="$x"))

        messages = [v.message for v in result.violations]
        self.assertEqual(len(messages), 4)
        self.assertIn("Question must have exactly one correct answer", messages)
        self.assertIn("All option IDs must be unique", messages)
        self.assertIn("Option orders must be sequential starting from 0", messages)
        self.assertTrue(any("unmatched dollar" in m for m in messages))
        self.assertEqual(result.violations[-1].field, "question")

    def test_single_option_fails_cardinality(self):
        result = validate_question(
            make_question([make_option(1, "A", correct=True, order=0)]),
        )
        messages = [v.message for v in result.violations]
        self.assertEqual(messages, ["Question must have at least 2 options"])

    def test_zero_correct_answers(self):
        options = [make_option(1, "A", order=0), make_option(2, "B", order=1)]
        result = validate_question(make_question(options))
        self.assertEqual(len(result.violations), 1)
        self.assertEqual(result.violations[0].original_value, 0)

    def test_duplicate_ids_are_listed(self):
        options = [
            make_option(0, "A", correct=True, order=0),
            make_option(0, "B", order=1),
            make_option(1, "C", order=2),
        ]
        result = validate_question(make_question(options))
        self.assertEqual(len(result.violations), 1)
        self.assertEqual(result.violations[0].original_value, [0])

    def test_unbalanced_braces_in_option_content(self):
        options = [
            make_option(1, "$\\frac{1}{2$", correct=True, order=0),
            make_option(2, "B", order=1),
        ]
        result = validate_question(make_question(options))
        self.assertEqual([v.field for v in result.violations], ["options.0.content"])
        self.assertIn("unmatched braces", result.violations[0].message)

    def test_validate_output_rejects_input_shape(self):
        result = validate_output(make_question(VALID_OPTIONS))
        fields = {v.field for v in result.violations}
        self.assertIn("id", fields)
        self.assertIn("question", fields)


if __name__ == "__main__":
    unittest.main()
