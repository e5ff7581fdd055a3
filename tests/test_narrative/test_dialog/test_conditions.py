import pytest
from narrative.dialog.conditions import ComparisonOperator, ConditionEvaluator, ConditionMode, parse_int
from narrative.dialog.models import Condition


def tag_check(tag, value, operator=None):
    return Condition(type="TAG_CHECK", param=tag, value=value, operator=operator)


@pytest.mark.parametrize("operator,expected", [
    ("EQUAL", False),
    ("NOT_EQUAL", True),
    ("GREATER_THAN", True),
    ("GREATER_EQUAL", True),
    ("LESS_THAN", False),
    ("LESS_EQUAL", False),
    (">", True),
    ("<=", False),
    ("==", False),
    ("!=", True),
])
def test_operator_truth_table(evaluator, tags, operator, expected):
    tags.set_value("trust", 5)
    assert evaluator.evaluate(tag_check("trust", "3", operator)) is expected


def test_missing_operator_means_equal(evaluator, tags):
    tags.set_value("trust", 3)
    assert evaluator.evaluate(tag_check("trust", "3"))
    assert not evaluator.evaluate(tag_check("trust", "4", ""))


def test_unknown_operator_falls_back_to_equal():
    assert ComparisonOperator.parse("ROUGHLY") == ComparisonOperator.EQUAL
    assert ComparisonOperator.parse(" greater_than ") == ComparisonOperator.GREATER_THAN


def test_absent_condition_is_true(evaluator):
    assert evaluator.evaluate(None)
    assert evaluator.evaluate(Condition())
    assert evaluator.evaluate(Condition(type="TAG_CHECK", param="x"))
    assert evaluator.evaluate(Condition(value="1"))


def test_unknown_kind_is_false(evaluator):
    assert not evaluator.evaluate(Condition(type="WEATHER", param="rain", value="1"))


def test_kind_is_case_insensitive(evaluator, tags):
    tags.set_value("met", 1)
    assert evaluator.evaluate(Condition(type="tag_check", param="met", value="1"))


def test_unknown_tag_reads_zero(evaluator):
    assert evaluator.evaluate(tag_check("never_set", "0"))


def test_non_integer_value_is_false(evaluator, tags):
    tags.set_value("trust", 1)
    assert not evaluator.evaluate(tag_check("trust", "lots"))


def test_item_owned_uses_catalog(evaluator, inventory, catalog):
    inventory.add_item(catalog.get_item_by_id(1), 3)
    assert evaluator.evaluate(Condition(type="ITEM_OWNED", param="1", value="2", operator=">="))
    assert not evaluator.evaluate(Condition(type="ITEM_OWNED", param="1", value="4", operator=">="))


def test_item_owned_unknown_item_is_false(evaluator):
    assert not evaluator.evaluate(Condition(type="ITEM_OWNED", param="99", value="0"))


def test_item_owned_without_catalog_uses_numeric_id(inventory):
    inventory.add_item(7, 2)
    evaluator = ConditionEvaluator(inventory=inventory)
    assert evaluator.evaluate(Condition(type="ITEM_OWNED", param="7", value="2"))


def test_missing_collaborator_is_false():
    evaluator = ConditionEvaluator()
    assert not evaluator.evaluate(tag_check("trust", "0"))
    assert not evaluator.evaluate(Condition(type="ITEM_OWNED", param="1", value="0"))


def test_store_error_is_false(tags):
    class BrokenStore:
        def get_value(self, tag_id):
            raise RuntimeError("store offline")

        def set_value(self, tag_id, value):
            pass

    evaluator = ConditionEvaluator(BrokenStore())
    assert not evaluator.evaluate(tag_check("trust", "0"))


def test_evaluate_all_modes(evaluator, tags):
    tags.set_value("a", 1)
    true_cond = tag_check("a", "1")
    false_cond = tag_check("a", "2")

    assert evaluator.evaluate_all([true_cond, true_cond])
    assert not evaluator.evaluate_all([true_cond, false_cond], "AND")
    assert evaluator.evaluate_all([false_cond, true_cond], ConditionMode.OR)
    assert not evaluator.evaluate_all([false_cond], "or")
    assert evaluator.evaluate_all([])
    assert evaluator.evaluate_all([], ConditionMode.OR)
    # Unknown mode behaves as AND
    assert not evaluator.evaluate_all([true_cond, false_cond], "XOR")


def test_numbers_authored_as_numbers_are_accepted(evaluator, tags):
    tags.set_value("level", 10)
    condition = Condition.model_validate({"type": "TAG_CHECK", "param": "level", "value": 10})
    assert condition.value == "10"
    assert evaluator.evaluate(condition)


def test_parse_int():
    assert parse_int(" 12 ") == 12
    assert parse_int("-3") == -3
    assert parse_int("1.5") is None
    assert parse_int(None) is None
