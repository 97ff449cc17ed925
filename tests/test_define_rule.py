import pytest

from seo_audit.rules.define import RuleDefinitionError, define_rule, fail, pass_, rule, validate_rule, warn
from seo_audit.types import Rule, RuleStatus


def _check(context):
    return pass_("x", "ok")


def _valid(**overrides):
    data = {
        "id": "core-sample",
        "name": "Sample",
        "description": "A sample rule",
        "category": "core",
        "weight": 10,
        "check": _check,
    }
    data.update(overrides)
    return data


def test_define_rule_returns_rule_for_valid_mapping() -> None:
    defined = define_rule(_valid())
    assert isinstance(defined, Rule)
    assert defined.id == "core-sample"
    assert defined.stateful is False
    assert defined.timeout is None


def test_define_rule_returns_rule_instance_unchanged() -> None:
    original = Rule(id="a", name="A", description="d", category="core", weight=0, check=_check)
    assert define_rule(original) is original


def test_define_rule_reports_every_violation_at_once() -> None:
    candidate = _valid()
    del candidate["name"]
    del candidate["description"]
    candidate["weight"] = 150
    with pytest.raises(RuleDefinitionError) as excinfo:
        define_rule(candidate)
    errors = excinfo.value.errors
    assert len(errors) == 3
    message = str(excinfo.value)
    assert message.startswith("Invalid rule definition:\n  - ")
    assert '"name"' in message
    assert '"description"' in message
    assert '"weight"' in message


def test_validate_rule_collects_type_problems() -> None:
    errors = validate_rule(
        {"id": "", "name": "n", "description": "d", "category": "", "weight": True, "check": "nope"}
    )
    assert any('"id"' in e for e in errors)
    assert any('"category"' in e for e in errors)
    assert any('"weight"' in e for e in errors)
    assert any('"check"' in e for e in errors)


@pytest.mark.parametrize("weight", [0, 100, 42.5])
def test_weight_bounds_are_inclusive(weight) -> None:
    assert validate_rule(_valid(weight=weight)) == []


@pytest.mark.parametrize("weight", [-1, 100.01, "10", None])
def test_weight_out_of_range_or_not_numeric(weight) -> None:
    assert validate_rule(_valid(weight=weight))


def test_rejects_unknown_fields_and_bad_timeout() -> None:
    errors = validate_rule(_valid(severity="high", timeout=0, stateful="yes"))
    assert any("severity" in e for e in errors)
    assert any('"timeout"' in e for e in errors)
    assert any('"stateful"' in e for e in errors)


def test_result_helpers_have_fixed_scores() -> None:
    assert pass_("r", "m").score == 100
    assert warn("r", "m").score == 50
    assert fail("r", "m").score == 0
    assert pass_("r", "m").status is RuleStatus.PASS
    assert warn("r", "m").status is RuleStatus.WARN
    assert fail("r", "m").status is RuleStatus.FAIL


def test_details_present_only_when_supplied() -> None:
    assert "details" not in pass_("r", "m").to_dict()
    assert "details" not in warn("r", "m").to_dict()
    assert fail("r", "m", {"count": 2}).to_dict()["details"] == {"count": 2}
    assert pass_("r", "m", {}).to_dict()["details"] == {}


def test_rule_decorator_builds_validated_rule() -> None:
    @rule(id="core-deco", name="Deco", description="Decorated", category="core", weight=5, timeout=2)
    def deco(context):
        return pass_("core-deco", "ok")

    assert isinstance(deco, Rule)
    assert deco.timeout == 2
    assert deco.check(None).message == "ok"


def test_rule_decorator_rejects_invalid_definition() -> None:
    with pytest.raises(RuleDefinitionError):

        @rule(id="", name="Bad", description="Bad", category="core", weight=500)
        def bad(context):
            return pass_("", "ok")
