# backend/tests/test_classifier.py

import re
import time

import pytest

from honeyward.models import Category, InputValidationError, Severity, Signature
from honeyward.services import signatures
from honeyward.services.classifier import Classifier
from honeyward.services.severity import SeverityPolicy


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

def test_catalog_covers_every_category():
    assert set(signatures.all_categories()) == set(Category)
    for category in Category:
        assert signatures.patterns_for(category)
        assert signatures.patterns_for(category.value) == signatures.patterns_for(category)


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        signatures.CATALOG[Category.XSS] = ()


@pytest.mark.parametrize(
    "sig", signatures.all_signatures(), ids=lambda s: f"{s.category.value}.{s.name}"
)
def test_canonical_payload_classifies_into_its_category(classifier, sig):
    assert sig.search(sig.example)
    result = classifier.classify(sig.example, "test")
    assert sig.category in {m.category for m in result.matches}


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def test_benign_input_has_no_matches(classifier):
    assert classifier.categories("hello world", "search_query") == set()
    assert not classifier.classify("Dr. Priya Sharma, Neurology", "search_query").matched


def test_empty_input_has_no_matches(classifier):
    result = classifier.classify("", "input_email")
    assert result.matches == []


def test_multi_category_payload(classifier):
    found = {c for c, _ in classifier.categories("' OR '1'='1'; <script>alert(1)</script>", "test")}
    assert Category.SQL_INJECTION in found
    assert Category.XSS in found


def test_matching_is_case_insensitive(classifier):
    found = {c for c, _ in classifier.categories("1 uNiOn SeLeCt 1", "q")}
    assert Category.SQL_INJECTION in found


def test_multiline_payload_matches(classifier):
    payload = "hello\n<script>\nalert(1)\n</script>"
    match = next(m for m in classifier.classify(payload, "q").matches if m.category == Category.XSS)
    assert match.signature == "script_tag"
    assert "alert_call" in match.all_signatures


def test_path_traversal_end_to_end_severity(classifier):
    assert classifier.categories("../../../etc/passwd", "file_param") == {
        (Category.PATH_TRAVERSAL, Severity.HIGH)
    }


def test_encoded_traversal_is_matched_raw(classifier):
    found = {c for c, _ in classifier.categories("%2e%2e%2f%2e%2e%2fetc", "file_param")}
    assert found == {Category.PATH_TRAVERSAL}


@pytest.mark.parametrize("bad", [None, 42, b"<script>", ["a"]])
def test_non_string_input_fails_fast(classifier, bad):
    with pytest.raises(InputValidationError):
        classifier.classify(bad, "q")


def test_validation_error_is_a_type_error(classifier):
    with pytest.raises(TypeError):
        classifier.classify("x", None)


def test_long_input_is_truncated_before_matching():
    classifier = Classifier(max_input_length=10)
    result = classifier.classify("a" * 10 + "<script>alert(1)</script>", "q")
    assert result.matches == []
    assert result.input == "a" * 10


def test_result_input_length_is_configurable():
    classifier = Classifier(result_input_length=800)
    result     = classifier.classify("<script>" + "A" * 1200, "q")
    assert len(result.input) == 800


@pytest.mark.parametrize("payload", [
    "or=" * 11_000,
    "' or '" * 6_000,
    "update x " * 4_000,
    "<script>" * 4_100,
    "<script" * 4_700,
    "<svg" * 8_200,
    "/*" * 16_400,
], ids=["or_eq", "quoted_or", "update", "script_open", "script_unclosed", "svg", "comment"])
def test_adversarial_input_is_matched_quickly(classifier, payload):
    start = time.perf_counter()
    classifier.classify(payload, "q")
    assert time.perf_counter() - start < 5.0


# ---------------------------------------------------------------------------
# Severity policy
# ---------------------------------------------------------------------------

LOW_SIG = Signature(Category.XSS, "low_probe", re.compile("probe"), Severity.LOW, "probe")


def test_sensitive_location_raises_to_high():
    policy = SeverityPolicy(sensitive_locations={"admin_search"}, critical_locations=set())
    assert policy.resolve(LOW_SIG, "admin_search") == Severity.HIGH
    assert policy.resolve(LOW_SIG, "footer_newsletter") == Severity.LOW


def test_escalation_never_lowers_default():
    policy = SeverityPolicy(sensitive_locations={"search_query"}, critical_locations=set())
    sqli = signatures.patterns_for(Category.SQL_INJECTION)[0]
    assert policy.resolve(sqli, "search_query") == Severity.CRITICAL


def test_critical_location_forces_critical(classifier):
    assert classifier.categories("../etc/passwd", "admin_user_lookup") == {
        (Category.PATH_TRAVERSAL, Severity.CRITICAL)
    }


def test_caller_override_wins(classifier):
    result = classifier.classify("../etc/passwd", "file_param", context_severity=Severity.MEDIUM)
    assert result.categories() == {(Category.PATH_TRAVERSAL, Severity.MEDIUM)}
