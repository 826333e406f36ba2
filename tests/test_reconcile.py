# tests/test_reconcile.py
"""Tests for latest-version reconciliation and priority ordering."""

import logging
import random

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st


def _record(group, version, reason=None, tumor="1"):
    from onkofhir.models import NotificationRecord

    return NotificationRecord.from_payload({
        "ID": group * 100 + version,
        "REFERENZ_NUMMER": "123456789",
        "LKR_MELDUNG": group,
        "VERSIONSNUMMER": version,
        "XML_DATEN": {
            "Patient_ID": "123456789",
            "Meldung": {"Meldeanlass": reason, "Tumor_ID": tumor},
        },
    })


class TestReconcileLatest:
    def test_keeps_highest_version(self):
        from onkofhir.reconcile import reconcile_latest

        latest = reconcile_latest([_record(1, 1), _record(1, 3), _record(1, 2)])
        assert list(latest) == [1]
        assert latest[1].version_number == 3

    def test_one_record_per_group(self):
        from onkofhir.reconcile import reconcile_latest

        latest = reconcile_latest([_record(1, 1), _record(2, 1), _record(1, 2)])
        assert sorted(latest) == [1, 2]

    def test_duplicate_version_keeps_first_and_warns(self, caplog):
        from onkofhir.reconcile import reconcile_latest

        first = _record(1, 2, reason="diagnose")
        second = _record(1, 2, reason="behandlungsende")
        with caplog.at_level(logging.WARNING, logger="onkofhir.reconcile"):
            latest = reconcile_latest([first, second])
        assert latest[1] is first
        assert "more than one record with version 2" in caplog.text

    def test_accepts_raw_payload_rows(self):
        from onkofhir.reconcile import reconcile_latest

        latest = reconcile_latest([{"LKR_MELDUNG": 7, "VERSIONSNUMMER": 1}])
        assert latest[7].version_number == 1

    def test_row_without_group_raises(self):
        from onkofhir.exceptions import ReconciliationError
        from onkofhir.reconcile import reconcile_latest

        with pytest.raises(ReconciliationError):
            reconcile_latest([{"VERSIONSNUMMER": 1}])

    def test_non_record_raises(self):
        from onkofhir.exceptions import ReconciliationError
        from onkofhir.reconcile import reconcile_latest

        with pytest.raises(ReconciliationError):
            reconcile_latest([42])


class TestOrderByPriority:
    def test_last_priority_entry_first(self):
        from onkofhir.reconcile import order_by_priority

        records = [_record(1, 1, "A"), _record(2, 1, "B"), _record(3, 1, "C")]
        ordered = order_by_priority(records, ["A", "B", "C"])
        assert [r.report_reason_code for r in ordered] == ["C", "B", "A"]

    def test_unknown_code_sorts_first(self):
        from onkofhir.reconcile import order_by_priority

        records = [_record(1, 1, "A"), _record(2, 1, "B"), _record(3, 1, "C"), _record(4, 1, "Z")]
        ordered = order_by_priority(records, ["A", "B", "C"])
        assert [r.report_reason_code for r in ordered] == ["Z", "C", "B", "A"]

    def test_missing_code_sorts_with_unknown(self):
        from onkofhir.reconcile import order_by_priority

        records = [_record(1, 1, "A"), _record(2, 1, None)]
        ordered = order_by_priority(records, ["A"])
        assert [r.report_group_id for r in ordered] == [2, 1]

    def test_stable_for_equal_keys(self):
        from onkofhir.reconcile import order_by_priority

        records = [_record(1, 1, "A"), _record(2, 1, "A"), _record(3, 1, "A")]
        ordered = order_by_priority(records, ["A"])
        assert [r.report_group_id for r in ordered] == [1, 2, 3]

    def test_empty_priority_order_keeps_input_order(self):
        from onkofhir.reconcile import order_by_priority

        records = [_record(2, 1, "B"), _record(1, 1, "A")]
        assert order_by_priority(records, []) == records

    def test_caller_priority_order_not_mutated(self):
        from onkofhir.reconcile import order_by_priority

        priority = ["A", "B", "C"]
        order_by_priority([_record(1, 1, "A")], priority)
        assert priority == ["A", "B", "C"]

    def test_tuple_priority_order(self):
        from onkofhir.reconcile import order_by_priority

        records = [_record(1, 1, "A"), _record(2, 1, "B")]
        ordered = order_by_priority(records, ("A", "B"))
        assert [r.report_reason_code for r in ordered] == ["B", "A"]


class TestReconcileAndOrder:
    def test_empty_batch(self):
        from onkofhir.models import NotificationBatch
        from onkofhir.reconcile import reconcile_and_order

        assert reconcile_and_order(NotificationBatch(), ["A"]) == []
        assert reconcile_and_order([], []) == []

    def test_none_priority_order_raises(self):
        from onkofhir.exceptions import ReconciliationError
        from onkofhir.reconcile import reconcile_and_order

        with pytest.raises(ReconciliationError):
            reconcile_and_order([_record(1, 1, "A")], None)

    def test_none_batch_raises(self):
        from onkofhir.exceptions import ReconciliationError
        from onkofhir.reconcile import reconcile_and_order

        with pytest.raises(ReconciliationError):
            reconcile_and_order(None, [])

    def test_contract_violation_is_value_error(self):
        from onkofhir.reconcile import reconcile_and_order

        with pytest.raises(ValueError):
            reconcile_and_order([{"LKR_MELDUNG": "not-a-number", "VERSIONSNUMMER": 1}], [])

    def test_latest_version_then_priority(self):
        from onkofhir.models import NotificationBatch
        from onkofhir.reconcile import reconcile_and_order

        batch = NotificationBatch()
        # group 1 started as a diagnosis and was revised to a treatment end
        batch.add_element(_record(1, 1, "diagnose"))
        batch.add_element(_record(1, 2, "behandlungsende"))
        batch.add_element(_record(2, 1, "statusaenderung"))
        batch.add_element(_record(3, 4, "diagnose"))

        ordered = reconcile_and_order(
            batch, ["diagnose", "statusaenderung", "behandlungsende"]
        )
        assert [(r.report_group_id, r.version_number) for r in ordered] == [
            (1, 2),
            (2, 1),
            (3, 4),
        ]

    def test_tumor_case_id(self):
        from onkofhir.reconcile import tumor_case_id

        assert tumor_case_id(_record(1, 1, "A", tumor="2")) == "2"
        assert tumor_case_id(_record(1, 1, "A", tumor=None)) is None


_groups = st.dictionaries(
    keys=st.integers(min_value=0, max_value=30),
    values=st.sets(st.integers(min_value=0, max_value=50), min_size=1, max_size=6),
    max_size=10,
)


class TestReconcileProperties:
    @given(groups=_groups, rnd=st.randoms(use_true_random=False))
    @settings(max_examples=100, deadline=None)
    def test_one_record_per_group_with_max_version(self, groups, rnd: random.Random):
        from onkofhir.reconcile import reconcile_and_order

        records = [_record(g, v, reason="A") for g, versions in groups.items() for v in versions]
        rnd.shuffle(records)

        ordered = reconcile_and_order(records, ["A", "B"])

        assert len(ordered) == len(groups)
        assert {r.report_group_id for r in ordered} == set(groups)
        for r in ordered:
            assert r.version_number == max(groups[r.report_group_id])

    @given(
        reasons=st.lists(st.sampled_from(["A", "B", "C", "Z"]), max_size=12),
        priority=st.lists(st.sampled_from(["A", "B", "C"]), unique=True),
    )
    @settings(max_examples=100, deadline=None)
    def test_emitted_ranks_never_decrease(self, reasons, priority):
        from onkofhir.reconcile import reconcile_and_order

        records = [_record(i, 1, reason=r) for i, r in enumerate(reasons)]
        ordered = reconcile_and_order(records, priority)

        reversed_priority = priority[::-1]
        ranks = [
            reversed_priority.index(r.report_reason_code)
            if r.report_reason_code in reversed_priority
            else -1
            for r in ordered
        ]
        assert ranks == sorted(ranks)
