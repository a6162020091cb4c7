"""Tests for schedule aggregation and weekly coverage."""
from hospital_cms.config import DAYS_OF_WEEK
from hospital_cms.scheduling import (
    coverage_report,
    doctor_ref,
    doctors_available_for_new_slots,
    doctors_without_time_slots,
    group_slots_by_doctor,
    is_legacy_slot,
    merge_schedule,
    normalize_day,
    normalize_slot,
    paginate,
)


def doctor(doc_id, name="Dr. X"):
    return {"$id": doc_id, "name": name, "specialty": "Cardiology", "image": None, "hourlyRate": 90}


def slot(slot_id, doc_id, day, times=("09:00 AM",)):
    return {"$id": slot_id, "docId": doc_id, "day": day, "time": list(times), "$createdAt": "2024-01-01T00:00:00.000+00:00"}


class TestNormalization:

    def test_normalize_day_is_case_and_space_insensitive(self):
        assert normalize_day(" monday ") == "Monday"
        assert normalize_day("SUNDAY") == "Sunday"
        assert normalize_day("Funday") is None
        assert normalize_day(None) is None

    def test_doctor_ref_accepts_both_keys_and_expanded_documents(self):
        assert doctor_ref({"docId": "d1"}) == "d1"
        assert doctor_ref({"doctorId": "d2"}) == "d2"
        assert doctor_ref({"docId": {"$id": "d3", "name": "Dr. Y"}}) == "d3"
        assert doctor_ref({"time": ["09:00 AM"]}) is None

    def test_multi_day_record_yields_one_entry_per_day(self):
        entries = normalize_slot({
            "$id": "s1",
            "doctorId": "d1",
            "availableDays": ["Monday", "wednesday"],
            "availableTimes": ["09:00 AM", "10:00 AM"],
        })

        assert [e["day"] for e in entries] == ["Monday", "Wednesday"]
        assert all(e["time"] == ["09:00 AM", "10:00 AM"] for e in entries)
        assert all(e["doctorId"] == "d1" for e in entries)

    def test_dated_record_maps_date_to_weekday(self):
        entries = normalize_slot({
            "$id": "s1",
            "doctorId": "d1",
            "date": "2024-01-01",
            "time": "09:00 AM",
            "status": "available",
        })

        assert len(entries) == 1
        assert entries[0]["day"] == "Monday"
        assert entries[0]["time"] == ["09:00 AM"]
        assert entries[0]["status"] == "available"

    def test_unknown_day_is_kept_verbatim(self):
        entries = normalize_slot(slot("s1", "d1", "Someday"))
        assert entries[0]["day"] == "Someday"

    def test_cleared_multi_day_fields_fall_back_to_day(self):
        record = slot("s1", "d1", "Friday")
        record.update(doctorId=None, availableDays=None, availableTimes=None)

        entries = normalize_slot(record)

        assert [e["day"] for e in entries] == ["Friday"]
        assert entries[0]["doctorId"] == "d1"

    def test_is_legacy_slot(self):
        assert not is_legacy_slot(slot("s1", "d1", "Monday"))
        assert not is_legacy_slot({"docId": {"$id": "d1"}, "day": "Monday", "time": []})
        assert is_legacy_slot({"doctorId": "d1", "day": "Monday", "time": []})
        assert is_legacy_slot({"docId": "d1", "availableDays": ["Monday"], "availableTimes": []})
        assert is_legacy_slot({"docId": "d1", "date": "2024-01-01", "time": "09:00 AM"})


class TestGrouping:

    def test_each_record_lands_in_exactly_one_group(self):
        slots = [
            slot("s1", "d1", "Monday"),
            slot("s2", "d2", "Monday"),
            slot("s3", "d1", "Tuesday"),
        ]

        grouped = group_slots_by_doctor(slots)

        assert list(grouped) == ["d1", "d2"]
        assert [e["$id"] for e in grouped["d1"]] == ["s1", "s3"]
        assert [e["$id"] for e in grouped["d2"]] == ["s2"]

    def test_records_without_doctor_are_skipped(self):
        grouped = group_slots_by_doctor([{"$id": "s1", "day": "Monday", "time": []}])
        assert grouped == {}

    def test_merge_drops_unknown_doctors(self):
        slots = [slot("s1", "d1", "Monday"), slot("s2", "ghost", "Monday")]

        merged = merge_schedule(slots, [doctor("d1", "Dr. One")])

        assert len(merged) == 1
        assert merged[0]["doctorId"] == "d1"
        assert merged[0]["doctor"]["name"] == "Dr. One"
        assert merged[0]["timeSlots"][0]["day"] == "Monday"
        assert "doctorId" not in merged[0]["timeSlots"][0]

    def test_merge_summary_hides_other_doctor_fields(self):
        merged = merge_schedule([slot("s1", "d1", "Monday")], [doctor("d1")])
        assert set(merged[0]["doctor"]) == {"$id", "name", "specialty", "image"}

    def test_paginate_reports_full_total(self):
        page = paginate(list(range(25)), limit=10, offset=20)
        assert page == {"documents": [20, 21, 22, 23, 24], "total": 25}


class TestCoverage:

    def test_doctor_without_slots_is_available(self):
        available = doctors_available_for_new_slots([doctor("d1")], [])
        assert [d["$id"] for d in available] == ["d1"]

    def test_fully_covered_doctor_is_not_available(self):
        slots = [slot(f"s{i}", "d1", day) for i, day in enumerate(DAYS_OF_WEEK)]

        available = doctors_available_for_new_slots([doctor("d1"), doctor("d2")], slots)

        assert [d["$id"] for d in available] == ["d2"]

    def test_coverage_counts_distinct_days(self):
        # Same weekday twice plus six others still reaches 7 distinct days
        slots = [slot(f"s{i}", "d1", day) for i, day in enumerate(DAYS_OF_WEEK)]
        slots.append(slot("dup", "d1", "Monday"))

        assert doctors_available_for_new_slots([doctor("d1")], slots) == []

    def test_six_days_with_a_repeat_is_still_available(self):
        slots = [slot(f"s{i}", "d1", day) for i, day in enumerate(DAYS_OF_WEEK[:6])]
        slots.append(slot("dup", "d1", "Monday"))

        available = doctors_available_for_new_slots([doctor("d1")], slots)

        assert [d["$id"] for d in available] == ["d1"]

    def test_unknown_days_never_count(self):
        slots = [slot(f"s{i}", "d1", day) for i, day in enumerate(DAYS_OF_WEEK[:6])]
        slots.append(slot("bad", "d1", "Someday"))

        assert len(doctors_available_for_new_slots([doctor("d1")], slots)) == 1

    def test_multi_day_record_covers_whole_week(self):
        slots = [{"$id": "s1", "doctorId": "d1", "availableDays": list(DAYS_OF_WEEK), "availableTimes": []}]
        assert doctors_available_for_new_slots([doctor("d1")], slots) == []

    def test_doctors_without_time_slots(self):
        slots = [slot("s1", "d1", "Monday")]

        unscheduled = doctors_without_time_slots([doctor("d1"), doctor("d2")], slots)

        assert [d["$id"] for d in unscheduled] == ["d2"]

    def test_coverage_report_statuses(self):
        slots = [slot(f"s{i}", "full", day) for i, day in enumerate(DAYS_OF_WEEK)]
        slots.append(slot("p1", "partial", "Friday"))

        report = {
            entry["doctorId"]: entry
            for entry in coverage_report([doctor("full"), doctor("partial"), doctor("none")], slots)
        }

        assert report["full"]["status"] == "full"
        assert report["full"]["missingDays"] == []
        assert report["partial"]["status"] == "partial"
        assert report["partial"]["coveredDays"] == ["Friday"]
        assert report["none"]["status"] == "none"
        assert report["none"]["missingDays"] == DAYS_OF_WEEK
