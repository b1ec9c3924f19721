from badminton_notifier.availability import evaluate_slot, is_weekend_day, slot_time

WEEKEND_TIMES = frozenset({"16:00", "16:30", "17:00", "18:00"})


def test_weekend_day_with_ineligible_time_is_rejected():
    verdict = evaluate_slot("Sat 12.04.", "19:00 Badminton", WEEKEND_TIMES)
    assert verdict.is_weekend_day
    assert not verdict.is_weekend_slot
    assert not verdict.accepted


def test_weekend_day_with_eligible_time_is_accepted():
    verdict = evaluate_slot("Sun 13.04.", "16:30 Badminton", WEEKEND_TIMES)
    assert verdict.accepted


def test_weekday_is_always_accepted():
    assert evaluate_slot("Wed 10.04.", "21:30 Badminton", WEEKEND_TIMES).accepted
    assert evaluate_slot("Wed 10.04.", "16:00 Badminton", frozenset()).accepted


def test_weekend_day_match_is_case_insensitive():
    assert is_weekend_day("SATURDAY 12.04.")
    assert is_weekend_day("sun 13.04.")
    assert not is_weekend_day("Fri 11.04.")


def test_slot_time_is_text_before_first_space():
    assert slot_time("17:30 Badminton") == "17:30"
    assert slot_time("17:30") == "17:30"
