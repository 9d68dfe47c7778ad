import asyncio
import dataclasses

import pytest
from prometheus_client import REGISTRY

from practice_coach.feedback.metrics import Metrics
from practice_coach.feedback.rules import ENGINE_RULES, PANEL_RULES, merge_tags
from practice_coach.feedback.tracker import LiveFeedbackState, LiveFeedbackTracker

CONFIDENT_TEXT = "I am confident and sure, for example we shipped it. Are you ready?"

VARIED_TEXTS = [
    "Yes.",
    "um um um um",
    "Um, like, you know, I think maybe, basically, it was, right, so so so well.",
    CONFIDENT_TEXT,
    "I think maybe it might work, perhaps, I guess, probably, not sure.",
    "First, when I led the migration I improved latency. Finally, to summarize, it worked.",
    " ".join(["word"] * 60) + ".",
    "I believe this plan will succeed for our customers.",
    "Hmm?",
]


def _tracker(rules=PANEL_RULES, scheduler=None):
    return LiveFeedbackTracker(rules, scheduler=scheduler or (lambda fn: fn()))


def test_seed_state():
    t = _tracker()
    snap = t.snapshot()
    assert snap == LiveFeedbackState(confidence=65)
    assert snap.strengths == () and snap.areas_to_improve == ()
    assert snap.metrics == Metrics()
    assert _tracker(ENGINE_RULES).confidence == 85


def test_short_answer_moves_confidence_down_within_bound():
    t = _tracker()
    t.update("Yes.")
    snap = t.snapshot()
    assert 60 <= snap.confidence < 65
    assert snap.confidence == 62
    assert snap.areas_to_improve == ("Expand answers with more detail",)
    assert snap.strengths == ()
    assert snap.metrics.word_count == 1


def test_engine_table_penalizes_short_answer_harder():
    t = _tracker(ENGINE_RULES)
    t.update("Yes.")
    assert t.confidence == 80


def test_positive_delta_is_capped_at_five():
    t = _tracker()
    t.update(CONFIDENT_TEXT)
    # +3 clear speech, +2 length, +4 confidence words, +2 question = 11, capped to 5
    assert t.confidence == 70
    assert "Asking engaging questions" in t.snapshot().strengths
    assert "Supporting points with examples" in t.snapshot().strengths


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_update_is_noop(text):
    received = []
    t = _tracker()
    t.subscribe(received.append)
    t.update(text)
    assert t.snapshot() == LiveFeedbackState(confidence=65)
    assert received == []


@pytest.mark.parametrize("rules", [PANEL_RULES, ENGINE_RULES])
def test_confidence_bounded_and_step_limited(rules):
    t = _tracker(rules)
    prev = t.confidence
    for _ in range(30):
        for text in VARIED_TEXTS:
            t.update(text)
            cur = t.confidence
            assert 0 <= cur <= 100
            assert abs(cur - prev) <= 5
            prev = cur


def test_confidence_floor_and_ceiling():
    low = _tracker()
    for _ in range(20):
        low.update("um um um um")
    assert low.confidence == 0
    low.update("um um um um")
    assert low.confidence == 0

    high = _tracker()
    for _ in range(20):
        high.update(CONFIDENT_TEXT)
    assert high.confidence == 100


@pytest.mark.parametrize("rules", [PANEL_RULES, ENGINE_RULES])
def test_tag_sets_capped_and_unique(rules):
    t = _tracker(rules)
    for text in VARIED_TEXTS * 3:
        t.update(text)
        snap = t.snapshot()
        assert len(snap.strengths) <= rules.cap
        assert len(snap.areas_to_improve) <= rules.cap
        assert len(set(snap.strengths)) == len(snap.strengths)
        assert len(set(snap.areas_to_improve)) == len(snap.areas_to_improve)


def test_merge_keeps_oldest_and_drops_newest_overflow():
    assert merge_tags(("a", "b"), ("b", "c", "d", "e", "f"), 5) == ("a", "b", "c", "d", "e")
    assert merge_tags((), ("x", "x"), 5) == ("x",)


def test_full_tag_set_ignores_new_tags():
    t = _tracker()
    t.update(CONFIDENT_TEXT)
    before = t.snapshot().strengths
    assert before == (
        "Good response length",
        "Clear speech without filler words",
        "Asking engaging questions",
        "Expressing confidence",
        "Supporting points with examples",
    )
    t.update("First, when I led the migration.")
    assert t.snapshot().strengths == before


def test_generic_improvement_injected_when_nothing_to_improve():
    t = _tracker()
    t.update("I believe this plan will succeed for our customers.")
    snap = t.snapshot()
    assert snap.areas_to_improve == ("Practice speaking with more variety", "Consider adding personal anecdotes")
    assert "Expressing confidence" in snap.strengths
    assert snap.confidence == 70

    e = _tracker(ENGINE_RULES)
    e.update("I believe this plan will succeed for our customers.")
    assert e.snapshot().areas_to_improve == ("Practice speaking with more variety",)


def test_generic_improvement_not_added_once_improvements_exist():
    t = _tracker()
    t.update("Yes.")
    earlier = t.snapshot().areas_to_improve
    assert earlier
    t.update("I believe this plan will succeed for our customers.")
    assert t.snapshot().areas_to_improve == earlier


def test_marker_tags_from_engine_table():
    t = _tracker(ENGINE_RULES)
    t.update("First, when I led the migration I improved latency. Finally, to summarize, it worked.")
    strengths = t.snapshot().strengths
    assert "Using personal experiences effectively" in strengths
    assert "Using professional action words" in strengths
    assert "Well-organized response structure" in strengths


def test_reset_restores_seed_and_notifies():
    received = []
    t = _tracker()
    t.subscribe(received.append)
    for text in VARIED_TEXTS:
        t.update(text)
    t.reset()
    assert t.snapshot() == LiveFeedbackState(confidence=PANEL_RULES.seed_confidence)
    assert received[-1] == LiveFeedbackState(confidence=65)
    assert len(received) == len(VARIED_TEXTS) + 1


def test_snapshot_is_immutable_value():
    t = _tracker()
    t.update("Yes.")
    snap = t.snapshot()
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.confidence = 99  # type: ignore[misc]
    t.update(CONFIDENT_TEXT)
    assert snap.confidence == 62
    assert t.snapshot().confidence != snap.confidence


def test_failing_subscriber_does_not_block_others():
    received = []

    def boom(state):
        raise RuntimeError("subscriber failed")

    t = LiveFeedbackTracker(PANEL_RULES, scheduler=lambda fn: fn(), name="panel-test-errors")
    t.subscribe(boom)
    t.subscribe(received.append)
    before = REGISTRY.get_sample_value(
        "practice_coach_feedback_subscriber_errors_total", {"tracker": "panel-test-errors"}
    ) or 0.0

    t.update("Yes.")

    assert len(received) == 1
    assert received[0].confidence == 62
    assert t.confidence == 62
    after = REGISTRY.get_sample_value(
        "practice_coach_feedback_subscriber_errors_total", {"tracker": "panel-test-errors"}
    )
    assert after == before + 1


def test_unsubscribe_from_inside_callback():
    t = _tracker()
    first, second = [], []

    def once(state):
        first.append(state)
        t.unsubscribe(once)

    t.subscribe(once)
    t.subscribe(second.append)
    t.update("Yes.")
    t.update("No.")
    assert len(first) == 1
    assert len(second) == 2
    assert t.subscriber_count == 1


def test_subscribe_from_inside_callback_starts_with_next_update():
    t = _tracker()
    late = []

    def adder(state):
        t.unsubscribe(adder)
        t.subscribe(late.append)

    t.subscribe(adder)
    t.update("Yes.")
    assert late == []
    t.update("No.")
    assert len(late) == 1


def test_unsubscribe_unknown_callback_is_noop():
    t = _tracker()
    t.unsubscribe(print)
    assert t.subscriber_count == 0


def test_instances_are_independent():
    a, b = _tracker(), _tracker()
    a.update("Yes.")
    assert a.confidence == 62
    assert b.confidence == 65


@pytest.mark.asyncio
async def test_notifications_are_deferred_on_event_loop():
    received = []
    t = LiveFeedbackTracker(PANEL_RULES)
    t.subscribe(received.append)
    t.update("Yes.")
    # state is already updated; delivery waits for the loop
    assert t.confidence == 62
    assert received == []
    await asyncio.sleep(0)
    assert [s.confidence for s in received] == [62]


def test_notifications_run_inline_without_event_loop():
    received = []
    t = LiveFeedbackTracker(PANEL_RULES)
    t.subscribe(received.append)
    t.update("Yes.")
    assert len(received) == 1
