"""Unit and property-based tests for the timeline module."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from chatline.events import (
    CheckpointEvent,
    ContentEvent,
    DecodeFailure,
    EndEvent,
    FailureKind,
    SearchErrorEvent,
    SearchResultsEvent,
    SearchStartEvent,
)
from chatline.timeline import (
    ActivityPhase,
    ActivityState,
    Author,
    Message,
    Stage,
    Timeline,
    begin_turn,
    fail_turn,
    reduce,
)
from chatline.timeline import activity


def run(events, timeline=None, text="hi"):
    """Begin a turn and fold ``events`` into it."""
    timeline, context = begin_turn(timeline or Timeline(), text)
    for event in events:
        timeline, context = reduce(timeline, context, event)
    return timeline, context


def assistant(timeline, context):
    return timeline.get(context.assistant_id)


class TestTimelineModel:
    """Tests for the Timeline container."""

    def test_next_id_on_empty_timeline(self):
        assert Timeline().next_id() == 1

    def test_append_rejects_non_increasing_ids(self):
        timeline = Timeline().append(Message(id=3, author=Author.USER, content="a"))
        with pytest.raises(ValueError):
            timeline.append(Message(id=3, author=Author.ASSISTANT))

    def test_replace_unknown_id_fails(self):
        with pytest.raises(KeyError):
            Timeline().replace(Message(id=1, author=Author.USER))

    def test_messages_are_frozen(self):
        msg = Message(id=1, author=Author.USER, content="hi")
        with pytest.raises(ValueError):
            msg.content = "changed"  # type: ignore

    def test_urls_alias(self):
        state = ActivityState(results=("u1",))
        assert state.urls == ("u1",)


class TestActivityStateMachine:
    """Tests for the activity transitions."""

    def test_start_from_nothing(self):
        state = activity.start_search(None, "x")
        assert state.phase is ActivityPhase.SEARCHING
        assert state.stages == (Stage.SEARCHING,)
        assert state.query == "x"

    def test_results_replace_not_merge(self):
        state = activity.start_search(None, "x")
        state = activity.receive_results(state, ["u1", "u2"])
        state = activity.receive_results(state, ["u3"])
        assert state.results == ("u3",)
        assert state.stages == (Stage.SEARCHING, Stage.READING)
        assert state.phase is ActivityPhase.READING

    def test_consecutive_start_appends_once(self):
        state = activity.start_search(None, "x")
        state = activity.start_search(state, "y")
        assert state.stages == (Stage.SEARCHING,)
        assert state.query == "y"

    def test_cycling_searches_keeps_every_stage(self):
        state = activity.start_search(None, "x")
        state = activity.receive_results(state, ["u1"])
        state = activity.start_search(state, "y")
        state = activity.receive_results(state, ["u2"])
        assert state.stages == (Stage.SEARCHING, Stage.READING, Stage.SEARCHING, Stage.READING)

    def test_error_keeps_results(self):
        state = activity.receive_results(activity.start_search(None, "x"), ["u1"])
        state = activity.report_error(state, "boom")
        assert state.phase is ActivityPhase.ERROR
        assert state.stages[-1] is Stage.ERROR
        assert state.error == "boom"
        assert state.results == ("u1",)

    def test_error_without_prior_state(self):
        state = activity.report_error(None, "boom")
        assert state.stages == (Stage.ERROR,)
        assert state.query == ""

    def test_finish_appends_writing(self):
        state = activity.finish(activity.start_search(None, "x"))
        assert state.phase is ActivityPhase.DONE
        assert state.stages == (Stage.SEARCHING, Stage.WRITING)

    def test_finish_without_state_is_noop(self):
        assert activity.finish(None) is None

    def test_finish_after_error_is_noop(self):
        state = activity.report_error(activity.start_search(None, "x"), "boom")
        assert activity.finish(state) == state

    def test_transitions_do_not_mutate_input(self):
        state = activity.start_search(None, "x")
        activity.receive_results(state, ["u1"])
        assert state.stages == (Stage.SEARCHING,)
        assert state.results == ()


class TestBeginTurn:
    """Tests for turn setup."""

    def test_ids_are_consecutive(self):
        greeting = Message(id=1, author=Author.ASSISTANT, content="Hi there")
        timeline, context = begin_turn(Timeline(messages=(greeting,)), "hello")
        assert (context.user_id, context.assistant_id) == (2, 3)
        user, placeholder = timeline.messages[1:]
        assert user.author is Author.USER and user.content == "hello"
        assert not user.loading
        assert placeholder.author is Author.ASSISTANT
        assert placeholder.loading and placeholder.content == ""
        assert placeholder.activity is None


class TestReduce:
    """Tests for the reducer."""

    def test_scenario_a_content_only(self):
        timeline, context = run([
            CheckpointEvent(checkpoint_id="abc"),
            ContentEvent(content="Hel"),
            ContentEvent(content="lo"),
            EndEvent(),
        ])
        msg = assistant(timeline, context)
        assert msg.content == "Hello"
        assert msg.activity is None
        assert not msg.loading
        assert context.terminal
        assert context.checkpoint_id == "abc"

    def test_scenario_b_search_then_answer(self):
        timeline, context = run([
            SearchStartEvent(query="x"),
            SearchResultsEvent(urls=["u1", "u2"]),
            ContentEvent(content="answer"),
            EndEvent(),
        ])
        msg = assistant(timeline, context)
        assert msg.activity.stages == (Stage.SEARCHING, Stage.READING, Stage.WRITING)
        assert msg.activity.urls == ("u1", "u2")
        assert msg.activity.query == "x"
        assert msg.content == "answer"

    def test_checkpoint_does_not_touch_message(self):
        before, context = begin_turn(Timeline(), "hi")
        after, context = reduce(before, context, CheckpointEvent(checkpoint_id="abc"))
        assert after == before
        assert assistant(after, context).loading

    def test_activity_clears_loading(self):
        timeline, context = run([SearchStartEvent(query="x")])
        assert not assistant(timeline, context).loading

    def test_search_error_then_content_continues(self):
        timeline, context = run([
            SearchStartEvent(query="x"),
            SearchErrorEvent(error="down"),
            ContentEvent(content="from memory"),
            EndEvent(),
        ])
        msg = assistant(timeline, context)
        assert msg.content == "from memory"
        assert msg.activity.stages == (Stage.SEARCHING, Stage.ERROR)
        assert msg.activity.error == "down"

    def test_end_clears_loading_on_empty_turn(self):
        timeline, context = run([EndEvent()])
        msg = assistant(timeline, context)
        assert not msg.loading
        assert msg.content == ""

    def test_decode_failure_changes_nothing(self, caplog):
        before, context = run([ContentEvent(content="Hel")])
        failure = DecodeFailure(kind=FailureKind.INVALID_FIELDS, reason="missing", raw='{"type":"content"}')
        with caplog.at_level("WARNING", logger="chatline"):
            after, after_context = reduce(before, context, failure)
        assert after is before
        assert after_context is context
        assert len(caplog.records) == 1
        assert "invalid_fields" in caplog.records[0].getMessage()

    def test_events_after_end_are_ignored(self):
        before, context = run([ContentEvent(content="done"), EndEvent()])
        after, _ = reduce(before, context, ContentEvent(content=" more"))
        assert after is before

    def test_user_message_is_never_touched(self):
        timeline, context = run([ContentEvent(content="x"), SearchStartEvent(query="q"), EndEvent()], text="question")
        assert timeline.get(context.user_id) == Message(id=context.user_id, author=Author.USER, content="question")


class TestFailTurn:
    """Tests for channel failure handling."""

    def test_failure_before_content_injects_notice(self):
        timeline, context = run([SearchStartEvent(query="x")])
        timeline, context = fail_turn(timeline, context, "Sorry")
        msg = assistant(timeline, context)
        assert msg.content == "Sorry"
        assert msg.activity.stages == (Stage.ERROR,)
        assert msg.activity.query == ""
        assert msg.activity.results == ()
        assert not msg.loading
        assert context.terminal

    def test_failure_after_content_keeps_partial_output(self):
        timeline, context = run([SearchStartEvent(query="x"), ContentEvent(content="partial")])
        timeline, context = fail_turn(timeline, context, "Sorry")
        msg = assistant(timeline, context)
        assert msg.content == "partial"
        assert msg.activity.stages == (Stage.SEARCHING,)
        assert not msg.loading


# Strategies for arbitrary interleavings within one turn
short_text = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=8)
content_events = st.builds(ContentEvent, content=short_text)
activity_events = st.one_of(
    st.builds(SearchStartEvent, query=short_text),
    st.builds(SearchResultsEvent, urls=st.lists(short_text, max_size=3)),
    st.builds(SearchErrorEvent, error=short_text),
    st.just(CheckpointEvent(checkpoint_id="cp")),
)
turn_events = st.lists(st.one_of(content_events, activity_events), max_size=20)


class TestReducerProperties:
    """Property tests for the reducer."""

    @given(turn_events)
    def test_content_is_concatenation_of_fragments(self, events):
        """Property test: final content joins every fragment in arrival order."""
        timeline, context = run(events + [EndEvent()])
        expected = "".join(e.content for e in events if isinstance(e, ContentEvent))
        assert assistant(timeline, context).content == expected

    @given(turn_events)
    def test_stages_only_grow(self, events):
        """Property test: stages never shrink or reorder during a turn."""
        timeline, context = begin_turn(Timeline(), "hi")
        previous: tuple[Stage, ...] = ()
        for event in events + [EndEvent()]:
            timeline, context = reduce(timeline, context, event)
            msg = assistant(timeline, context)
            stages = msg.activity.stages if msg.activity else ()
            assert stages[:len(previous)] == previous
            previous = stages

    @given(turn_events)
    def test_content_never_shrinks(self, events):
        """Property test: assistant content only ever grows."""
        timeline, context = begin_turn(Timeline(), "hi")
        previous = ""
        for event in events:
            timeline, context = reduce(timeline, context, event)
            content = assistant(timeline, context).content
            assert content.startswith(previous)
            previous = content

    @given(st.lists(turn_events, min_size=1, max_size=5))
    def test_ids_strictly_increase_across_turns(self, turns):
        """Property test: ids increase and each turn's pair is consecutive."""
        timeline = Timeline()
        for events in turns:
            timeline, context = run(events + [EndEvent()], timeline=timeline)
            assert context.assistant_id == context.user_id + 1
        ids = [msg.id for msg in timeline.messages]
        assert ids == sorted(set(ids))
        assert len(ids) == 2 * len(turns)
