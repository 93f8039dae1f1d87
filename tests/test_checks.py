"""Unit tests for topic input and timing checks.

WHY: These checks are the last line of defence before a render. A
missing finding means a broken video ships; a spurious error blocks a
good one.

HOW: Start from the nephrotic fixture (whose only findings are a short
script and an early BALLOON highlight), then perturb one thing per test.
Timing tests build Resolutions by hand so each rule is exercised in
isolation.
"""

import pytest

from narration_cues.config import EARLY_HIGHLIGHT_S, SCRIPT_MAX_WORDS, SCRIPT_MIN_WORDS
from narration_cues.core.checks import (
    ERROR,
    WARNING,
    Issue,
    check_timing,
    check_topic_input,
    has_errors,
    question_start,
)
from narration_cues.core.ir import Resolution, ResolvedCue
from narration_cues.core.resolver import resolve_cues
from narration_cues.core.topic import build_cue_groups, parse_topic


@pytest.fixture
def topic(nephrotic_topic_data):
    return parse_topic(nephrotic_topic_data)


def _resolution(**timestamps):
    """Resolution with a single group; keyword names use '_' for '.'."""
    cues = [ResolvedCue(id=k.replace("_", "."), timestamp=v) for k, v in timestamps.items()]
    return Resolution(groups={"all": cues})


def _padded_script(words):
    return " ".join(["word"] * words)


class TestHasErrors:

    def test_empty(self):
        assert not has_errors([])

    def test_warnings_only(self):
        assert not has_errors([Issue(WARNING, "hmm")])

    def test_with_error(self):
        assert has_errors([Issue(WARNING, "hmm"), Issue(ERROR, "bad")])


class TestTopicInput:

    def test_fixture_only_warns_about_length(self, topic):
        issues = check_topic_input(topic)
        assert [i.severity for i in issues] == [WARNING]
        assert "Script length" in issues[0].message

    def test_script_length_in_range(self, nephrotic_topic_data):
        nephrotic_topic_data["script"] += " " + _padded_script(SCRIPT_MIN_WORDS)
        assert check_topic_input(parse_topic(nephrotic_topic_data)) == []

    def test_script_too_long(self, nephrotic_topic_data):
        nephrotic_topic_data["script"] += " " + _padded_script(SCRIPT_MAX_WORDS)
        issues = check_topic_input(parse_topic(nephrotic_topic_data))
        assert [i.severity for i in issues] == [WARNING]

    def test_missing_vignette_trigger(self, nephrotic_topic_data):
        nephrotic_topic_data["vignetteHighlights"][1]["triggerWord"] = "CARBONATED"
        issues = check_topic_input(parse_topic(nephrotic_topic_data))
        assert has_errors(issues)
        assert any("Vignette highlight #2" in i.message and "CARBONATED" in i.message for i in issues)

    def test_missing_phase_item_trigger(self, nephrotic_topic_data):
        nephrotic_topic_data["teachingPhases"][0]["formula"][1]["triggerWord"] = "lipiduria"
        issues = check_topic_input(parse_topic(nephrotic_topic_data))
        assert any("Teaching phase #1 item #2" in i.message for i in issues if i.severity == ERROR)

    def test_missing_phase_start(self, nephrotic_topic_data):
        nephrotic_topic_data["teachingPhases"][1]["startTrigger"] = "toddlers"
        issues = check_topic_input(parse_topic(nephrotic_topic_data))
        assert any("Teaching phase #2 start trigger" in i.message for i in issues)

    def test_missing_answer_reveal(self, nephrotic_topic_data):
        nephrotic_topic_data["criticalMoments"]["answerReveal"] = "FSGS"
        issues = check_topic_input(parse_topic(nephrotic_topic_data))
        assert any(i.message.startswith("Answer reveal") for i in issues if i.severity == ERROR)

    def test_missing_answer_reveal_trigger(self, nephrotic_topic_data):
        nephrotic_topic_data["criticalMoments"]["answerRevealTrigger"] = "HORNSWOGGLD"
        issues = check_topic_input(parse_topic(nephrotic_topic_data))
        errors = [i.message for i in issues if i.severity == ERROR]
        assert len(errors) == 1
        assert errors[0].startswith("Answer reveal trigger")

    def test_missing_option_marker(self, nephrotic_topic_data):
        nephrotic_topic_data["options"] = {"A": "A?", "B": "B?", "F": "F?"}
        issues = check_topic_input(parse_topic(nephrotic_topic_data))
        errors = [i.message for i in issues if i.severity == ERROR]
        assert errors == ["Option F marker 'F?' not found in script"]

    def test_missing_question_trigger(self, nephrotic_topic_data):
        nephrotic_topic_data["criticalMoments"]["questionTrigger"] = "ponder"
        issues = check_topic_input(parse_topic(nephrotic_topic_data))
        assert any(i.message.startswith("Question trigger") for i in issues)

    def test_missing_meme_trigger(self, nephrotic_topic_data):
        nephrotic_topic_data["memes"]["contextual"]["triggerWord"] = "fizzy"
        issues = check_topic_input(parse_topic(nephrotic_topic_data))
        assert any(i.message.startswith("Meme trigger") for i in issues)

    def test_case_insensitive(self, nephrotic_topic_data):
        nephrotic_topic_data["vignetteHighlights"][0]["triggerWord"] = "balloon"
        issues = check_topic_input(parse_topic(nephrotic_topic_data))
        assert not has_errors(issues)


class TestQuestionStart:

    def test_first_option(self, topic):
        assert question_start(topic, _resolution(option_A=4.5, option_B=5.0)) == 4.5

    def test_unresolved_first_option(self, topic):
        assert question_start(topic, _resolution(option_A=None, option_B=5.0)) is None

    def test_custom_first_letter(self, nephrotic_topic_data):
        nephrotic_topic_data["options"] = {"B": "B?", "A": "A?"}
        topic = parse_topic(nephrotic_topic_data)
        assert question_start(topic, _resolution(option_A=9.0, option_B=5.0)) == 5.0


class TestTiming:

    def test_fixture_resolution(self, topic, nephrotic_words):
        resolution = resolve_cues(nephrotic_words, build_cue_groups(topic))
        issues = check_timing(topic, resolution)
        assert [i.severity for i in issues] == [WARNING]
        assert "'Face puffed up'" in issues[0].message

    def test_clean_timing(self, topic):
        resolution = _resolution(
            vignette_0=3.5, vignette_1=6.0, vignette_2=9.0, vignette_3=12.0,
            option_A=15.0, answerReveal=27.0,
        )
        assert check_timing(topic, resolution) == []

    def test_early_highlight(self, topic):
        resolution = _resolution(vignette_0=EARLY_HIGHLIGHT_S - 0.5, option_A=15.0, answerReveal=27.0)
        issues = check_timing(topic, resolution)
        assert [i.severity for i in issues] == [WARNING]
        assert "first 3 seconds" in issues[0].message

    def test_highlight_exactly_at_limit_is_fine(self, topic):
        resolution = _resolution(vignette_0=EARLY_HIGHLIGHT_S, option_A=15.0, answerReveal=27.0)
        assert check_timing(topic, resolution) == []

    def test_timer_before_latest_highlight(self, topic):
        resolution = _resolution(vignette_0=4.0, vignette_3=16.0, option_A=15.0, answerReveal=27.0)
        issues = check_timing(topic, resolution)
        assert has_errors(issues)
        assert "Timer starts at 15.00s" in issues[0].message
        assert "16.00s" in issues[0].message

    def test_timer_equal_to_latest_highlight_is_error(self, topic):
        resolution = _resolution(vignette_0=15.0, option_A=15.0, answerReveal=27.0)
        assert has_errors(check_timing(topic, resolution))

    @pytest.mark.parametrize("reveal, word", [(20.0, "short"), (41.0, "long")])
    def test_timer_duration(self, topic, reveal, word):
        resolution = _resolution(option_A=15.0, answerReveal=reveal)
        issues = check_timing(topic, resolution)
        assert [i.severity for i in issues] == [WARNING]
        assert "is {}".format(word) in issues[0].message

    @pytest.mark.parametrize("reveal", [23.0, 40.0])
    def test_timer_duration_bounds_inclusive(self, topic, reveal):
        assert check_timing(topic, _resolution(option_A=15.0, answerReveal=reveal)) == []

    def test_unresolved_cues_skipped(self, topic):
        resolution = _resolution(vignette_0=None, option_A=None, answerReveal=None)
        assert check_timing(topic, resolution) == []
