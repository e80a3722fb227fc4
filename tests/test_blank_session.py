import pytest

from models.session_models import PracticeSession, TranslationContext, WrongAttempt
from services.accuracy_scorer import compare_verses
from services.blank_session import (
    active_blank,
    create_session,
    format_blank_text,
    placeholder_for,
    process_submission,
    progress,
    render_blank_view,
    session_from_comparison,
    session_state,
)

SHORT_VERSE = "For God so loved the world"
GENESIS_1_1 = "In the beginning God created the heavens and the earth"
ROMANS_8_28 = (
    "And we know that in all things God works for the good of those who love him"
)


class TestCreateSession:

    def test_targets_are_deduplicated_and_in_verse_order(self):
        session = create_session(SHORT_VERSE, ["World", "world", "loved", "banana", " so "])

        assert session.target_words == ["so", "loved", "world", "banana"]
        assert session.completed_words == []
        assert session.current_round == 1
        assert session.mode == "practice"

    def test_targets_take_the_verse_spelling(self):
        verse = "The LORD is my shepherd, I lack nothing."
        direct = create_session(verse, ["shepherd.", "lord", "Nothing!", "staff,"])
        seeded = session_from_comparison(
            verse, compare_verses("The Lord is my sheep I lack", verse)
        )

        assert direct.target_words == ["LORD", "shepherd", "nothing", "staff"]
        assert seeded.target_words == ["shepherd", "nothing"]

        _, result = process_submission(direct, "earth")
        assert result.expected_word == "LORD"
        passed, _ = process_submission(direct.model_copy(update={"completed_words": ["lord"]}), "sheep")
        assert passed.wrong_attempts == [
            WrongAttempt(word="shepherd", user_attempt="sheep", expected_word="shepherd", round=1)
        ]

    def test_blank_targets_are_ignored(self):
        session = create_session(SHORT_VERSE, ["", "  ", "?", "God"])

        assert session.target_words == ["God"]

    def test_non_text_verse(self):
        session = create_session(None, ["word"])

        assert session.verse_text == ""
        assert active_blank(session).position is None

    def test_from_comparison_romans_8_28(self):
        comparison = compare_verses(
            "And we know that in all things God works for good", ROMANS_8_28
        )

        session = session_from_comparison(ROMANS_8_28, comparison, mode="strict")

        assert session.target_words == ["the", "of", "those", "who", "love", "him"]
        assert session.mode == "strict"
        assert active_blank(session).position == 10


class TestActiveBlank:

    def test_first_outstanding_target(self):
        session = create_session(GENESIS_1_1, ["earth", "beginning", "God"])

        blank = active_blank(session)

        assert blank.word == "beginning"
        assert blank.normalized == "beginning"
        assert blank.position == 2

    def test_never_skips_an_earlier_word(self):
        # A later word completed out of order must not move the blank past "beginning"
        session = PracticeSession(
            verse_text=GENESIS_1_1,
            target_words=["beginning", "God", "earth"],
            completed_words=["earth", "god"],
        )

        assert active_blank(session).word == "beginning"

    def test_walks_targets_in_order(self):
        session = create_session(GENESIS_1_1, ["earth", "beginning", "God"], max_rounds=1)
        seen = []
        while active_blank(session) is not None:
            seen.append(active_blank(session).word)
            session, _ = process_submission(session, active_blank(session).word)

        assert seen == ["beginning", "God", "earth"]

    def test_none_when_nothing_to_practice(self):
        session = create_session(SHORT_VERSE, [])

        assert active_blank(session) is None
        assert session_state(session) == "session_complete"


class TestProcessSubmission:

    def test_documented_scenario(self):
        session = create_session(SHORT_VERSE, ["loved", "world"], mode="strict")

        rejected, result = process_submission(session, "love")
        assert rejected is session
        assert result.reason == "strict-rejected"
        assert (result.is_correct, result.advanced) == (False, False)
        assert result.expected_word == "loved"
        assert active_blank(rejected).word == "loved"

        accepted, result = process_submission(rejected, "loved")
        assert result.reason == "correct"
        assert (result.is_correct, result.advanced) == (True, True)
        assert active_blank(accepted).word == "world"

        practice = accepted.model_copy(update={"mode": "practice"})
        finished_round, result = process_submission(practice, "earth")
        assert result.reason == "practice-pass"
        assert (result.is_correct, result.advanced) == (False, True)
        assert result.round_completed is True
        assert result.session_completed is False
        assert finished_round.wrong_attempts == [
            WrongAttempt(word="world", user_attempt="earth", expected_word="world", round=1)
        ]
        assert finished_round.current_round == 2
        assert finished_round.completed_words == []

    def test_case_and_punctuation_insensitive(self):
        session = create_session(SHORT_VERSE, ["loved"], mode="strict")

        _, result = process_submission(session, "  LOVED!  ")

        assert result.is_correct is True
        assert result.matched_language == "en"

    def test_original_session_is_not_mutated(self):
        session = create_session(SHORT_VERSE, ["loved", "world"])

        process_submission(session, "loved")
        process_submission(session, "wrong")

        assert session.completed_words == []
        assert session.wrong_attempts == []

    @pytest.mark.parametrize('raw_input', ["", "   ", None, 42, "!!"])
    def test_empty_or_invalid_input_in_practice_mode(self, raw_input):
        session = create_session(SHORT_VERSE, ["loved", "world"])

        updated, result = process_submission(session, raw_input)

        assert result.reason == "practice-pass"
        assert result.is_correct is False
        assert updated.completed_words == ["loved"]
        expected_attempt = raw_input if isinstance(raw_input, str) else ""
        assert updated.wrong_attempts[0].user_attempt == expected_attempt

    @pytest.mark.parametrize('raw_input', ["", None, "   "])
    def test_empty_input_in_strict_mode(self, raw_input):
        session = create_session(SHORT_VERSE, ["loved"], mode="strict")

        updated, result = process_submission(session, raw_input)

        assert updated is session
        assert result.reason == "strict-rejected"

    def test_round_trip_reaches_completion_after_max_rounds(self):
        session = create_session(SHORT_VERSE, ["loved", "world"], max_rounds=3)
        results = []
        for _ in range(3):
            for word in ["loved", "world"]:
                session, result = process_submission(session, word)
                results.append(result)

        assert all(r.is_correct for r in results)
        assert [r.round_completed for r in results] == [
            False, True, False, True, False, True,
        ]
        assert [r.session_completed for r in results] == [
            False, False, False, False, False, True,
        ]
        assert session.current_round == 3
        assert session.wrong_attempts == []
        assert session_state(session) == "session_complete"

    def test_submission_after_completion_is_a_no_op(self):
        session = create_session(SHORT_VERSE, ["loved"], max_rounds=1)
        session, _ = process_submission(session, "loved")

        after, result = process_submission(session, "loved")

        assert after is session
        assert result.reason == "session-complete"
        assert result.advanced is False
        assert result.expected_word is None

    def test_zero_targets(self):
        session = create_session(SHORT_VERSE, [])

        after, result = process_submission(session, "anything")

        assert after is session
        assert result.reason == "session-complete"

    def test_wrong_attempts_record_the_round(self):
        session = create_session(SHORT_VERSE, ["world"], max_rounds=2)

        session, _ = process_submission(session, "earth")
        session, result = process_submission(session, "globe")

        assert result.session_completed is True
        assert [a.round for a in session.wrong_attempts] == [1, 2]

    def test_translation_answer_reports_language(self, john_verse, multi_language_context):
        session = create_session(
            john_verse,
            ["God", "world"],
            mode="strict",
            translation_context=multi_language_context,
        )

        session, result = process_submission(session, "Dieu")
        assert result.is_correct is True
        assert result.matched_language == "fr"
        assert result.expected_word == "God"

        _, result = process_submission(session, "Erde")
        assert result.is_correct is False

    def test_psalm_23_1_repeated_target_completes_once(self):
        verse = "The LORD is my shepherd the LORD"
        session = create_session(verse, ["LORD", "lord"], max_rounds=1)

        assert session.target_words == ["LORD"]

        session, result = process_submission(session, "lord")

        assert result.session_completed is True

    def test_malformed_context_still_accepts_original_word(self):
        session = create_session(
            SHORT_VERSE, ["loved"], mode="strict", translation_context={"is_translated": []}
        )

        assert session.translation_context is None
        _, result = process_submission(session, "loved")
        assert result.is_correct is True

    def test_deterministic(self):
        session = create_session(
            SHORT_VERSE,
            ["loved"],
            translation_context=TranslationContext(
                is_translated=True, translated_verse="Porque Dios amó tanto"
            ),
        )

        assert process_submission(session, "amó") == process_submission(session, "amó")


class TestBlankView:

    def test_placeholder_sizes(self):
        assert placeholder_for("so") == "___"
        assert placeholder_for("God,") == "___"
        assert placeholder_for("loved") == "_____"
        assert placeholder_for("shepherd") == "________"
        assert placeholder_for("beginning") == "________"
        assert placeholder_for("righteousness") == "__________"

    def test_kinds(self):
        session = create_session(SHORT_VERSE, ["loved", "world"])

        view = render_blank_view(session)

        assert [w.kind for w in view] == [
            "regular", "regular", "regular", "active_blank", "regular", "waiting_blank",
        ]
        assert view[3].display == "_____"
        assert view[0].display == "For"

    def test_completed_word_is_revealed(self):
        session = create_session(SHORT_VERSE, ["loved", "world"])
        session, _ = process_submission(session, "loved")

        view = render_blank_view(session)

        assert view[3].kind == "completed"
        assert view[3].display == "loved"
        assert view[5].kind == "active_blank"

    def test_only_first_occurrence_is_interactive(self):
        verse = "God so loved the world that God gave"
        session = create_session(verse, ["God"], max_rounds=1)

        view = render_blank_view(session)
        assert view[0].kind == "active_blank"
        assert view[6].kind == "waiting_blank"

        session, _ = process_submission(session, "God")
        view = render_blank_view(session)
        assert view[0].kind == "completed"
        assert view[6].kind == "completed"
        assert view[6].display == "God"

    def test_letter_echo(self):
        session = create_session(SHORT_VERSE, ["loved"])

        echoed = render_blank_view(session, keystrokes="lov", letter_echo=True)
        hidden = render_blank_view(session, keystrokes="lov")
        empty = render_blank_view(session, keystrokes="", letter_echo=True)

        assert echoed[3].display == "lov"
        assert hidden[3].display == "_____"
        assert empty[3].display == "_____"
        assert render_blank_view(session) == hidden

    def test_format_blank_text_wraps(self):
        session = create_session(SHORT_VERSE, [])

        text = format_blank_text(render_blank_view(session), chars_per_line=10)

        assert text == "For God so\nloved the\nworld"

    def test_format_blank_text_default_width(self):
        session = create_session(SHORT_VERSE, ["world"])

        text = format_blank_text(render_blank_view(session))

        assert text == "For God so loved the _____"


class TestProgress:

    def test_round_and_overall(self):
        session = create_session(SHORT_VERSE, ["loved", "world"], max_rounds=3)

        session, _ = process_submission(session, "loved")
        snapshot = progress(session)
        assert (snapshot.round.completed, snapshot.round.total) == (1, 2)
        assert snapshot.round.percentage == 50
        assert (snapshot.overall.completed, snapshot.overall.total) == (1, 6)
        assert snapshot.overall.percentage == 17

        session, _ = process_submission(session, "world")
        snapshot = progress(session)
        assert snapshot.current_round == 2
        assert snapshot.round.completed == 0
        assert snapshot.overall.percentage == 33

    def test_no_targets(self):
        snapshot = progress(create_session(SHORT_VERSE, []))

        assert snapshot.round.percentage == 0
        assert snapshot.overall.total == 0
