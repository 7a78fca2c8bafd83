"""
Word Review MCP Server

An MCP server that schedules vocabulary reviews for each user's words.
Features stage-based spaced repetition, a manual milestone grid, mastery
levels, prioritized review queues and daily review reminders.
"""

import logging
import sys
from fastmcp import FastMCP

from .config import SchedulerConfig
from .database.connection import open_database
from .errors import NotFoundError
from .models.enums import Outcome, QueryType, Track
from .models.word import WordCreate
from .services.clock import Clock, system_clock
from .services.interval_policy import outcome_from_quality
from .services.query_engine import QueryEngine
from .services.reminders import ReminderService
from .services.review_service import ReviewService

logger = logging.getLogger(__name__)

# Initialize the MCP server
mcp = FastMCP(
    "Word Review",
    instructions="Vocabulary review scheduler. Add words for a user, submit review "
    "outcomes (forgot/hard/good/easy) or check milestone slots, and fetch the "
    "prioritized list of words that are due for review.",
)

# Initialize services
review_service = ReviewService()
reminder_service = ReminderService()
query_engine = QueryEngine()


def configure(config: SchedulerConfig, clock: Clock = system_clock) -> None:
    """Open the configured database and rebuild the services around it."""
    global review_service, reminder_service, query_engine
    open_database(config.db_path)
    review_service = ReviewService(clock=clock, config=config)
    reminder_service = ReminderService(clock=clock, config=config)
    query_engine = QueryEngine(review_service=review_service)


def _failure(error: Exception, action: str) -> dict:
    if isinstance(error, NotFoundError):
        return {"success": False, "error": str(error), "error_type": "not_found"}
    if isinstance(error, ValueError):
        return {"success": False, "error": str(error), "error_type": "invalid"}
    logger.exception("Failed to %s", action)
    return {"success": False, "error": f"Failed to {action}: {str(error)}"}


def _resolve(user_id: str, word_id: str) -> str:
    resolved = review_service.resolve_word_id(user_id, word_id)
    if not resolved:
        raise NotFoundError(user_id, word_id)
    return resolved


@mcp.tool()
def add_word(
    user_id: str,
    word: str,
    definition: str | None = None,
) -> dict:
    """
    Add a word to a user's collection and schedule its first review.

    Args:
        user_id: The learner who owns the word
        word: The vocabulary item (stored lower-cased)
        definition: Optional short definition

    Returns:
        The new review state. The first review is due one hour from now
        (configurable), not immediately.

    Example:
        add_word(user_id="u1", word="ephemeral", definition="lasting a very short time")
    """
    try:
        state = review_service.add_word(
            WordCreate(user_id=user_id, word=word, definition=definition)
        )
        return {
            "success": True,
            "state": state.to_dict(),
            "message": f"Added '{state.word}' with ID '{state.word_id}'",
        }
    except Exception as e:
        return _failure(e, "add word")


@mcp.tool()
def delete_word(user_id: str, word_id: str) -> dict:
    """
    Delete a word together with its review state and reminders.

    Args:
        user_id: The learner who owns the word
        word_id: Word ID or the word itself
    """
    try:
        resolved_id = _resolve(user_id, word_id)
        review_service.delete_word(user_id, resolved_id)
        return {"success": True, "word_id": resolved_id}
    except Exception as e:
        return _failure(e, "delete word")


@mcp.tool()
def submit_review(
    user_id: str,
    word_id: str,
    outcome: str | None = None,
    quality: int | None = None,
) -> dict:
    """
    Record how well a word was recalled and reschedule it.

    Args:
        user_id: The learner who owns the word
        word_id: Word ID or the word itself
        outcome: One of:
            - "forgot": Back to the first stage
            - "hard": Stay on the current stage
            - "good": Advance one stage
            - "easy": Advance two stages
        quality: SM-2 quality (0-5), used when outcome is not given.
            0-1 forgot, 2 hard, 3 good, 4-5 easy.

    Returns:
        Next review time, stage and interval, plus the full state.
        Submitting twice applies the outcome twice.

    Example:
        submit_review(user_id="u1", word_id="ephemeral", outcome="good")
    """
    try:
        if outcome is None and quality is None:
            return {
                "success": False,
                "error": "Either outcome or quality is required",
                "error_type": "invalid",
            }

        if outcome is not None:
            try:
                parsed = Outcome(outcome)
            except ValueError:
                valid = [o.value for o in Outcome]
                return {
                    "success": False,
                    "error": f"Invalid outcome '{outcome}'. Must be one of: {valid}",
                    "error_type": "invalid",
                }
        else:
            parsed = outcome_from_quality(quality)

        resolved_id = _resolve(user_id, word_id)
        state = review_service.advance_on_outcome(user_id, resolved_id, parsed)
        return {
            "success": True,
            "outcome": parsed.value,
            "next_review_at": state.next_review_at.isoformat(),
            "stage": state.stage,
            "interval_days": state.interval_days,
            "mastery_level": state.mastery_level,
            "state": state.to_dict(),
        }
    except Exception as e:
        return _failure(e, "submit review")


@mcp.tool()
def toggle_milestone(
    user_id: str,
    word_id: str,
    track: str,
    index: int,
) -> dict:
    """
    Check or uncheck one slot of the milestone review grid.

    Args:
        user_id: The learner who owns the word
        word_id: Word ID or the word itself
        track: "short" (1h, 4h, 12h) or "long" (1d, 2d, 4d, 7d, 15d, 31d)
        index: Slot position within the track, starting at 0

    Returns:
        Both slot tracks, the next review time and the mastery level.
        Unchecking a slot never moves the next review time.

    Example:
        toggle_milestone(user_id="u1", word_id="ephemeral", track="short", index=0)
    """
    try:
        try:
            parsed = Track(track)
        except ValueError:
            valid = [t.value for t in Track]
            return {
                "success": False,
                "error": f"Invalid track '{track}'. Must be one of: {valid}",
                "error_type": "invalid",
            }

        resolved_id = _resolve(user_id, word_id)
        state = review_service.toggle_milestone(user_id, resolved_id, parsed, index)
        return {
            "success": True,
            "short_slots": list(state.short_slots),
            "long_slots": list(state.long_slots),
            "next_review_at": state.next_review_at.isoformat(),
            "mastery_level": state.mastery_level,
        }
    except Exception as e:
        return _failure(e, "toggle milestone")


@mcp.tool()
def list_due(user_id: str, limit: int = 20) -> dict:
    """
    Get the words that are due for review, highest priority first.

    Priority: overdue first, then most errors, fewest reviews, lowest mastery.

    Args:
        user_id: The learner
        limit: Maximum number of words. Default 20.
    """
    try:
        states = review_service.list_due(user_id, limit=limit)
        return {
            "success": True,
            "words": [s.to_dict() for s in states],
            "count": len(states),
        }
    except Exception as e:
        return _failure(e, "list due words")


@mcp.tool()
def get_review_state(user_id: str, word_id: str) -> dict:
    """
    Get a word, its scheduling state and its mastery level.

    Args:
        user_id: The learner who owns the word
        word_id: Word ID or the word itself
    """
    try:
        resolved_id = _resolve(user_id, word_id)
        state = review_service.get_state(user_id, resolved_id)
        return {
            "success": True,
            "word": review_service.get_word(user_id, resolved_id).to_dict(),
            "state": state.to_dict(),
            "mastery_level": review_service.estimate_mastery(state),
        }
    except Exception as e:
        return _failure(e, "get review state")


@mcp.tool()
def query_words(user_id: str, query_type: str, limit: int = 10) -> dict:
    """
    Query a user's words.

    Args:
        user_id: The learner
        query_type: One of:
            - "due_for_review": Due words in session order
            - "struggling": Words answered wrong more often than right
            - "upcoming": Words not yet due, soonest first
            - "all_words": Every word, alphabetically
        limit: Maximum number of results. Default 10.
    """
    try:
        try:
            q_type = QueryType(query_type)
        except ValueError:
            valid = [t.value for t in QueryType]
            return {
                "success": False,
                "error": f"Invalid query_type '{query_type}'. Must be one of: {valid}",
                "error_type": "invalid",
            }

        result = query_engine.query(query_type=q_type, user_id=user_id, limit=limit)
        return {"success": True, **result}
    except Exception as e:
        return _failure(e, "query words")


@mcp.tool()
def send_reminders(user_id: str, word_id: str | None = None) -> dict:
    """
    Send review reminders for due words, at most one per word per day.

    Args:
        user_id: The learner
        word_id: Remind about this word only. Otherwise the ten earliest
            due words are checked.
    """
    try:
        resolved_id = _resolve(user_id, word_id) if word_id else None
        result = reminder_service.send_due_reminders(user_id, word_id=resolved_id)
        return {"success": True, **result}
    except Exception as e:
        return _failure(e, "send reminders")


@mcp.tool()
def reset_progress(user_id: str, word_id: str) -> dict:
    """
    Reset a word's review progress, counters included.

    Args:
        user_id: The learner who owns the word
        word_id: Word ID or the word itself
    """
    try:
        state = review_service.reset_progress(user_id, _resolve(user_id, word_id))
        return {"success": True, "state": state.to_dict()}
    except Exception as e:
        return _failure(e, "reset progress")


@mcp.tool()
def get_statistics(user_id: str) -> dict:
    """
    Get summary statistics for a learner.

    Returns:
        Statistics including:
        - total_words: Words in the collection
        - due_now / due_today: Words due now and before the day ends
        - reviewed_today: Words reviewed since the start of the day
        - mastery_distribution: Word counts per mastery level 0-5
        - average_mastery, mastered_words, correct_rate
        - streak_days / longest_streak: Consecutive days with reviews
        - unread_reminders: Reminders not yet read
    """
    try:
        stats = review_service.get_statistics(user_id)
        return {"success": True, **stats}
    except Exception as e:
        return _failure(e, "get statistics")


def main():
    """Run the MCP server."""
    config = SchedulerConfig.from_env()

    # stdout carries the stdio transport
    logging.basicConfig(
        level=config.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    configure(config)

    if config.port:
        # HTTP mode
        import uvicorn
        from starlette.middleware.cors import CORSMiddleware

        # Create the HTTP app with CORS for browser clients
        app = mcp.http_app()
        app = CORSMiddleware(
            app=app,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["mcp-session-id", "mcp-protocol-version"],
            max_age=86400,
        )

        logger.info("Serving HTTP on port %d", config.port)
        uvicorn.run(app, host="0.0.0.0", port=config.port)
    else:
        # Standard stdio mode for local usage
        mcp.run()


if __name__ == "__main__":
    main()
