"""Query engine for review queries over a user's words."""

from ..database.connection import get_connection
from ..models.enums import QueryType
from ..models.review_state import ReviewState
from .clock import Clock, system_clock, to_iso
from .mastery import estimate_mastery
from .review_service import ReviewService


class QueryEngine:
    """Engine for executing review queries."""

    def __init__(self, clock: Clock = system_clock, review_service: ReviewService | None = None):
        self.review_service = review_service or ReviewService(clock=clock)
        self.clock = self.review_service.clock

    def query(
        self,
        query_type: QueryType | str,
        user_id: str,
        limit: int = 10,
    ) -> dict:
        """
        Execute a review query for one user.

        Args:
            query_type: Type of query to execute
            user_id: Owner of the words
            limit: Maximum results to return

        Returns:
            Dict with query results and metadata
        """
        if isinstance(query_type, str):
            query_type = QueryType(query_type)
        limit = max(0, limit)

        match query_type:
            case QueryType.DUE_FOR_REVIEW:
                return self._query_due_for_review(user_id, limit)
            case QueryType.STRUGGLING:
                return self._query_struggling(user_id, limit)
            case QueryType.UPCOMING:
                return self._query_upcoming(user_id, limit)
            case QueryType.ALL_WORDS:
                return self._query_all_words(user_id, limit)
            case _:
                raise ValueError(f"Unknown query type: {query_type}")

    def _fetch(self, where: str, params: list) -> list[ReviewState]:
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""SELECT s.*, w.word FROM review_states s
                JOIN words w ON w.id = s.word_id
                WHERE {where}""",
                params,
            )
            return [ReviewState.from_row(dict(row)) for row in cursor.fetchall()]

    def _result(self, query_type: QueryType, states: list[ReviewState]) -> dict:
        words = []
        for state in states:
            data = state.to_dict()
            data["mastery_level"] = estimate_mastery(state)
            words.append(data)
        return {
            "query_type": query_type.value,
            "words": words,
            "count": len(words),
        }

    def _query_due_for_review(self, user_id: str, limit: int) -> dict:
        """Get due words in session order."""
        states = self.review_service.list_due(user_id, limit=limit)
        return self._result(QueryType.DUE_FOR_REVIEW, states)

    def _query_struggling(self, user_id: str, limit: int) -> dict:
        """Get words answered wrong more often than right."""
        states = self._fetch(
            """s.user_id = ? AND s.error_count > s.correct_count
            ORDER BY s.error_count DESC, s.review_count ASC LIMIT ?""",
            [user_id, limit],
        )
        return self._result(QueryType.STRUGGLING, states)

    def _query_upcoming(self, user_id: str, limit: int) -> dict:
        """Get words not yet due, soonest first."""
        now = self.clock.now()
        states = self._fetch(
            "s.user_id = ? AND s.next_review_at > ? ORDER BY s.next_review_at ASC LIMIT ?",
            [user_id, to_iso(now), limit],
        )
        return self._result(QueryType.UPCOMING, states)

    def _query_all_words(self, user_id: str, limit: int) -> dict:
        """Get all of the user's words."""
        states = self._fetch("s.user_id = ? ORDER BY w.word ASC LIMIT ?", [user_id, limit])
        return self._result(QueryType.ALL_WORDS, states)
