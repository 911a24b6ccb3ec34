"""Rule-based repair of failing question records."""

from mcq_check.fixing.repair import repair_question

__all__ = ["repair_question"]
