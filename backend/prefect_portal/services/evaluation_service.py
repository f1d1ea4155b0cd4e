from typing import Any, Dict, Optional

from sqlalchemy import select

from prefect_portal.core.result import Result
from prefect_portal.models.evaluation import PerformanceEvaluation
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ResourceService


def rating_bucket(rating: int) -> str:
    if rating >= 5:
        return "excellent"
    if rating == 4:
        return "good"
    if rating == 3:
        return "average"
    return "poor"


class EvaluationService(ResourceService[PerformanceEvaluation]):
    model = PerformanceEvaluation
    policy = policies.EVALUATIONS
    resource_name = "Evaluation"
    owner_field = "evaluator_id"
    date_field = "created_at"
    search_fields = ("comments",)
    required_fields = {"prefect_id": "Prefect is required", "rating": "Rating must be between 1 and 5"}

    def validate(self, data: Dict[str, Any], existing: Optional[PerformanceEvaluation]) -> Optional[Result]:
        if "rating" not in data:
            return None
        rating = data["rating"]
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            return Result.invalid("Rating must be between 1 and 5", field="rating")
        return None

    def mutable_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        data = super().mutable_changes(changes)
        data.pop("prefect_id", None)
        return data

    async def create(self, payload: Dict[str, Any]) -> Result:
        # The evaluator is always the caller
        return await super().create({**payload, "evaluator_id": self.session.user_id})

    async def for_prefect(self, prefect_id: str) -> Result:
        async def op() -> Result:
            stmt = self.visible_select().where(PerformanceEvaluation.prefect_id == prefect_id)
            rows = await self.db.execute(stmt.order_by(*self.order_clauses()))
            return Result.success(list(rows.scalars().all()))

        return await self._run("list", op, prefect_id)

    async def stats(self) -> Result:
        async def op() -> Result:
            stmt = select(PerformanceEvaluation.rating)
            clause = self.policy.visibility_clause(PerformanceEvaluation, self.session)
            if clause is not None:
                stmt = stmt.where(clause)
            ratings = list((await self.db.execute(stmt)).scalars().all())
            summary = {"total": len(ratings), "average": 0.0, "excellent": 0, "good": 0, "average_count": 0, "poor": 0}
            for rating in ratings:
                bucket = rating_bucket(rating)
                summary["average_count" if bucket == "average" else bucket] += 1
            if ratings:
                summary["average"] = round(sum(ratings) / len(ratings), 1)
            return Result.success(summary)

        return await self._run("stats", op)
