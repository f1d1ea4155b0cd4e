from typing import Any, Dict

from sqlalchemy import func, select

from prefect_portal.core.result import Result
from prefect_portal.models.training import TrainingCategory, TrainingMaterial
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ResourceService


class TrainingCategoryService(ResourceService[TrainingCategory]):
    model = TrainingCategory
    policy = policies.TRAINING_CATEGORIES
    resource_name = "Training category"
    search_fields = ("name", "description")
    ordering = (("name", False),)
    required_fields = {"name": "Category name is required"}

    def conflict_message(self, error) -> str:
        return "A category with this name already exists"

    async def create(self, payload: Dict[str, Any]) -> Result:
        return await super().create({**payload, "created_by": self.session.user_id})

    async def with_material_counts(self) -> Result:
        """Categories paired with the number of materials the caller can see"""
        async def op() -> Result:
            materials = select(TrainingMaterial.category_id, func.count().label("n"))
            clause = policies.TRAINING_MATERIALS.visibility_clause(TrainingMaterial, self.session)
            if clause is not None:
                materials = materials.where(clause)
            counts = materials.group_by(TrainingMaterial.category_id).subquery()
            stmt = (
                select(TrainingCategory, func.coalesce(counts.c.n, 0))
                .outerjoin(counts, counts.c.category_id == TrainingCategory.id)
                .order_by(*self.order_clauses())
            )
            rows = (await self.db.execute(stmt)).all()
            return Result.success([(category, count) for category, count in rows])

        return await self._run("list", op)


class TrainingMaterialService(ResourceService[TrainingMaterial]):
    model = TrainingMaterial
    policy = policies.TRAINING_MATERIALS
    resource_name = "Training material"
    date_field = "created_at"
    search_fields = ("title", "content")
    required_fields = {
        "title": "Material title is required",
        "category_id": "Category is required",
    }

    async def create(self, payload: Dict[str, Any]) -> Result:
        return await super().create({**payload, "created_by": self.session.user_id})

    async def before_create(self, data: Dict[str, Any]):
        if await self.db.get(TrainingCategory, data["category_id"]) is None:
            return Result.not_found("Training category", data["category_id"])
        return None

    async def in_category(self, category_id: str) -> Result:
        async def op() -> Result:
            stmt = self.visible_select().where(TrainingMaterial.category_id == category_id)
            rows = await self.db.execute(stmt.order_by(*self.order_clauses()))
            return Result.success(list(rows.scalars().all()))

        return await self._run("list", op, category_id)

    async def publish(self, record_id: str) -> Result:
        return await self.update(record_id, {"is_published": True})

    async def unpublish(self, record_id: str) -> Result:
        return await self.update(record_id, {"is_published": False})

    async def stats(self) -> Result:
        result = await self.count_by("is_published")
        return result.map(lambda counts: {
            "total": sum(counts.values()),
            "published": counts.get("True", 0),
            "draft": counts.get("False", 0),
        })
