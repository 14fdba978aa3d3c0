import copy
import logging
from typing import Any, Dict, List, Optional, Text

from querymaker import settings
from querymaker.lookup_options import LookupOptions
from querymaker.serialize import pipeline_to_json

# Thiết lập logger
logger = logging.getLogger(__name__)


def _keyword_regex(keyword: Text) -> Dict[Text, Any]:
    return {"$regex": keyword, "$options": "i"}


def _inclusion_projection(fields) -> Dict[Text, int]:
    return {field: 1 for field in fields}


class PipelineBuilder:
    """Fluent builder for MongoDB aggregation pipelines.

    Each method appends a stage (or merges into the single ``$match`` stage)
    and returns the builder, so calls can be chained:

        pipeline = (
            PipelineBuilder()
            .filter({"isActive": True})
            .lookup("brands", "brand", "_id", "brand_info")
            .unwind("brand_info")
            .sort({"createdAt": -1})
            .limit(10)
            .get()
        )

    The builder never validates what it is given. Bad filters or field names
    only show up as errors when the driver runs the pipeline.
    """

    def __init__(self, soft_delete_field: Optional[Text] = None, let_suffix: Optional[Text] = None):
        if soft_delete_field is None:
            soft_delete_field = settings.SOFT_DELETE_FIELD
        if let_suffix is None:
            let_suffix = settings.LET_SUFFIX
        self.soft_delete_field = soft_delete_field
        self.let_suffix = let_suffix
        self._pipeline: List[Dict[Text, Any]] = []

    def _append(self, stage: Dict[Text, Any]) -> "PipelineBuilder":
        self._pipeline.append(stage)
        logger.debug("Appended stage %s at position %d", next(iter(stage)), len(self._pipeline) - 1)
        return self

    def _find_match_stage(self) -> Optional[Dict[Text, Any]]:
        for stage in self._pipeline:
            if "$match" in stage:
                return stage
        return None

    def _merge_match(self, condition: Dict[Text, Any]) -> "PipelineBuilder":
        """Write each key of ``condition`` into the existing $match, or start a new one."""
        stage = self._find_match_stage()
        if stage is None:
            return self._append({"$match": condition})

        current = stage["$match"]
        if isinstance(current, dict):
            stage["$match"] = {**current, **condition}
        else:
            # Opaque condition from filter(): keep it and AND the new one on
            stage["$match"] = {"$and": [current, condition]}
        logger.debug("Merged %s into existing $match", list(condition))
        return self

    def let_variable(self, local_field: Text) -> Text:
        """Name of the ``let`` variable bound to ``local_field``.

        Underscores are stripped, so ``user_id`` and ``userid`` map to the
        same variable.
        """
        return local_field.replace("_", "") + self.let_suffix

    def filter(self, condition: Any) -> "PipelineBuilder":
        """Set the $match condition. A second call replaces the first one."""
        stage = self._find_match_stage()
        if stage is None:
            return self._append({"$match": condition})

        stage["$match"] = condition
        logger.debug("Replaced existing $match condition")
        return self

    def keyword_filter(self, keyword: Text, *fields: Text) -> "PipelineBuilder":
        """Case-insensitive regex search on one or more fields."""
        if not fields:
            return self

        if len(fields) == 1:
            # NOTE: the inner key is always "name"; callers rely on this shape
            return self._merge_match({fields[0]: {"name": _keyword_regex(keyword)}})

        or_clause = [{field: _keyword_regex(keyword)} for field in fields]

        stage = self._find_match_stage()
        if stage is not None and isinstance(stage["$match"], dict) and "$or" in stage["$match"]:
            stage["$match"] = {"$and": [stage["$match"], {"$or": or_clause}]}
            logger.debug("Combined keyword $or with existing $match through $and")
            return self

        return self._merge_match({"$or": or_clause})

    def _soft_delete_condition(self, from_trash: bool) -> Dict[Text, Any]:
        field_ref = f"${self.soft_delete_field}"
        if from_trash:
            return {
                "$and": [
                    {"$ne": [field_ref, None]},
                    {"$ne": [{"$type": field_ref}, "missing"]},
                ]
            }
        return {
            "$or": [
                {"$eq": [{"$type": field_ref}, "missing"]},
                {"$eq": [{"$type": field_ref}, "null"]},
            ]
        }

    def lookup(
        self,
        from_collection: Text,
        local_field: Text,
        foreign_field: Text,
        alias: Text,
        options: Optional[LookupOptions] = None,
    ) -> "PipelineBuilder":
        """Append a $lookup stage.

        Without ``exposes`` or ``pipeline`` in ``options`` this is a plain
        equality join. Otherwise the join becomes a ``let``/``pipeline``
        lookup that also drops soft-deleted documents (or keeps only them
        when ``from_trash`` is set) and projects ``exposes``.
        """
        if options is None:
            options = LookupOptions()

        if not options.is_correlated():
            return self._append({
                "$lookup": {
                    "from": from_collection,
                    "localField": local_field,
                    "foreignField": foreign_field,
                    "as": alias,
                }
            })

        variable = self.let_variable(local_field)

        # 1. Điều kiện join
        join_operator = "$in" if options.is_array else "$eq"
        conditions = [{join_operator: [f"${foreign_field}", f"$${variable}"]}]

        # 2. Điều kiện của caller
        if options.filter:
            conditions.append(options.filter)

        # 3. Soft delete
        conditions.append(self._soft_delete_condition(options.from_trash))

        sub_pipeline = [{"$match": {"$expr": {"$and": conditions}}}]
        sub_pipeline.extend(options.pipeline)

        if options.exposes:
            sub_pipeline.append({"$project": _inclusion_projection(options.exposes)})

        return self._append({
            "$lookup": {
                "from": from_collection,
                "let": {variable: f"${local_field}"},
                "pipeline": sub_pipeline,
                "as": alias,
            }
        })

    def unwind(self, field: Text) -> "PipelineBuilder":
        return self._append({
            "$unwind": {
                "path": f"${field}",
                "preserveNullAndEmptyArrays": True,
            }
        })

    def sort(self, spec: Any) -> "PipelineBuilder":
        return self._append({"$sort": spec})

    def skip(self, n: int) -> "PipelineBuilder":
        if n > 0:
            self._append({"$skip": n})
        return self

    def limit(self, n: int) -> "PipelineBuilder":
        if n > 0:
            self._append({"$limit": n})
        return self

    def expose(self, *fields: Text) -> None:
        """Append the final $project stage. Ends the chain."""
        self._append({"$project": _inclusion_projection(fields)})

    def get(self) -> List[Dict[Text, Any]]:
        """Deep copy of the stages; editing it never reaches the builder."""
        return copy.deepcopy(self._pipeline)

    def to_json(self, indent: Optional[int] = None) -> Text:
        return pipeline_to_json(self._pipeline, indent=indent)

    def __len__(self):
        return len(self._pipeline)

    def __repr__(self):
        operators = ", ".join(next(iter(stage)) for stage in self._pipeline)
        return f"PipelineBuilder([{operators}])"
