# querymaker/pipelines.py
from typing import Iterable, List, Optional, Sequence, Text, Tuple

from querymaker.pipeline_builder import PipelineBuilder


def build_search_pipeline(
    keyword: Text,
    fields: Sequence[Text] = ("name",),
    joins: Iterable[Tuple[Text, Text, Text, Text]] = (),
    limit: int = 1,
    exposes: Optional[List[Text]] = None,
):
    """Keyword search, then lookup + unwind for each (from, localField, foreignField, as) join."""
    builder = PipelineBuilder()

    # keyword_filter với 1 field ghi {field: {"name": regex}}, không match được chuỗi
    if len(fields) == 1:
        builder.filter({fields[0]: {"$regex": keyword, "$options": "i"}})
    else:
        builder.keyword_filter(keyword, *fields)

    for from_collection, local_field, foreign_field, alias in joins:
        builder.lookup(from_collection, local_field, foreign_field, alias).unwind(alias)

    # $limit trước $project để server project ít document hơn
    builder.limit(limit)

    if exposes:
        builder.expose(*exposes)

    return builder.get()
