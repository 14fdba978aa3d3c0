from bson import json_util
from bson.json_util import RELAXED_JSON_OPTIONS


def pipeline_to_json(pipeline, indent=None):
    """Extended JSON (relaxed) text of a pipeline.

    ObjectId, datetime and Decimal128 values inside pass-through filters come
    out as ``{"$oid": ...}``, ``{"$date": ...}`` and so on, so the text can be
    pasted into mongosh or loaded back with ``json_util.loads``.
    """
    return json_util.dumps(
        pipeline,
        json_options=RELAXED_JSON_OPTIONS,
        ensure_ascii=False,
        indent=indent,
    )
