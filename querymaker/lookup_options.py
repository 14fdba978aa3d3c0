from typing import Any, Dict, List, Optional


class LookupOptions:
    """Tuỳ chọn cho PipelineBuilder.lookup (correlated join)."""

    def __init__(
        self,
        filter: Optional[Dict[str, Any]] = None,
        pipeline: Optional[List[Dict[str, Any]]] = None,
        from_trash: bool = False,
        exposes: Optional[List[str]] = None,
        is_array: bool = False,
    ):
        self.filter = filter or {}
        self.pipeline = list(pipeline or [])
        self.from_trash = from_trash
        self.exposes = list(exposes or [])
        self.is_array = is_array

    def is_correlated(self) -> bool:
        return bool(self.exposes) or bool(self.pipeline)

    def __repr__(self):
        return (
            f"LookupOptions(filter={self.filter!r}, pipeline={self.pipeline!r}, "
            f"from_trash={self.from_trash!r}, exposes={self.exposes!r}, is_array={self.is_array!r})"
        )
