from spinecheck.models.kv import KeyValue

__all__ = ["KeyValue"]
