# elitehome/utils/object_ids.py

from bson import ObjectId
from bson.errors import InvalidId
from elitehome.utils.errors import BadRequestError

def parse_object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise BadRequestError(f"Invalid id: {value}")
