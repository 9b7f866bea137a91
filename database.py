from datetime import datetime

from bson.objectid import ObjectId
from pymongo import MongoClient

from config import Settings
from errors import NotFound


def connect(settings: Settings) -> MongoClient:
    # MongoClient connects lazily, nothing is sent until the first operation
    return MongoClient(settings.mongo_uri)


def parse_object_id(value: str) -> ObjectId:
    if not ObjectId.is_valid(value):
        raise NotFound(f"Invalid id: {value}")
    return ObjectId(value)


def serialize_doc(doc):
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.get("_id")
    if isinstance(_id, ObjectId):
        doc["_id"] = str(_id)
    # convert datetimes
    for k, v in list(doc.items()):
        if isinstance(v, datetime):
            doc[k] = v.isoformat()
    return doc
