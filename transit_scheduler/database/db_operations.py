"""
Database operations - Generic CRUD functions for all collections
"""
from typing import List, Dict, Optional, Any, Tuple
from bson import ObjectId
from bson.errors import InvalidId
from transit_scheduler.config.database import db_config
from datetime import datetime


def _id_filter(doc_id: str, organization_id: Optional[str] = None) -> Optional[Dict]:
    """Build an _id filter, optionally scoped to an organization. None if the id is malformed."""
    try:
        query: Dict[str, Any] = {"_id": ObjectId(doc_id)}
    except (InvalidId, TypeError):
        return None
    if organization_id is not None:
        query["organization_id"] = organization_id
    return query


class DBOperations:
    """Generic database operations for MongoDB collections"""

    @staticmethod
    async def get_all(
        collection_name: str,
        filter_query: Dict = None,
        skip: int = 0,
        limit: int = 100,
        sort: Optional[List[Tuple[str, int]]] = None,
    ) -> List[Dict]:
        """Get all documents from a collection with optional filtering"""
        collection = db_config.get_collection(collection_name)
        filter_query = filter_query or {}
        cursor = collection.find(filter_query, sort=sort, skip=skip, limit=limit)
        documents = await cursor.to_list(length=limit)
        return documents

    @staticmethod
    async def get_by_id(collection_name: str, doc_id: str, organization_id: Optional[str] = None) -> Optional[Dict]:
        """Get a single document by ID"""
        query = _id_filter(doc_id, organization_id)
        if query is None:
            return None
        collection = db_config.get_collection(collection_name)
        return await collection.find_one(query)

    @staticmethod
    async def get_one(collection_name: str, filter_query: Dict, projection: Optional[Dict] = None) -> Optional[Dict]:
        """Get a single document by filter query"""
        collection = db_config.get_collection(collection_name)
        document = await collection.find_one(filter_query, projection)
        return document

    @staticmethod
    async def create(collection_name: str, document: Dict) -> Dict:
        """Create a new document"""
        collection = db_config.get_collection(collection_name)
        document["created_at"] = datetime.utcnow()
        document["updated_at"] = datetime.utcnow()
        result = await collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    @staticmethod
    async def update(
        collection_name: str,
        doc_id: str,
        update_data: Dict,
        organization_id: Optional[str] = None,
    ) -> Optional[Dict]:
        """Update a document by ID"""
        query = _id_filter(doc_id, organization_id)
        if query is None:
            return None
        collection = db_config.get_collection(collection_name)
        update_data["updated_at"] = datetime.utcnow()
        result = await collection.find_one_and_update(
            query,
            {"$set": update_data},
            return_document=True
        )
        return result

    @staticmethod
    async def delete(collection_name: str, doc_id: str, organization_id: Optional[str] = None) -> bool:
        """Delete a document by ID"""
        query = _id_filter(doc_id, organization_id)
        if query is None:
            return False
        collection = db_config.get_collection(collection_name)
        result = await collection.delete_one(query)
        return result.deleted_count > 0

    @staticmethod
    async def delete_many(collection_name: str, filter_query: Dict) -> int:
        """Delete every document matching the filter"""
        collection = db_config.get_collection(collection_name)
        result = await collection.delete_many(filter_query)
        return result.deleted_count


db_ops = DBOperations()
