"""
Database configuration and connection management for MongoDB
"""
import logging
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING
from typing import Optional
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


class DatabaseConfig:
    """MongoDB database configuration"""

    def __init__(self):
        self.MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
        self.DATABASE_NAME = os.getenv("DATABASE_NAME", "transit_scheduler")
        self.client: Optional[AsyncIOMotorClient] = None
        self.database = None

    async def connect_db(self):
        """Connect to MongoDB"""
        try:
            self.client = AsyncIOMotorClient(self.MONGO_URI)
            self.database = self.client[self.DATABASE_NAME]
            # Test connection
            await self.client.admin.command('ping')
            print(f"✅ Connected to MongoDB: {self.DATABASE_NAME}")
        except Exception as e:
            print(f"❌ Error connecting to MongoDB: {e}")
            raise

    async def close_db(self):
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            print("✅ MongoDB connection closed")

    def get_collection(self, collection_name: str):
        """Get a specific collection"""
        if self.database is None:
            raise Exception("Database not connected")
        return self.database[collection_name]

    async def ensure_indexes(self):
        """Create the indexes the trip generator and lookups rely on"""
        trips = self.get_collection(Collections.TRIPS)
        # One trip per route, day and departure inside an organization
        await trips.create_index(
            [
                ("organization_id", ASCENDING),
                ("route_id", ASCENDING),
                ("trip_date", ASCENDING),
                ("scheduled_departure", ASCENDING),
            ],
            unique=True,
            name="trip_idempotency_key",
        )
        await trips.create_index([("vehicle_id", ASCENDING), ("trip_date", ASCENDING)])
        await trips.create_index([("driver_id", ASCENDING), ("trip_date", ASCENDING)])

        routes = self.get_collection(Collections.TRANSPORT_ROUTES)
        await routes.create_index(
            [("organization_id", ASCENDING), ("code", ASCENDING)],
            unique=True,
            name="route_code_per_org",
        )

        stops = self.get_collection(Collections.ROUTE_STOPS)
        await stops.create_index(
            [("organization_id", ASCENDING), ("route_id", ASCENDING), ("stop_order", ASCENDING)]
        )

        schedules = self.get_collection(Collections.ROUTE_SCHEDULES)
        await schedules.create_index([("organization_id", ASCENDING), ("route_id", ASCENDING)])
        logger.info("Indexes ensured on %s", self.DATABASE_NAME)

# Global database instance
db_config = DatabaseConfig()

# Collection names
class Collections:
    TRANSPORT_ROUTES = "transport_routes"
    ROUTE_SCHEDULES = "route_schedules"
    ROUTE_STOPS = "route_stops"
    TRIPS = "trips"
    VEHICLES = "vehicles"
