#!/usr/bin/env python3
"""
Initialize Cosmos DB Emulator with the LiveVote database and containers.

This script creates the required database and containers in the local Cosmos DB Emulator.
Run this once after starting the emulator to set up the local development environment.

Prerequisites:
1. Install Cosmos DB Emulator: https://aka.ms/cosmosdb-emulator
2. Start the emulator (it runs on https://localhost:8081)
3. Run this script: python scripts/init-cosmos-emulator.py

The emulator uses a well-known key that is safe for local development only.
"""

import asyncio
import sys
from pathlib import Path

# Add backend to path
backend_path = Path(__file__).parent.parent / "src" / "backend"
sys.path.insert(0, str(backend_path))

from azure.cosmos import PartitionKey
from azure.cosmos.aio import CosmosClient

from db.cosmos_session import PARTITION_KEYS

# Cosmos DB Emulator connection details (well-known credentials)
EMULATOR_ENDPOINT = "https://localhost:8081"
EMULATOR_KEY = "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
DATABASE_NAME = "livevote"


async def init_emulator() -> None:
    """Create the database and one container per document type."""
    print(f"Connecting to Cosmos DB Emulator at {EMULATOR_ENDPOINT}...")

    # Disable SSL verification for emulator's self-signed certificate
    client = CosmosClient(
        url=EMULATOR_ENDPOINT,
        credential=EMULATOR_KEY,
        connection_verify=False,
    )

    try:
        database = await client.create_database_if_not_exists(id=DATABASE_NAME)
        print(f"  Database '{DATABASE_NAME}' ready")

        for container_name, partition_key in PARTITION_KEYS.items():
            await database.create_container_if_not_exists(
                id=container_name,
                partition_key=PartitionKey(path=partition_key),
            )
            print(f"  Container '{container_name}' (partition: {partition_key})")

        print("\nEmulator initialization complete. Next steps:")
        print("  1. Set AZURE_COSMOS_CONNECTION_STRING and AZURE_COSMOS_DISABLE_SSL=true in src/backend/.env")
        print("  2. Seed groups: cd src/backend && python -m scripts.seed_groups")
        print("  3. Start the backend: uvicorn main:app --reload")
    except Exception as e:
        print(f"\nError: {e}")
        print("Make sure the emulator is running: https://localhost:8081/_explorer/index.html")
        raise
    finally:
        await client.close()


if __name__ == "__main__":
    asyncio.run(init_emulator())
