"""
Print the Kanban board of a user as the API currently serves it.
Run: python -m scripts.board_snapshot email password [search]
"""
import asyncio
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx

from app.core import config
from app.core.logging_config import setup_logging
from app.kanban import HttpApplicationRepository, KanbanBoard, Notifier


async def login(base_url: str, email: str, password: str) -> str:
    async with httpx.AsyncClient(base_url=base_url) as client:
        response = await client.post("/auth/login", data={"username": email, "password": password})
        response.raise_for_status()
        return response.json()["access_token"]


async def main(email: str, password: str, search: str = "") -> None:
    token = await login(config.JAMS_API_URL, email, password)
    notifier = Notifier(sink=lambda n: print(f"! {n.title}: {n.description}"))

    async with HttpApplicationRepository(config.JAMS_API_URL, token=token) as repository:
        board = KanbanBoard(repository, notifier)
        await board.mount()
        if search:
            await board.set_search(search)

        for column in board.columns():
            print(f"\n== {column.title} ({column.total_items}) page {column.page}/{max(column.total_pages, 1)}")
            if column.error and not column.loaded:
                print(f"   Could not load: {column.error}")
            elif column.empty:
                print("   No applications yet")
            for application in column.applications:
                print(f"   #{application.id} {application.company} - {application.position}")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python -m scripts.board_snapshot email password [search]")
        sys.exit(1)

    setup_logging("WARNING")
    asyncio.run(main(*sys.argv[1:4]))
