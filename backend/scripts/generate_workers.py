"""
Generate synthetic migrant workers and optionally export their QR cards.
Run with: python -m scripts.generate_workers --count 25
Run with: python -m scripts.generate_workers --qr-dir ./qr  (write <id>-qr-code.png files)
"""

import argparse
import asyncio
import logging
import os
import random
from sqlalchemy import select, func
from medicare.database import engine, async_session, Base
from medicare.logging_config import setup_logging
from medicare.models.worker import Worker
from medicare.schemas.worker import WorkerCreate
from medicare.services.qr_service import qr_service
from medicare.services.worker_service import worker_service

logger = logging.getLogger("medicare.scripts.generate_workers")

FIRST_NAMES_F = [
    "Maria", "Aisha", "Priya", "Fatima", "Rosa", "Olga", "Amara", "Sonia",
    "Anita", "Lucia", "Nadia", "Elena", "Mei", "Siti", "Nur", "Ana",
]

FIRST_NAMES_M = [
    "Wei", "Mohammed", "Raj", "Carlos", "Ivan", "Ahmed", "Kwame", "Diego",
    "Omar", "Andrei", "Hassan", "Jin", "Mateo", "Rahul", "Tuan", "Bilal",
]

LAST_NAMES = [
    "Garcia", "Rodriguez", "Hernandez", "Lopez", "Nguyen", "Singh", "Ali", "Khan",
    "Okonkwo", "Santos", "Kowalski", "Ivanov", "Rahman", "Das", "Tran", "Mensah",
]


def generate_name(gender: str) -> str:
    first = random.choice(FIRST_NAMES_F if gender == "female" else FIRST_NAMES_M)
    return f"{first} {random.choice(LAST_NAMES)}"


async def generate(count: int, qr_dir: str = None):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        existing = await db.scalar(select(func.count(Worker.id))) or 0
        logger.info("Database has %d workers; generating %d more...", existing, count)

        created = []
        for _ in range(count):
            gender = random.choice(["male", "female", "other"])
            data = WorkerCreate(
                full_name=generate_name(gender if gender != "other" else random.choice(["male", "female"])),
                age=random.randint(18, 60),
                gender=gender,
            )
            worker = await worker_service.register(db, data, created_by=None)
            created.append(worker)
        await db.commit()
        logger.info("Created %d workers.", len(created))

    if qr_dir:
        os.makedirs(qr_dir, exist_ok=True)
        for worker in created:
            path = os.path.join(qr_dir, qr_service.download_filename(worker.worker_id))
            with open(path, "wb") as f:
                f.write(qr_service.encode_png(worker.worker_id, size=400))
        logger.info("Wrote %d QR codes to %s", len(created), qr_dir)

    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate synthetic migrant workers")
    parser.add_argument("--count", type=int, default=25, help="Number of workers to create")
    parser.add_argument("--qr-dir", default=None, help="Directory to write QR code PNGs into")
    args = parser.parse_args()
    setup_logging()
    asyncio.run(generate(args.count, args.qr_dir))
